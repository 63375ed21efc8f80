"""Static accelerator catalog and precision table."""

from .precision import (
    DEFAULT_PRECISION_ID,
    PrecisionMode,
    default_precision,
    load_precision_modes,
    lookup_precision,
)
from .registry import (
    Device,
    NotFoundError,
    catalog_summary,
    default_device,
    device_option_label,
    list_devices_grouped_by_series,
    load_device_catalog,
    lookup_device,
    search_devices,
)

__all__ = [
    "DEFAULT_PRECISION_ID",
    "Device",
    "NotFoundError",
    "PrecisionMode",
    "catalog_summary",
    "default_device",
    "default_precision",
    "device_option_label",
    "list_devices_grouped_by_series",
    "load_device_catalog",
    "load_precision_modes",
    "lookup_device",
    "lookup_precision",
    "search_devices",
]
