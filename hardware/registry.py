"""Registry utilities for the accelerator capability catalog."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import json
import logging
from importlib import resources
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_CATALOG_FILENAME = "gpus.json"


class NotFoundError(KeyError):
    """Raised when a catalog lookup has no matching entry."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(key)
        self.kind = kind
        self.key = key

    def __str__(self) -> str:
        return f"Unknown {self.kind} '{self.key}'"


@dataclass(frozen=True)
class Device:
    """A catalog accelerator with its published FP32 peak throughput."""

    name: str
    series: str
    architecture: str
    peak_tflops: float
    memory: Optional[str] = None
    release_year: Optional[int] = None

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "Device":
        """Instantiate a :class:`Device` from one catalog entry."""

        name = cfg.get("name")
        if not isinstance(name, str) or not name:
            raise TypeError("Each catalog device requires a string 'name'.")
        for key in ("series", "architecture"):
            if not isinstance(cfg.get(key), str):
                raise TypeError(f"Device '{name}' requires a string '{key}'.")
        try:
            peak = float(cfg["peak_tflops"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(
                f"Device '{name}' must provide a numeric 'peak_tflops', got {cfg.get('peak_tflops')!r}."
            ) from exc
        if not peak > 0:
            raise ValueError(f"Device '{name}' must have a positive 'peak_tflops', got {peak}.")
        memory = cfg.get("memory")
        release_year = cfg.get("release_year")
        return cls(
            name=name,
            series=str(cfg["series"]),
            architecture=str(cfg["architecture"]),
            peak_tflops=peak,
            memory=str(memory) if memory is not None else None,
            release_year=int(release_year) if release_year is not None else None,
        )


def read_json_resource(filename: str) -> Any:
    """Return the decoded JSON document shipped next to this module."""

    package_files = resources.files(__package__)
    raw_text = package_files.joinpath(filename).read_text(encoding="utf-8")
    return json.loads(raw_text)


_CATALOG_CACHE: "OrderedDict[str, Device]" | None = None


def _load_catalog_from_file() -> "OrderedDict[str, Device]":
    loaded = read_json_resource(_CATALOG_FILENAME)
    if not isinstance(loaded, list):  # pragma: no cover - configuration error
        raise TypeError("Device catalog must be a list of objects.")

    catalog: "OrderedDict[str, Device]" = OrderedDict()
    for entry in loaded:
        if not isinstance(entry, Mapping):
            raise TypeError(f"Catalog entries must be objects, got {entry!r}.")
        device = Device.from_config(entry)
        if device.name in catalog:
            raise ValueError(f"Duplicate device name '{device.name}' in catalog.")
        catalog[device.name] = device
    if not catalog:
        raise ValueError("No devices were loaded from the catalog.")
    logger.debug("Loaded %d devices from %s", len(catalog), _CATALOG_FILENAME)
    return catalog


def _catalog() -> "OrderedDict[str, Device]":
    global _CATALOG_CACHE
    if _CATALOG_CACHE is None:
        _CATALOG_CACHE = _load_catalog_from_file()
    return _CATALOG_CACHE


def load_device_catalog() -> Tuple[Device, ...]:
    """Return every catalog device in data-file order."""

    return tuple(_catalog().values())


def lookup_device(name: str) -> Device:
    """Look up a device by its unique name.

    Raises
    ------
    NotFoundError
        If ``name`` is not in the catalog.
    """

    try:
        return _catalog()[name]
    except KeyError:
        raise NotFoundError("device", name) from None


def default_device() -> Device:
    """Return the device selected when the calculator first opens."""

    return next(iter(_catalog().values()))


def _group_by_series(devices: List[Device]) -> "OrderedDict[str, Tuple[Device, ...]]":
    grouped: "OrderedDict[str, List[Device]]" = OrderedDict()
    for device in devices:
        grouped.setdefault(device.series, []).append(device)
    # sorted() is stable: equal throughputs keep catalog order
    return OrderedDict(
        (series, tuple(sorted(items, key=lambda d: d.peak_tflops, reverse=True)))
        for series, items in grouped.items()
    )


def list_devices_grouped_by_series() -> "OrderedDict[str, Tuple[Device, ...]]":
    """Group devices by series, fastest first within each group.

    Series appear in the order they first occur in the catalog file.
    """

    return _group_by_series(list(_catalog().values()))


def device_option_label(device: Device) -> str:
    """Return the dropdown label, e.g. ``"H100 PCIe (67 TFLOPS, 80GB)"``."""

    details = f"{device.peak_tflops:g} TFLOPS"
    if device.memory:
        details += f", {device.memory}"
    return f"{device.name} ({details})"


def search_devices(query: str) -> "OrderedDict[str, Tuple[Device, ...]]":
    """Filter the grouped catalog by a case-insensitive substring.

    A device matches when ``query`` occurs in its option label, its name or
    its series. Groups left without matches are dropped. A blank query
    returns the full grouping.
    """

    needle = query.strip().lower()
    if not needle:
        return list_devices_grouped_by_series()
    matches = [
        device
        for device in _catalog().values()
        if needle in device_option_label(device).lower()
        or needle in device.name.lower()
        or needle in device.series.lower()
    ]
    return _group_by_series(matches)


def catalog_summary() -> Dict[str, int]:
    """Return the number of devices per series for UI captions."""

    return {series: len(items) for series, items in list_devices_grouped_by_series().items()}


__all__ = [
    "Device",
    "NotFoundError",
    "catalog_summary",
    "default_device",
    "device_option_label",
    "list_devices_grouped_by_series",
    "load_device_catalog",
    "lookup_device",
    "read_json_resource",
    "search_devices",
]
