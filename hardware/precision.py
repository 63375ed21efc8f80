"""Numeric precision modes and their throughput multipliers."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
from typing import Any, Mapping, Tuple

from .registry import NotFoundError, read_json_resource

logger = logging.getLogger(__name__)

_PRECISIONS_FILENAME = "precisions.json"
DEFAULT_PRECISION_ID = "fp32"


@dataclass(frozen=True)
class PrecisionMode:
    """Throughput multiplier of a number format relative to FP32."""

    id: str
    label: str
    multiplier: float
    description: str = ""

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "PrecisionMode":
        """Instantiate a :class:`PrecisionMode` from one table entry."""

        precision_id = cfg.get("id")
        if not isinstance(precision_id, str) or not precision_id:
            raise TypeError("Each precision mode requires a string 'id'.")
        try:
            multiplier = float(cfg["multiplier"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(
                f"Precision '{precision_id}' must provide a numeric 'multiplier'."
            ) from exc
        if not multiplier > 0:
            raise ValueError(
                f"Precision '{precision_id}' must have a positive 'multiplier', got {multiplier}."
            )
        return cls(
            id=precision_id,
            label=str(cfg.get("label", precision_id)),
            multiplier=multiplier,
            description=str(cfg.get("description", "")),
        )


_PRECISIONS_CACHE: "OrderedDict[str, PrecisionMode]" | None = None


def _load_precisions_from_file() -> "OrderedDict[str, PrecisionMode]":
    loaded = read_json_resource(_PRECISIONS_FILENAME)
    if not isinstance(loaded, list):  # pragma: no cover - configuration error
        raise TypeError("Precision table must be a list of objects.")

    modes: "OrderedDict[str, PrecisionMode]" = OrderedDict()
    for entry in loaded:
        mode = PrecisionMode.from_config(entry)
        if mode.id in modes:
            raise ValueError(f"Duplicate precision id '{mode.id}'.")
        modes[mode.id] = mode
    if DEFAULT_PRECISION_ID not in modes:
        raise ValueError(f"Precision table must define '{DEFAULT_PRECISION_ID}'.")
    logger.debug("Loaded %d precision modes", len(modes))
    return modes


def _precisions() -> "OrderedDict[str, PrecisionMode]":
    global _PRECISIONS_CACHE
    if _PRECISIONS_CACHE is None:
        _PRECISIONS_CACHE = _load_precisions_from_file()
    return _PRECISIONS_CACHE


def load_precision_modes() -> Tuple[PrecisionMode, ...]:
    """Return all precision modes in table order."""

    return tuple(_precisions().values())


def lookup_precision(precision_id: str) -> PrecisionMode:
    """Look up a precision mode by id, raising :class:`NotFoundError`."""

    try:
        return _precisions()[precision_id]
    except KeyError:
        raise NotFoundError("precision", precision_id) from None


def default_precision() -> PrecisionMode:
    return _precisions()[DEFAULT_PRECISION_ID]


__all__ = [
    "DEFAULT_PRECISION_ID",
    "PrecisionMode",
    "default_precision",
    "load_precision_modes",
    "lookup_precision",
]
