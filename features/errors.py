"""Exceptions raised by the calculator core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from hardware.registry import Device

    from .flops import MatrixShape


class FlopsMasterError(Exception):
    """Base class for errors the UI reports as validation messages."""


class ShapeError(FlopsMasterError, ValueError):
    """Two matrix shapes cannot be multiplied, or a dimension is invalid."""

    def __init__(self, message: str, a: "MatrixShape | Any" = None, b: "MatrixShape | Any" = None) -> None:
        super().__init__(message)
        self.a = a
        self.b = b


class InvalidDeviceError(FlopsMasterError, ValueError):
    """A device reports a non-positive peak throughput."""

    def __init__(self, device: "Device") -> None:
        super().__init__(
            f"Device '{device.name}' has non-positive peak throughput ({device.peak_tflops} TFLOPS)"
        )
        self.device = device


__all__ = ["FlopsMasterError", "InvalidDeviceError", "ShapeError"]
