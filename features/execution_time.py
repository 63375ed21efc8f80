"""Convert FLOP counts into ideal execution times on a catalog device."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from hardware.precision import PrecisionMode
from hardware.registry import Device

from .errors import InvalidDeviceError


@dataclass(frozen=True)
class ExecutionTimeEstimate:
    """The same duration expressed in every unit the UI shows."""

    seconds: float
    milliseconds: float
    microseconds: float
    nanoseconds: float
    formatted: str
    adjusted_tflops: float


def adjusted_throughput(device: Device, precision: PrecisionMode) -> float:
    """Peak TFLOPS of ``device`` scaled by the precision multiplier."""

    if not device.peak_tflops > 0:
        raise InvalidDeviceError(device)
    return float(device.peak_tflops) * float(precision.multiplier)


def format_duration(seconds: float) -> str:
    """Pick the largest unit whose value is at least one."""

    milliseconds = seconds * 1e3
    microseconds = seconds * 1e6
    if seconds >= 1:
        return f"{seconds:.6f} s"
    if milliseconds >= 1:
        return f"{milliseconds:.6f} ms"
    if microseconds >= 1:
        return f"{microseconds:.6f} μs"
    return f"{seconds * 1e9:.3f} ns"


def estimate_time(total_flops: float, device: Device, precision: PrecisionMode) -> ExecutionTimeEstimate:
    """Estimate wall-clock time assuming the device sustains its peak.

    ``seconds = total_flops / (peak_tflops * multiplier * 1e12)``. A zero
    FLOP count is valid and formats as ``"0.000000 s"``.

    Raises
    ------
    InvalidDeviceError
        If ``device.peak_tflops`` is not positive.
    ValueError
        If ``total_flops`` is negative.
    """

    if total_flops < 0:
        raise ValueError(f"total_flops must be non-negative, got {total_flops}")
    tflops = adjusted_throughput(device, precision)

    seconds = float(total_flops) / (tflops * 1e12)
    formatted = "0.000000 s" if total_flops == 0 else format_duration(seconds)
    return ExecutionTimeEstimate(
        seconds=seconds,
        milliseconds=seconds * 1e3,
        microseconds=seconds * 1e6,
        nanoseconds=seconds * 1e9,
        formatted=formatted,
        adjusted_tflops=tflops,
    )


def format_count(num: float) -> str:
    """Compact count with a T/B/M/K suffix, e.g. ``1.50M``."""

    if num >= 1e12:
        return f"{num / 1e12:.2f}T"
    if num >= 1e9:
        return f"{num / 1e9:.2f}B"
    if num >= 1e6:
        return f"{num / 1e6:.2f}M"
    if num >= 1e3:
        return f"{num / 1e3:.2f}K"
    return str(num)


def precision_comparison_dataframe(
    total_flops: float,
    device: Device,
    precisions: Iterable[PrecisionMode],
) -> pd.DataFrame:
    """One row per precision with the adjusted throughput and estimate."""

    rows = []
    for precision in precisions:
        estimate = estimate_time(total_flops, device, precision)
        rows.append(
            {
                "Precision": precision.label,
                "Multiplier": precision.multiplier,
                "Adjusted TFLOPS": estimate.adjusted_tflops,
                "Time (s)": estimate.seconds,
                "Time (μs)": estimate.microseconds,
                "Estimate": estimate.formatted,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["Precision", "Multiplier", "Adjusted TFLOPS", "Time (s)", "Time (μs)", "Estimate"],
    )


__all__ = [
    "ExecutionTimeEstimate",
    "adjusted_throughput",
    "estimate_time",
    "format_count",
    "format_duration",
    "precision_comparison_dataframe",
]
