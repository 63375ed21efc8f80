from __future__ import annotations

import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

pd = pytest.importorskip("pandas")

from features import (
    InvalidDeviceError,
    estimate_time,
    format_count,
    format_duration,
    precision_comparison_dataframe,
)
from hardware import Device, PrecisionMode, load_precision_modes, lookup_precision

A100 = Device(name="A100 test", series="Ampere", architecture="Ampere", peak_tflops=19.5)
FP32 = PrecisionMode(id="fp32", label="FP32", multiplier=1.0)
INT8 = PrecisionMode(id="int8", label="INT8", multiplier=4.0)


def test_small_product_formats_in_nanoseconds():
    estimate = estimate_time(105, A100, FP32)

    assert estimate.seconds == pytest.approx(5.3846e-12, rel=1e-4)
    assert estimate.formatted == "5.385 ns"
    assert estimate.adjusted_tflops == 19.5


def test_int8_is_a_quarter_of_fp32():
    baseline = estimate_time(105, A100, FP32)
    quantized = estimate_time(105, A100, INT8)

    assert quantized.adjusted_tflops == 78.0
    assert quantized.seconds == baseline.seconds / 4


@pytest.mark.parametrize("precision_id", ["fp32", "fp16", "bf16", "int8", "int4", "fp64"])
def test_time_scales_with_inverse_multiplier(precision_id):
    precision = lookup_precision(precision_id)
    baseline = estimate_time(2 * 10**9, A100, FP32)
    scaled = estimate_time(2 * 10**9, A100, precision)
    assert scaled.seconds == pytest.approx(baseline.seconds / precision.multiplier)


@pytest.mark.parametrize("flops", [1, 105, 10**9, 3 * 10**15])
def test_units_describe_the_same_duration(flops):
    estimate = estimate_time(flops, A100, FP32)
    assert estimate.milliseconds == pytest.approx(estimate.seconds * 1e3)
    assert estimate.microseconds == pytest.approx(estimate.seconds * 1e6)
    assert estimate.nanoseconds == pytest.approx(estimate.seconds * 1e9)


def test_zero_flops_is_zero_seconds():
    estimate = estimate_time(0, A100, FP32)
    assert estimate.seconds == 0
    assert estimate.nanoseconds == 0
    assert estimate.formatted == "0.000000 s"


def test_non_positive_throughput_raises_invalid_device():
    broken = Device(name="broken", series="x", architecture="x", peak_tflops=0.0)
    with pytest.raises(InvalidDeviceError) as excinfo:
        estimate_time(100, broken, FP32)
    assert excinfo.value.device is broken


def test_negative_flops_rejected():
    with pytest.raises(ValueError):
        estimate_time(-1, A100, FP32)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (2.5, "2.500000 s"),
        (1.0, "1.000000 s"),
        (0.0125, "12.500000 ms"),
        (0.001, "1.000000 ms"),
        (3.2e-5, "32.000000 μs"),
        (4.2e-9, "4.200 ns"),
    ],
)
def test_unit_selection_order(seconds, expected):
    assert format_duration(seconds) == expected


def test_large_product_formats_in_seconds():
    # 10k x 10k x 10k on a 19.5 TFLOPS part is ~0.1 s, 100k cubed is ~100 s
    estimate = estimate_time(2 * 100_000**3, A100, FP32)
    assert estimate.formatted.endswith(" s")
    assert estimate.seconds > 1


@pytest.mark.parametrize(
    "value, expected",
    [
        (105, "105"),
        (999, "999"),
        (1_000, "1.00K"),
        (1_500_000, "1.50M"),
        (2_000_000_000, "2.00B"),
        (1_999_900_000_000, "2.00T"),
    ],
)
def test_format_count(value, expected):
    assert format_count(value) == expected


def test_precision_comparison_dataframe_has_one_row_per_mode():
    modes = load_precision_modes()
    df = precision_comparison_dataframe(105, A100, modes)

    assert isinstance(df, pd.DataFrame)
    assert len(df) == len(modes)
    fp32_row = df[df["Multiplier"] == 1.0].iloc[0]
    assert fp32_row["Estimate"] == "5.385 ns"
    assert df["Adjusted TFLOPS"].max() == pytest.approx(19.5 * 8.0)
