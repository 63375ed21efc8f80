from __future__ import annotations

import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from hardware import (
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


def test_catalog_loads_every_entry_with_positive_throughput():
    devices = load_device_catalog()
    assert len(devices) == 91
    assert all(d.peak_tflops > 0 for d in devices)
    assert len({d.name for d in devices}) == len(devices)


def test_lookup_device_returns_catalog_entry():
    device = lookup_device("A100 SXM 80GB")
    assert device.peak_tflops == 19.5
    assert device.series == "Ampere"
    assert device.memory == "80GB"
    assert device.release_year == 2020


def test_lookup_unknown_device_raises_not_found():
    with pytest.raises(NotFoundError) as excinfo:
        lookup_device("Voodoo 5 6000")
    assert isinstance(excinfo.value, KeyError)
    assert excinfo.value.kind == "device"
    assert "Voodoo 5 6000" in str(excinfo.value)


def test_default_device_is_first_catalog_entry():
    assert default_device().name == "H100 PCIe"


def test_groups_follow_catalog_order_and_sort_by_throughput():
    grouped = list_devices_grouped_by_series()
    assert list(grouped)[:3] == ["Hopper", "Ampere", "Ada Lovelace"]
    for devices in grouped.values():
        tflops = [d.peak_tflops for d in devices]
        assert tflops == sorted(tflops, reverse=True)
    assert sum(len(v) for v in grouped.values()) == len(load_device_catalog())


def test_equal_throughput_keeps_catalog_order():
    hopper = [d.name for d in list_devices_grouped_by_series()["Hopper"]]
    assert hopper == ["H100 NVL", "H100 PCIe", "H100 SXM"]


def test_grouping_is_stable_across_calls():
    assert list_devices_grouped_by_series() == list_devices_grouped_by_series()


def test_option_label_matches_dropdown_format():
    assert device_option_label(lookup_device("H100 PCIe")) == "H100 PCIe (67 TFLOPS, 80GB)"
    assert device_option_label(lookup_device("RTX 4090")) == "RTX 4090 (83 TFLOPS, 24GB)"
    bare = Device(name="X", series="S", architecture="A", peak_tflops=1.5)
    assert device_option_label(bare) == "X (1.5 TFLOPS)"


def test_search_matches_name_series_and_label_case_insensitively():
    by_name = search_devices("rtx 4090")
    assert [d.name for devices in by_name.values() for d in devices] == ["RTX 4090"]

    by_series = search_devices("jetson")
    assert list(by_series) == ["Jetson"]
    assert len(by_series["Jetson"]) == 3

    by_memory = search_devices("188gb")
    assert [d.name for d in by_memory["Hopper"]] == ["H100 NVL"]


def test_search_with_blank_query_returns_everything():
    assert search_devices("  ") == list_devices_grouped_by_series()


def test_search_without_matches_is_empty():
    assert search_devices("no such accelerator") == {}


def test_catalog_summary_counts_per_series():
    summary = catalog_summary()
    assert summary["Hopper"] == 3
    assert summary["Tesla"] == 7
    assert sum(summary.values()) == 91


@pytest.mark.parametrize(
    "entry, error",
    [
        ({"series": "S", "architecture": "A", "peak_tflops": 1}, TypeError),
        ({"name": "X", "architecture": "A", "peak_tflops": 1}, TypeError),
        ({"name": "X", "series": "S", "architecture": "A"}, ValueError),
        ({"name": "X", "series": "S", "architecture": "A", "peak_tflops": 0}, ValueError),
        ({"name": "X", "series": "S", "architecture": "A", "peak_tflops": "fast"}, ValueError),
    ],
)
def test_device_from_config_validates_entries(entry, error):
    with pytest.raises(error):
        Device.from_config(entry)


def test_devices_are_immutable():
    device = lookup_device("L4")
    with pytest.raises(AttributeError):
        device.peak_tflops = 1000.0  # type: ignore[misc]
