from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import plotly.express as px

from actions.state_updates import CALCULATOR_KEYS, reset_calculator
from features import (
    FlopsMasterError,
    MatrixShape,
    compute_flops,
    estimate_time,
    format_count,
    precision_comparison_dataframe,
)
from hardware import (
    Device,
    NotFoundError,
    catalog_summary,
    default_device,
    default_precision,
    device_option_label,
    list_devices_grouped_by_series,
    load_precision_modes,
    lookup_device,
    lookup_precision,
    search_devices,
)
from state.app_state import AppState, AppStateManager

from . import DashboardState, register_tab

logger = logging.getLogger(__name__)

_HELP = """
For `A (m×n) × B (n×p)` each of the `m·p` output elements needs `n`
multiplications and `n−1` additions:

- Multiplications = `m·p·n`
- Additions = `m·p·(n−1)`
- Total FLOPs = multiplications + additions

Execution time assumes the selected GPU sustains its peak FP32 throughput,
scaled by the precision multiplier: `time = FLOPs / (TFLOPS × multiplier × 10¹²)`.
This is an ideal lower bound, not a benchmark.
"""


def series_caption(grouped: Mapping[str, Sequence[Device]]) -> str:
    """Matches per series against the catalog size, e.g. ``"Hopper 3/3 · Ampere 1/12"``."""

    totals = catalog_summary()
    return " · ".join(f"{series} {len(devices)}/{totals[series]}" for series, devices in grouped.items())


def _on_reset(session_state: Any) -> None:
    manager = AppStateManager(AppState.from_mapping(session_state))
    reset_calculator(manager)
    for key in CALCULATOR_KEYS:
        session_state[key] = manager.get(key)


@register_tab("flops_calculator", "FLOPs Calculator")
def render(state: DashboardState) -> None:
    st = state.st
    session_state = state.session_state

    with st.expander("How the calculation works", expanded=False):
        st.markdown(_HELP)
    st.button("Reset inputs", on_click=_on_reset, args=(session_state,))

    col_a, col_b = st.columns(2)
    with col_a:
        st.subheader("Matrix A")
        st.number_input("Rows (m)", min_value=1, step=1, key="a_rows")
        st.number_input("Columns (n)", min_value=1, step=1, key="a_cols")
    with col_b:
        st.subheader("Matrix B")
        st.number_input("Rows (n)", min_value=1, step=1, key="b_rows")
        st.number_input("Columns (p)", min_value=1, step=1, key="b_cols")

    st.subheader("Hardware")
    c_query, c_device, c_precision = st.columns([1, 2, 2])
    query = c_query.text_input("Search GPUs", key="device_query", placeholder="e.g. A100, RTX 40")
    grouped = search_devices(query)
    if not grouped:
        st.warning(f"No GPU matches '{query}'. Showing the full catalog.")
        grouped = list_devices_grouped_by_series()
    options = [device.name for devices in grouped.values() for device in devices]

    if session_state.get("device_name") not in options:
        # A stale or filtered-out selection falls back to the first match.
        session_state["device_name"] = options[0]
    device_name = c_device.selectbox(
        "GPU",
        options,
        key="device_name",
        format_func=lambda name: f"{lookup_device(name).series} · {device_option_label(lookup_device(name))}",
    )
    c_device.caption(series_caption(grouped))
    precisions = load_precision_modes()
    precision_id = c_precision.selectbox(
        "Precision",
        [p.id for p in precisions],
        key="precision_id",
        format_func=lambda pid: lookup_precision(pid).label,
    )

    try:
        device = lookup_device(device_name)
        precision = lookup_precision(precision_id)
    except NotFoundError as exc:
        logger.info("Falling back to default selection: %s", exc)
        st.warning(f"{exc}. Using the default selection instead.")
        device, precision = default_device(), default_precision()

    c_precision.caption(precision.description)

    try:
        a = MatrixShape.from_inputs(session_state.get("a_rows"), session_state.get("a_cols"))
        b = MatrixShape.from_inputs(session_state.get("b_rows"), session_state.get("b_cols"))
        result = compute_flops(a, b)
        estimate = estimate_time(result.total_flops, device, precision)
    except FlopsMasterError as exc:
        logger.info("Rejected calculator input: %s", exc)
        st.error(f"⚠️ {exc}")
        return

    st.subheader("Results")
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total FLOPs", format_count(result.total_flops), help=f"{result.total_flops:,}")
    m2.metric("Multiplications", format_count(result.multiplications), help=f"{result.multiplications:,}")
    m3.metric("Additions", format_count(result.additions), help=f"{result.additions:,}")
    m4.metric("Output shape", str(result.output_shape))

    st.markdown(
        f"`{a.rows}×{a.cols}` × `{b.rows}×{b.cols}` → `{result.output_shape}`: "
        f"{a.rows}·{b.cols}·{a.cols} = **{result.multiplications:,}** multiplications, "
        f"{a.rows}·{b.cols}·{a.cols - 1} = **{result.additions:,}** additions."
    )

    t1, t2, t3 = st.columns(3)
    t1.metric("Estimated time", estimate.formatted)
    t2.metric("Base TFLOPS (FP32)", f"{device.peak_tflops:g}")
    t3.metric("Adjusted TFLOPS", f"{estimate.adjusted_tflops:.2f}", help=precision.label)
    st.caption(
        f"{device.name} · {device.architecture}"
        + (f" · {device.memory}" if device.memory else "")
        + (f" · {device.release_year}" if device.release_year else "")
        + f" | seconds={estimate.seconds:.6e}, ms={estimate.milliseconds:.6e}, "
        f"μs={estimate.microseconds:.6e}, ns={estimate.nanoseconds:.6e}"
    )

    with st.expander("Compare precisions on this GPU", expanded=False):
        df = precision_comparison_dataframe(result.total_flops, device, precisions)
        fig = px.bar(
            df,
            x="Precision",
            y="Time (μs)",
            text="Estimate",
            title=f"Estimated time on {device.name}",
        )
        st.plotly_chart(fig, use_container_width=True)
        st.dataframe(df, use_container_width=True, hide_index=True)
