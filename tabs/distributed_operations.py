from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np
import plotly.express as px

from actions.state_updates import advance_flow_step, rewind_flow_step, select_collective
from features import (
    COLLECTIVE_OPERATIONS,
    CollectiveError,
    CollectiveKind,
    describe_operation,
    example_buffers,
    flow_steps,
    reduce_ops,
    simulate_collective,
)
from state.app_state import AppState, AppStateManager

from . import DashboardState, register_tab

logger = logging.getLogger(__name__)

_WORLD_SIZE = 4


def _manager(session_state: Any) -> AppStateManager:
    return AppStateManager(AppState.from_mapping(session_state))


def _on_select(session_state: Any) -> None:
    manager = _manager(session_state)
    select_collective(manager, session_state["collective_choice"])
    session_state["collective"] = manager.get("collective")
    session_state["flow_step"] = manager.get("flow_step")


def _on_next(session_state: Any, total: int) -> None:
    session_state["flow_step"] = advance_flow_step(_manager(session_state), total)


def _on_prev(session_state: Any) -> None:
    session_state["flow_step"] = rewind_flow_step(_manager(session_state))


def _render_buffer(container: Any, title: str, buffer: Optional[np.ndarray]) -> None:
    container.markdown(f"**{title}**")
    if buffer is None:
        container.caption("(nothing)")
    elif buffer.ndim == 3:
        # gathered stack: one block per source rank
        for rank, block in enumerate(buffer):
            container.caption(f"from GPU {rank}")
            container.dataframe(block, hide_index=True)
    else:
        container.dataframe(buffer, hide_index=True)


@register_tab("distributed_operations", "Distributed Operations")
def render(state: DashboardState) -> None:
    st = state.st
    session_state = state.session_state

    st.markdown("### Distributed GPU operations")
    st.caption("Collective communication operations used in distributed deep learning.")

    kinds = [op.kind.value for op in COLLECTIVE_OPERATIONS]
    current = session_state.get("collective", kinds[0])
    if current not in kinds:
        current = kinds[0]
    session_state.setdefault("collective_choice", current)
    choice = st.radio(
        "Operation",
        kinds,
        key="collective_choice",
        horizontal=True,
        format_func=lambda k: describe_operation(k).name,
        on_change=_on_select,
        args=(session_state,),
    )
    kind = CollectiveKind(choice)
    operation = describe_operation(kind)

    st.markdown(f"#### {operation.name}")
    st.write(operation.description)
    st.info(f"**Use case:** {operation.use_case}")

    c_root, c_op = st.columns(2)
    root = 0
    if kind.is_rooted:
        root = int(
            c_root.selectbox(
                "Root GPU",
                list(range(_WORLD_SIZE)),
                key="collective_root",
                format_func=lambda r: f"GPU {r}",
            )
        )
    op = "sum"
    if kind in (CollectiveKind.REDUCE, CollectiveKind.ALL_REDUCE):
        op = c_op.selectbox("Reduction", list(reduce_ops()), key="reduce_op")

    buffers = example_buffers(kind)
    if kind in (CollectiveKind.BROADCAST, CollectiveKind.SCATTER) and root != 0:
        buffers[root], buffers[0] = buffers[0], None

    try:
        result = simulate_collective(kind, buffers, root=root, op=op)
        steps = flow_steps(kind, _WORLD_SIZE, root=root, op=op)
    except CollectiveError as exc:
        logger.info("Collective simulation rejected: %s", exc)
        st.error(str(exc))
        return

    operation = operation.with_reduction(op)
    st.markdown(f"**Formula:** `{operation.formula}` · operation: `{operation.operation_label}`")

    st.markdown("##### Before")
    cols = st.columns(_WORLD_SIZE)
    for rank, col in enumerate(cols):
        _render_buffer(col, f"GPU {rank}" + (" (root)" if kind.is_rooted and rank == root else ""), result.inputs[rank])

    st.markdown("##### Step-by-step flow")
    total = len(steps)
    step = min(int(session_state.get("flow_step", 0)), total)
    b_prev, b_next, _ = st.columns([1, 1, 4])
    b_prev.button("◀ Previous", on_click=_on_prev, args=(session_state,), disabled=step == 0)
    b_next.button("Next ▶", on_click=_on_next, args=(session_state, total), disabled=step >= total)
    st.progress(step / total if total else 1.0, text=f"Step {step} of {total}")
    for idx, flow in enumerate(steps):
        marker = "✅" if idx < step else ("▶️" if idx == step else "⬜")
        suffix = f" ({flow.operation})" if flow.operation else ""
        st.markdown(f"{marker} {idx + 1}. {flow.source} → {flow.target}: `{flow.label}`{suffix}")

    if step < total:
        st.caption("Step through the flow to reveal the final buffers.")
        return

    st.markdown("##### After")
    cols = st.columns(_WORLD_SIZE)
    for rank, col in enumerate(cols):
        _render_buffer(col, f"GPU {rank}", result.outputs[rank])

    receivers = result.receivers()
    first = result.outputs[receivers[0]]
    if first is not None and first.ndim == 2:
        fig = px.imshow(
            first,
            text_auto=True,
            labels=dict(x="column", y="row", color="value"),
            title=f"{operation.name} result on GPU {receivers[0]}",
        )
        st.plotly_chart(fig, use_container_width=True)

    with st.expander("When to use", expanded=False):
        for note in operation.when_to_use:
            st.markdown(f"- {note}")
