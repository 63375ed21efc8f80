from __future__ import annotations

from features import PARALLELISM_STRATEGIES, comparison_table, gpu_layout, lookup_strategy, pipeline_schedule

from . import DashboardState, register_tab

_NUM_GPUS = 4


@register_tab("parallelism_types", "Parallelism Types")
def render(state: DashboardState) -> None:
    st = state.st

    st.markdown("### Parallelism strategies")
    st.caption("How training work is split across GPUs, and what each split costs.")

    ids = [s.id for s in PARALLELISM_STRATEGIES]
    strategy_id = st.radio(
        "Strategy",
        ids,
        key="parallelism",
        horizontal=True,
        format_func=lambda sid: lookup_strategy(sid).name,
    )
    strategy = lookup_strategy(strategy_id)

    st.markdown(f"#### {strategy.name} ({strategy.short_name})")
    st.write(strategy.description)

    c_pros, c_cons, c_uses = st.columns(3)
    with c_pros:
        st.markdown("**Pros**")
        for item in strategy.pros:
            st.markdown(f"- ✅ {item}")
    with c_cons:
        st.markdown("**Cons**")
        for item in strategy.cons:
            st.markdown(f"- ⚠️ {item}")
    with c_uses:
        st.markdown("**Use cases**")
        for item in strategy.use_cases:
            st.markdown(f"- {item}")
    st.caption("Frameworks: " + ", ".join(strategy.frameworks))

    st.markdown("##### Layout on 4 GPUs")
    for idx, (col, text) in enumerate(zip(st.columns(_NUM_GPUS), gpu_layout(strategy.id, _NUM_GPUS))):
        col.info(f"**GPU {idx}**\n\n{text}")
    if strategy.id == "data":
        st.caption("Gradients are combined with All-Reduce after every backward pass.")
    elif strategy.id == "pipeline":
        st.dataframe(pipeline_schedule(_NUM_GPUS), use_container_width=True)

    st.markdown("##### Comparison")
    table = comparison_table()
    # selected strategy first
    ordered = [strategy.short_name] + [c for c in table.columns if c != strategy.short_name]
    st.dataframe(table[ordered], use_container_width=True)
