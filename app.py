"""Streamlit UI for the FLOPs Master calculator and distributed-training guide."""

from __future__ import annotations

import logging
import os

import streamlit as st

from components.header import render_header
from hardware import load_device_catalog
from state.app_state import ensure_session_state_defaults
from tabs import DashboardState, render_tab_group

_LOG_LEVEL_ENV = "FLOPS_MASTER_LOG_LEVEL"


def _configure_logging() -> None:
    level_name = os.environ.get(_LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Render the header and every registered tab."""

    _configure_logging()
    st.set_page_config(page_title="FLOPs Master", layout="wide")
    render_header(
        "FLOPs Master",
        description=(
            "Matrix multiplication FLOPs calculator & distributed computing guide · "
            f"{len(load_device_catalog())} GPUs in the catalog"
        ),
        help_markdown=(
            "- **FLOPs Calculator**: enter two matrix shapes, pick a GPU and a precision.\n"
            "- **Distributed Operations**: step through collective operations on four GPUs.\n"
            "- **Parallelism Types**: compare ways of splitting training across GPUs.\n\n"
            "Times assume peak throughput; real kernels reach a fraction of it."
        ),
    )
    ensure_session_state_defaults(st.session_state)
    render_tab_group(DashboardState(st=st, session_state=st.session_state))


if __name__ == "__main__":
    main()


__all__ = ["main"]
