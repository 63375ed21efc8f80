"""Helpers to mutate :class:`~state.app_state.AppState` instances.

They mimic the write semantics of ``st.session_state`` so tab logic can be
tested without importing Streamlit.
"""
from __future__ import annotations

from state.app_state import AppState, AppStateManager, app_state_defaults

CALCULATOR_KEYS = ("a_rows", "a_cols", "b_rows", "b_cols", "device_name", "device_query", "precision_id")


def reset_calculator(manager: AppStateManager) -> AppState:
    """Restore the calculator inputs to their defaults."""

    defaults = app_state_defaults()
    return manager.update({key: defaults[key] for key in CALCULATOR_KEYS})


def select_collective(manager: AppStateManager, collective: str) -> AppState:
    """Switch the Distributed Operations tab to ``collective`` and rewind it."""

    return manager.update(collective=collective, flow_step=0)


def advance_flow_step(manager: AppStateManager, total_steps: int) -> int:
    """Move one step forward, stopping at ``total_steps``."""

    step = min(int(manager.get("flow_step", 0)) + 1, max(0, int(total_steps)))
    manager.set("flow_step", step)
    return step


def rewind_flow_step(manager: AppStateManager) -> int:
    """Move one step back, stopping at zero."""

    step = max(int(manager.get("flow_step", 0)) - 1, 0)
    manager.set("flow_step", step)
    return step


__all__ = [
    "CALCULATOR_KEYS",
    "advance_flow_step",
    "reset_calculator",
    "rewind_flow_step",
    "select_collective",
]
