"""Registration helpers for dashboard tabs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple


@dataclass
class DashboardState:
    """Objects every tab needs for rendering."""

    st: Any
    session_state: Any


@dataclass
class _TabDefinition:
    name: str
    title: str
    render: Callable[[DashboardState], None]


_registry: Dict[str, _TabDefinition] = {}


def register_tab(
    name: str, title: str
) -> Callable[[Callable[[DashboardState], None]], Callable[[DashboardState], None]]:
    """Decorator used by tab modules to register themselves."""

    def decorator(func: Callable[[DashboardState], None]) -> Callable[[DashboardState], None]:
        if name in _registry:
            raise ValueError(f"Tab '{name}' already registered")
        _registry[name] = _TabDefinition(name=name, title=title, render=func)
        return func

    return decorator


def get_registered_tabs() -> List[_TabDefinition]:
    """Return registered tab definitions in registration order."""

    return list(_registry.values())


def render_tab_group(
    state: DashboardState,
    *,
    tabs: Optional[Sequence[_TabDefinition]] = None,
) -> Tuple[Sequence[Any], List[_TabDefinition]]:
    """Render tabs inside ``st.tabs`` containers."""

    resolved_tabs = list(tabs) if tabs is not None else get_registered_tabs()
    if not resolved_tabs:
        return tuple(), []

    tab_widgets = state.st.tabs([tab.title for tab in resolved_tabs])
    for widget, tab in zip(tab_widgets, resolved_tabs):
        with widget:
            tab.render(state)
    return tab_widgets, resolved_tabs


# Import built-in tabs so they register on module import.
from . import flops_calculator  # noqa: E402,F401
from . import distributed_operations  # noqa: E402,F401
from . import parallelism_types  # noqa: E402,F401


__all__ = [
    "DashboardState",
    "get_registered_tabs",
    "register_tab",
    "render_tab_group",
]
