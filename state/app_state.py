"""Application state management helpers.

The dataclass holds the widget defaults of every tab so the Streamlit UI and
standalone unit tests start from the same values. Nothing here outlives a
browser session.
"""
from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Dict, Mapping, MutableMapping

from hardware import DEFAULT_PRECISION_ID, default_device


def _default_device_name() -> str:
    return default_device().name


@dataclass
class AppState:
    """Container for the dashboard session state."""

    a_rows: int = 3
    a_cols: int = 4
    b_rows: int = 4
    b_cols: int = 5
    device_name: str = field(default_factory=_default_device_name)
    device_query: str = ""
    precision_id: str = DEFAULT_PRECISION_ID
    collective: str = "all_reduce"
    collective_root: int = 0
    reduce_op: str = "sum"
    flow_step: int = 0
    parallelism: str = "data"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AppState":
        """Create an instance merging ``mapping`` with the default values."""

        payload: Dict[str, Any] = {}
        for f in fields(cls):
            payload[f.name] = mapping.get(f.name, _field_default(f))
        return cls(**payload)


class AppStateManager:
    """Light-weight session state manager.

    Keys outside :class:`AppState` are stored alongside it so the manager
    behaves like ``st.session_state`` for ad-hoc widget keys.
    """

    def __init__(self, initial: AppState | None = None) -> None:
        self._state: AppState = initial or AppState()
        self._extras: Dict[str, Any] = {}

    @property
    def state(self) -> AppState:
        return self._state

    def get(self, key: str, default: Any | None = None) -> Any:
        if hasattr(self._state, key):
            return getattr(self._state, key)
        return self._extras.get(key, default)

    def set(self, key: str, value: Any) -> AppState:
        if hasattr(self._state, key):
            setattr(self._state, key, value)
        else:
            self._extras[key] = value
        return self._state

    def update(self, updates: Mapping[str, Any] | None = None, **kwargs: Any) -> AppState:
        payload: Dict[str, Any] = dict(updates) if updates is not None else {}
        payload.update(kwargs)
        for key, value in payload.items():
            self.set(key, value)
        return self._state

    def as_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self._state, f.name) for f in fields(AppState)}
        data.update(self._extras)
        return data


def _field_default(f) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:  # type: ignore[attr-defined]
        return f.default_factory()  # type: ignore[misc]
    raise AttributeError(f"Field {f.name} has no default")


def app_state_defaults() -> Dict[str, Any]:
    return {f.name: _field_default(f) for f in fields(AppState)}


def ensure_session_state_defaults(store: MutableMapping[str, Any]) -> AppStateManager:
    """Populate ``store`` with defaults where keys are missing.

    Values already present in ``store`` win, so a rerun keeps the user's
    choices.
    """

    state = AppState.from_mapping(store)
    for f in fields(AppState):
        store.setdefault(f.name, getattr(state, f.name))
    return AppStateManager(state)


__all__ = [
    "AppState",
    "AppStateManager",
    "app_state_defaults",
    "ensure_session_state_defaults",
]
