from .app_state import AppState, AppStateManager, app_state_defaults, ensure_session_state_defaults

__all__ = [
    "AppState",
    "AppStateManager",
    "app_state_defaults",
    "ensure_session_state_defaults",
]
