from typing import Any, Protocol

UNKNOWN_USER = "Unknown"


class PresenceSource(Protocol):
    """Anything shaped like ``pycrdt.Awareness``."""

    @property
    def client_id(self) -> int: ...

    def get_local_state(self) -> dict[str, Any] | None: ...


def current_user_name(presence: PresenceSource) -> str:
    state = presence.get_local_state() or {}
    user = state.get("user") or {}
    return user.get("name") or UNKNOWN_USER
