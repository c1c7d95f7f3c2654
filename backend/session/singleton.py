from __future__ import annotations

import threading

from session.map_session import MapSession, create_session
from settings.loader import get_map_config

_SESSION: MapSession | None = None
_SESSION_LOCK = threading.RLock()


def get_session() -> MapSession:
    global _SESSION
    with _SESSION_LOCK:
        if _SESSION is None:
            _SESSION = create_session(get_map_config())
        return _SESSION


def set_session(session: MapSession | None) -> None:
    """
    Install a prebuilt session (tests, embedding). Closes the one it replaces.
    """
    global _SESSION
    with _SESSION_LOCK:
        if _SESSION is not None and _SESSION is not session:
            _SESSION.close()
        _SESSION = session


def reset_session() -> None:
    set_session(None)
