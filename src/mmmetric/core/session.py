"""
Session identity for the tracker.

A session is a run of activity from one visitor that expires after 30
minutes without events. Ids are minted lazily and can be adopted from the
``_mm_sid`` query parameter so a visit continues across the hosts listed
in ``data-cross-domain``.
"""
import secrets
from collections.abc import Callable

from ..config import SESSION_PARAM, SESSION_TIMEOUT_MS

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Encode a non-negative integer in base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_session_id(now_ms: float) -> str:
    """Random base-36 token followed by the base-36 timestamp."""
    return to_base36(secrets.randbits(56)) + to_base36(int(now_ms))


class SessionManager:
    """Tracks the current session id and its last activity time."""

    def __init__(
        self,
        clock: Callable[[], float],
        query_param: Callable[[str], str | None],
        timeout_ms: int = SESSION_TIMEOUT_MS,
    ):
        self._clock = clock
        self._query_param = query_param
        self.timeout_ms = timeout_ms
        self.session_id: str | None = None
        self.last_activity: float = clock()

    def is_expired(self, now: float) -> bool:
        return (now - self.last_activity) > self.timeout_ms

    def get_session_id(self) -> str:
        """Return the current session id, minting one when absent or expired.

        Every call counts as activity and refreshes the expiry window.
        """
        now = self._clock()

        if self.session_id is None:
            adopted = self._query_param(SESSION_PARAM)
            if adopted:
                self.session_id = adopted
                self.last_activity = now

        if self.session_id is None or self.is_expired(now):
            self.session_id = new_session_id(now)

        self.last_activity = now
        return self.session_id
