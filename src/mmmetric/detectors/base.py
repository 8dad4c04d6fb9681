"""
Shared pieces for tracker detectors.
"""
import functools
import logging
import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..core.agent import TrackingAgent

logger = logging.getLogger(__name__)


def js_round(value: float) -> int:
    """Round half up, as Math.round does (not banker's rounding)."""
    return math.floor(value + 0.5)


def guarded(func):
    """Swallow and log any exception raised by a tracker callback.

    Tracking must never raise into host page code; a failing detector
    degrades to a no-op for that single call.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.debug(f"{func.__qualname__} failed: {e!r}")
            return None
    return wrapper


class Detector:
    """A passive behaviour detector sharing the agent's track() path."""

    def __init__(self, agent: "TrackingAgent"):
        self.agent = agent
        self.platform = agent.platform

    def install(self) -> None:
        raise NotImplementedError

    def track(self, event_name: str, properties: dict[str, Any] | None = None) -> None:
        self.agent.track(event_name, properties)
