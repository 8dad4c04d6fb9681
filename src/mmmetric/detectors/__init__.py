"""
Passive behaviour detectors.

Each detector registers its own listeners and timers and emits events
through the agent's track() path.
"""

from .base import Detector, guarded, js_round
from .forms import FormTracking
from .links import FileDownloads, OutboundLinks
from .navigation import NavigationState, NavigationTracker, Phase, Transition
from .not_found import NotFound
from .scroll import ScrollDepth
from .vitals import WebVitals

__all__ = [
    "Detector", "guarded", "js_round",
    "OutboundLinks", "FileDownloads", "ScrollDepth", "FormTracking", "WebVitals", "NotFound",
    "NavigationTracker", "NavigationState", "Phase", "Transition",
]
