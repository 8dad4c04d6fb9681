"""
Scroll depth milestones.

Each milestone is reported at most once per page load. Pages whose content
fits in the viewport report 100% on the first check.
"""
from ..config import DEFERRED_CHECK_MS, SCROLL_DEBOUNCE_MS
from ..core.models import EventName, properties_for
from ..core.platform import SCROLL, ScrollMetrics
from .base import Detector, guarded, js_round

MILESTONES = (25, 50, 75, 90, 100)


def scroll_percent(metrics: ScrollMetrics) -> int:
    """Share of the document seen so far, capped at 100."""
    seen = metrics.scroll_top + metrics.viewport_height
    return min(100, js_round(seen / metrics.scroll_height * 100))


def reached_milestones(metrics: ScrollMetrics, sent: set[int]) -> list[int]:
    """Milestones newly reached, in increasing order."""
    if metrics.scroll_height <= metrics.viewport_height:
        return [] if 100 in sent else [100]

    percent = scroll_percent(metrics)
    return [m for m in MILESTONES if percent >= m and m not in sent]


class ScrollDepth(Detector):
    """Debounced scroll listener plus one check shortly after load."""

    def __init__(self, agent):
        super().__init__(agent)
        self.sent: set[int] = set()
        self._timeout: int | None = None

    def install(self) -> None:
        self.platform.add_listener(SCROLL, self._on_scroll)
        self.platform.set_timeout(self.check, DEFERRED_CHECK_MS)

    @guarded
    def _on_scroll(self, _event=None) -> None:
        self.platform.clear_timeout(self._timeout)
        self._timeout = self.platform.set_timeout(self.check, SCROLL_DEBOUNCE_MS)

    @guarded
    def check(self) -> None:
        path = self.platform.location.pathname
        for milestone in reached_milestones(self.platform.scroll_metrics(), self.sent):
            self.sent.add(milestone)
            self.track(
                EventName.SCROLL_DEPTH.value,
                properties_for(EventName.SCROLL_DEPTH, percent=milestone, url=path),
            )
