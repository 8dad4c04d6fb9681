"""
Core Web Vitals capture.

Accumulates Largest Contentful Paint, Cumulative Layout Shift and
Interaction to Next Paint from performance observers and reports them
when the page is hidden or unloaded.

Ratings are coarse: a value above the "good" threshold is "poor".
"""
import logging

from ..core.models import EventName, properties_for
from ..core.platform import PAGEHIDE, VISIBILITY_CHANGE, PerformanceEntry
from .base import Detector, guarded, js_round

logger = logging.getLogger(__name__)

LCP = "LCP"
CLS = "CLS"
INP = "INP"

GOOD_THRESHOLDS = {
    LCP: 2500,  # ms
    CLS: 0.1,   # unitless
    INP: 200,   # ms
}


def rate(metric: str, value: float) -> str:
    return "poor" if value > GOOD_THRESHOLDS[metric] else "good"


def vitals_properties(metric: str, value: float) -> dict:
    reported = value if metric == CLS else js_round(value)
    return properties_for(
        EventName.WEB_VITALS, metric=metric, value=reported, rating=rate(metric, value)
    )


class WebVitals(Detector):
    """Reports each metric at most once per hide/unload cycle.

    A cycle ends when the page becomes visible again.
    """

    def __init__(self, agent):
        super().__init__(agent)
        self.lcp: float | None = None
        self.cls: float | None = None
        self.inp: float | None = None
        self.reported: set[str] = set()

    def install(self) -> None:
        try:
            if not self.platform.observe_performance("largest-contentful-paint", self._on_lcp):
                logger.debug("Performance observers unavailable, vitals disabled")
                return
            self.cls = 0.0
            if not self.platform.observe_performance("layout-shift", self._on_layout_shift):
                self.cls = None
            self.inp = 0.0
            if not self.platform.observe_performance("event", self._on_event_timing):
                self.inp = None
        except Exception as e:
            logger.debug(f"Vitals setup failed: {e!r}")
            return

        self.platform.add_listener(VISIBILITY_CHANGE, self._on_visibility)
        self.platform.add_listener(PAGEHIDE, self._on_pagehide)

    @guarded
    def _on_lcp(self, entries: list[PerformanceEntry]) -> None:
        if entries:
            self.lcp = entries[-1].start_time

    @guarded
    def _on_layout_shift(self, entries: list[PerformanceEntry]) -> None:
        for entry in entries:
            if not entry.had_recent_input:
                self.cls = (self.cls or 0.0) + entry.value

    @guarded
    def _on_event_timing(self, entries: list[PerformanceEntry]) -> None:
        for entry in entries:
            if entry.interaction_id and entry.duration > (self.inp or 0.0):
                self.inp = entry.duration

    def pending(self) -> list[tuple[str, float]]:
        """Metrics with a value, not yet reported in this cycle."""
        values = []
        if self.lcp is not None:
            values.append((LCP, self.lcp))
        if self.cls is not None:
            values.append((CLS, self.cls))
        if self.inp:
            values.append((INP, self.inp))
        return [(metric, value) for metric, value in values if metric not in self.reported]

    @guarded
    def report(self) -> None:
        for metric, value in self.pending():
            self.reported.add(metric)
            self.track(EventName.WEB_VITALS.value, vitals_properties(metric, value))

    @guarded
    def _on_visibility(self, _event=None) -> None:
        if self.platform.hidden:
            self.report()
        else:
            self.reported.clear()

    @guarded
    def _on_pagehide(self, _event=None) -> None:
        self.report()
