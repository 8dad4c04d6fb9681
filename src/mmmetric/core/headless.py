"""
In-memory page for running the tracker without a browser.

``HeadlessPage`` implements ``Platform`` with a virtual clock. Timers only
fire when the clock is advanced, in due-time order, so page lifetimes
(dwell time, debounced scrolls, heartbeats) can be replayed exactly.
"""
import heapq
import itertools
from collections import defaultdict
from collections.abc import Callable, Collection

from .platform import (
    CLICK,
    FOCUSIN,
    LOAD,
    PAGEHIDE,
    POPSTATE,
    PUSHSTATE,
    SCROLL,
    SUBMIT,
    VISIBILITY_CHANGE,
    Anchor,
    ClickEvent,
    FocusEvent,
    Form,
    Handler,
    Location,
    PerformanceEntry,
    Platform,
    ScrollMetrics,
    SubmitEvent,
)

DEFAULT_START_MS = 1_767_225_600_000  # 2026-01-01T00:00:00Z


class HeadlessPage(Platform):
    """A scriptable page with a virtual clock.

    ``supports_performance`` is True for every entry type, False for none,
    or the collection of entry types the page can observe.
    """

    def __init__(
        self,
        href: str,
        referrer: str = "",
        title: str = "",
        language: str | None = "en-US",
        screen: tuple[int, int] | None = (1920, 1080),
        scroll_height: int = 2000,
        viewport_height: int = 800,
        ready: bool = True,
        supports_performance: bool | Collection[str] = True,
        start_ms: float = DEFAULT_START_MS,
    ):
        self._location = Location(href)
        self._referrer = referrer
        self._title = title
        self._language = language
        self._screen = screen
        self._hidden = False
        self._ready = ready
        self.scroll_height = scroll_height
        self.viewport_height = viewport_height
        self.scroll_top = 0
        self.supports_performance = supports_performance

        self._now = float(start_ms)
        self._listeners: dict[str, list[Handler]] = defaultdict(list)
        self._observers: dict[str, list[Callable]] = defaultdict(list)
        self._timers: list[tuple[float, int, int]] = []
        self._callbacks: dict[int, tuple[Callable[[], None], int | None]] = {}
        self._handles = itertools.count(1)
        self._seq = itertools.count()
        self.injected_scripts: list[str] = []

    # -------------------------------------------------------------------------
    # Platform
    # -------------------------------------------------------------------------

    def now(self) -> float:
        return self._now

    @property
    def location(self) -> Location:
        return self._location

    @property
    def referrer(self) -> str:
        return self._referrer

    @property
    def language(self) -> str | None:
        return self._language

    @property
    def screen(self) -> tuple[int, int] | None:
        return self._screen

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = value

    @property
    def hidden(self) -> bool:
        return self._hidden

    @property
    def ready(self) -> bool:
        return self._ready

    def scroll_metrics(self) -> ScrollMetrics:
        return ScrollMetrics(
            scroll_height=self.scroll_height,
            scroll_top=self.scroll_top,
            viewport_height=self.viewport_height,
        )

    def add_listener(self, event_type: str, handler: Handler) -> None:
        self._listeners[event_type].append(handler)

    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> int:
        return self._schedule(callback, delay_ms, None)

    def set_interval(self, callback: Callable[[], None], delay_ms: int) -> int:
        return self._schedule(callback, delay_ms, delay_ms)

    def clear_timeout(self, handle: int | None) -> None:
        if handle is not None:
            self._callbacks.pop(handle, None)

    def observe_performance(
        self, entry_type: str, callback: Callable[[list[PerformanceEntry]], None]
    ) -> bool:
        supported = self.supports_performance
        if supported is not True and entry_type not in (supported or ()):
            return False
        self._observers[entry_type].append(callback)
        return True

    def inject_script(self, url: str) -> None:
        self.injected_scripts.append(url)

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    def _schedule(self, callback, delay_ms: int, interval_ms: int | None) -> int:
        handle = next(self._handles)
        self._callbacks[handle] = (callback, interval_ms)
        heapq.heappush(self._timers, (self._now + delay_ms, next(self._seq), handle))
        return handle

    def advance(self, ms: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self._now + ms
        while self._timers and self._timers[0][0] <= target:
            due, _, handle = heapq.heappop(self._timers)
            entry = self._callbacks.get(handle)
            if entry is None:
                continue  # cleared
            callback, interval_ms = entry
            self._now = due
            if interval_ms is None:
                del self._callbacks[handle]
            else:
                heapq.heappush(self._timers, (due + interval_ms, next(self._seq), handle))
            callback()
        self._now = target

    @property
    def pending_timers(self) -> int:
        return len(self._callbacks)

    # -------------------------------------------------------------------------
    # Page actions
    # -------------------------------------------------------------------------

    def dispatch(self, event_type: str, event=None) -> None:
        for handler in list(self._listeners[event_type]):
            handler(event)

    def load(self) -> None:
        self._ready = True
        self.dispatch(LOAD)

    def navigate(self, href: str, push: bool = True) -> None:
        """Change the URL without a reload (pushState, or back/forward)."""
        self._location = Location(href)
        self.dispatch(PUSHSTATE if push else POPSTATE)

    def scroll_to(self, top: int) -> None:
        self.scroll_top = top
        self.dispatch(SCROLL)

    def click(self, anchor: Anchor | None) -> None:
        self.dispatch(CLICK, ClickEvent(anchor=anchor))

    def focus(self, tag_name: str, form: Form | None = None) -> None:
        self.dispatch(FOCUSIN, FocusEvent(tag_name=tag_name, form=form))

    def submit(self, form: Form) -> None:
        self.dispatch(SUBMIT, SubmitEvent(tag_name="FORM", form=form))

    def hide(self) -> None:
        self._hidden = True
        self.dispatch(VISIBILITY_CHANGE)

    def show(self) -> None:
        self._hidden = False
        self.dispatch(VISIBILITY_CHANGE)

    def unload(self) -> None:
        self.dispatch(PAGEHIDE)

    def emit_performance(self, *entries: PerformanceEntry) -> None:
        by_type: dict[str, list[PerformanceEntry]] = defaultdict(list)
        for entry in entries:
            by_type[entry.entry_type].append(entry)
        for entry_type, batch in by_type.items():
            for callback in list(self._observers[entry_type]):
                callback(batch)
