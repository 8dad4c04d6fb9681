"""
Platform capabilities the tracker depends on.

The tracker never touches a browser directly. Everything it needs from the
page (clock, location, document state, timers, event listeners, performance
entries, script injection) goes through a ``Platform``. Network sends go
through a separate ``Transport`` (see ``transport.py``).
"""
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlparse

# Event types dispatched to listeners
CLICK = "click"
FOCUSIN = "focusin"
SUBMIT = "submit"
SCROLL = "scroll"
VISIBILITY_CHANGE = "visibilitychange"
PAGEHIDE = "pagehide"
POPSTATE = "popstate"
PUSHSTATE = "pushstate"  # history.pushState was called
LOAD = "load"

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class Location:
    """The page URL, with the parts the tracker reads."""
    href: str

    @property
    def _parsed(self):
        return urlparse(self.href)

    @property
    def pathname(self) -> str:
        return self._parsed.path or "/"

    @property
    def search(self) -> str:
        query = self._parsed.query
        return f"?{query}" if query else ""

    @property
    def hostname(self) -> str:
        return self._parsed.hostname or ""

    @property
    def origin(self) -> str:
        parsed = self._parsed
        return f"{parsed.scheme}://{parsed.netloc}"

    def query_param(self, name: str) -> str | None:
        values = parse_qs(self._parsed.query).get(name)
        return values[0] if values else None


@dataclass(frozen=True)
class ScrollMetrics:
    """Scroll geometry of the document, in CSS pixels."""
    scroll_height: int  # largest of the body/documentElement heights
    scroll_top: int
    viewport_height: int


# =============================================================================
# DOM stand-ins
# =============================================================================

@dataclass
class Anchor:
    """A link element. ``href`` is mutable, like the DOM property."""
    href: str
    text: str = ""


@dataclass(eq=False)
class Form:
    """A form element. Compared by identity, like DOM nodes."""
    id: str = ""
    name: str = ""

    @property
    def form_id(self) -> str:
        return self.id or self.name or "unknown"


@dataclass
class ClickEvent:
    anchor: Anchor | None = None  # closest enclosing <a>, if any


@dataclass
class FocusEvent:
    tag_name: str
    form: Form | None = None


@dataclass
class SubmitEvent:
    tag_name: str
    form: Form | None = None


@dataclass(frozen=True)
class PerformanceEntry:
    """A performance timeline entry, as a PerformanceObserver delivers it."""
    entry_type: str  # largest-contentful-paint, layout-shift, event
    start_time: float = 0.0
    value: float = 0.0  # layout-shift score
    duration: float = 0.0
    had_recent_input: bool = False
    interaction_id: int = 0


class Platform(ABC):
    """Minimal page capability interface consumed by the tracker."""

    # Page state

    @abstractmethod
    def now(self) -> float:
        """Current time in epoch milliseconds."""

    @property
    @abstractmethod
    def location(self) -> Location: ...

    @property
    @abstractmethod
    def referrer(self) -> str: ...

    @property
    @abstractmethod
    def language(self) -> str | None: ...

    @property
    @abstractmethod
    def screen(self) -> tuple[int, int] | None: ...

    @property
    @abstractmethod
    def title(self) -> str: ...

    @property
    @abstractmethod
    def hidden(self) -> bool: ...

    @property
    @abstractmethod
    def ready(self) -> bool:
        """Whether the document has finished loading."""

    @abstractmethod
    def scroll_metrics(self) -> ScrollMetrics: ...

    # Events and timers

    @abstractmethod
    def add_listener(self, event_type: str, handler: Handler) -> None: ...

    @abstractmethod
    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> int: ...

    @abstractmethod
    def clear_timeout(self, handle: int | None) -> None: ...

    @abstractmethod
    def set_interval(self, callback: Callable[[], None], delay_ms: int) -> int: ...

    # Optional capabilities

    def observe_performance(
        self, entry_type: str, callback: Callable[[list[PerformanceEntry]], None]
    ) -> bool:
        """Subscribe to performance entries. Returns False when unsupported."""
        return False

    @abstractmethod
    def inject_script(self, url: str) -> None:
        """Append an async script element to the document head."""
