"""
Navigation and engagement state machine.

Models one logical page view inside a single-page application. Each
transition is a pure function of the current state and its inputs and
returns the new state plus the events to emit; the agent wires them to
history, visibility, unload and heartbeat callbacks.

    ACTIVE    tab visible, dwell timer running
    HIDDEN    tab not visible
    NAVIGATED path changed without a reload (timer restarted)
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from ..config import HEARTBEAT_INTERVAL_MS, MAX_ENGAGEMENT_SECONDS, MIN_ENGAGEMENT_SECONDS
from ..core.models import EventName, properties_for
from ..core.platform import PAGEHIDE, POPSTATE, PUSHSTATE, VISIBILITY_CHANGE
from .base import Detector, guarded, js_round

Emit = tuple[str, dict[str, Any] | None]


class Phase(str, Enum):
    ACTIVE = "active"
    HIDDEN = "hidden"
    NAVIGATED = "navigated"


@dataclass(frozen=True)
class NavigationState:
    last_path: str
    start_time: float  # epoch ms when the current dwell interval began
    engaged: bool = False
    phase: Phase = Phase.ACTIVE


@dataclass(frozen=True)
class Transition:
    state: NavigationState
    emits: list[Emit] = field(default_factory=list)


def engagement_seconds(state: NavigationState, now: float) -> int:
    return js_round((now - state.start_time) / 1000)


def flush(state: NavigationState, now: float) -> Transition:
    """Report the dwell time of the current view.

    Only durations of at least 5s and under one day are reported.
    """
    duration = engagement_seconds(state, now)
    if not (MIN_ENGAGEMENT_SECONDS <= duration < MAX_ENGAGEMENT_SECONDS):
        return Transition(state)

    props = properties_for(
        EventName.ENGAGEMENT, duration_seconds=duration, url=state.last_path
    )
    return Transition(
        replace(state, engaged=True),
        [(EventName.ENGAGEMENT.value, props)],
    )


def on_history_change(state: NavigationState, path: str, now: float) -> Transition:
    """pushState or popstate. Only a path change starts a new view."""
    if path == state.last_path:
        return Transition(state)

    flushed = flush(state, now)
    new_state = NavigationState(
        last_path=path,
        start_time=now,
        engaged=False,
        phase=Phase.NAVIGATED,
    )
    return Transition(new_state, flushed.emits + [(EventName.PAGEVIEW.value, None)])


def on_hidden(state: NavigationState, now: float) -> Transition:
    flushed = flush(state, now)
    return Transition(replace(flushed.state, phase=Phase.HIDDEN), flushed.emits)


def on_visible(state: NavigationState, now: float) -> Transition:
    return Transition(replace(state, start_time=now, engaged=False, phase=Phase.ACTIVE))


def on_pagehide(state: NavigationState, now: float) -> Transition:
    return flush(state, now)


def on_heartbeat(state: NavigationState, now: float, hidden: bool) -> Transition:
    """Periodic flush bounding a single continuous view's dwell time."""
    if hidden or state.engaged or (now - state.start_time) <= HEARTBEAT_INTERVAL_MS:
        return Transition(state)

    flushed = flush(state, now)
    return Transition(replace(flushed.state, start_time=now, engaged=False), flushed.emits)


class NavigationTracker(Detector):
    """Wires the transitions to history, visibility, unload and heartbeat."""

    def __init__(self, agent):
        super().__init__(agent)
        self.state = NavigationState(
            last_path=self.platform.location.pathname,
            start_time=self.platform.now(),
        )

    def install(self) -> None:
        self.platform.add_listener(PUSHSTATE, self._on_history)
        self.platform.add_listener(POPSTATE, self._on_history)
        self.platform.add_listener(VISIBILITY_CHANGE, self._on_visibility)
        self.platform.add_listener(PAGEHIDE, self._on_pagehide)
        self.platform.set_interval(self._on_heartbeat, HEARTBEAT_INTERVAL_MS)

    def apply(self, transition: Transition) -> None:
        self.state = transition.state
        for event_name, props in transition.emits:
            self.track(event_name, props)

    @guarded
    def _on_history(self, _event=None) -> None:
        path = self.platform.location.pathname
        self.apply(on_history_change(self.state, path, self.platform.now()))

    @guarded
    def _on_visibility(self, _event=None) -> None:
        now = self.platform.now()
        if self.platform.hidden:
            self.apply(on_hidden(self.state, now))
        else:
            self.apply(on_visible(self.state, now))

    @guarded
    def _on_pagehide(self, _event=None) -> None:
        self.apply(on_pagehide(self.state, self.platform.now()))

    @guarded
    def _on_heartbeat(self) -> None:
        self.apply(on_heartbeat(self.state, self.platform.now(), self.platform.hidden))
