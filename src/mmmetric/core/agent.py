"""
The tracking agent.

Observes one page's lifetime through a ``Platform`` and emits events to
the collector through a ``Transport``. Every entry point is guarded: a
failure degrades the affected detector to a no-op and never raises into
the host page.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import TrackerConfig, resolve_config
from ..detectors.base import guarded
from ..detectors.forms import FormTracking
from ..detectors.links import FileDownloads, OutboundLinks
from ..detectors.navigation import NavigationTracker
from ..detectors.not_found import NotFound
from ..detectors.scroll import ScrollDepth
from ..detectors.vitals import WebVitals
from ..referrer import external_referrer
from ..utm import utm_properties
from .models import EventName, EventPayload
from .platform import LOAD, Platform
from .session import SessionManager
from .transport import Transport, deliver

logger = logging.getLogger(__name__)

CUSTOM_SCRIPT_TAG = "custom_script"


@dataclass
class Features:
    """Detector toggles. All detectors are on by default."""
    outbound: bool = True
    downloads: bool = True
    scroll: bool = True
    forms: bool = True
    vitals: bool = True
    not_found: bool = True
    remote_config: bool = True


class TrackingAgent:
    """Tracker instance for a single page."""

    def __init__(
        self,
        platform: Platform,
        transport: Transport,
        config: TrackerConfig,
        features: Features | None = None,
    ):
        self.platform = platform
        self.transport = transport
        self.config = config
        self.features = features or Features()
        self.session = SessionManager(
            clock=platform.now,
            query_param=lambda name: platform.location.query_param(name),
        )
        self.navigation = NavigationTracker(self)
        self.detectors: list = []
        self.initialized = False

    @classmethod
    def start(
        cls,
        platform: Platform,
        transport: Transport,
        attributes: Mapping[str, str],
        script_src: str | None = None,
        features: Features | None = None,
    ) -> "TrackingAgent | None":
        """Resolve configuration and start tracking.

        The navigation state machine and heartbeat start immediately. The
        initial pageview and the detectors start once the document has
        loaded.

        Returns:
            The running agent, or None when the site id or collector
            endpoint is missing (nothing is sent in that case).
        """
        try:
            config = resolve_config(attributes, script_src)
            if config is None:
                return None

            agent = cls(platform, transport, config, features)
            agent.navigation.install()
            if platform.ready:
                agent.init()
            else:
                platform.add_listener(LOAD, agent._on_load)
            return agent
        except Exception as e:
            logger.debug(f"Tracker failed to start: {e!r}")
            return None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @guarded
    def _on_load(self, _event=None) -> None:
        self.init()

    def init(self) -> None:
        """Send the initial pageview and install the enabled detectors."""
        if self.initialized:
            return
        self.initialized = True

        self.track(EventName.PAGEVIEW.value)

        enabled = [
            (self.features.outbound, OutboundLinks),
            (self.features.downloads, FileDownloads),
            (self.features.scroll, ScrollDepth),
            (self.features.forms, FormTracking),
            (self.features.vitals, WebVitals),
        ]
        for on, detector_cls in enabled:
            if on:
                self._install(detector_cls(self))

        if self.features.remote_config:
            self.fetch_config()
        if self.features.not_found:
            self._install(NotFound(self))

    @guarded
    def _install(self, detector) -> None:
        detector.install()
        self.detectors.append(detector)

    def close(self) -> None:
        """Send anything still queued and release the transport."""
        self.transport.close()

    # =========================================================================
    # EVENTS
    # =========================================================================

    def get_session_id(self) -> str:
        return self.session.get_session_id()

    @guarded
    def track(
        self,
        event_name: str | EventName | None = None,
        properties: dict[str, Any] | None = None,
    ) -> EventPayload | None:
        """Build an event for the current page and send it.

        UTM parameters of the page URL (when present) and the screen size
        are merged into a copy of ``properties``.

        Returns:
            The payload that was handed to the transport.
        """
        if isinstance(event_name, EventName):
            event_name = event_name.value

        location = self.platform.location
        merged = dict(properties or {})
        utm = utm_properties(location.search)
        if utm:
            merged["utm"] = utm
        screen = self.platform.screen
        if screen:
            merged["screen"] = f"{screen[0]}x{screen[1]}"

        payload = EventPayload(
            site_id=self.config.site_id,
            event_name=event_name or EventName.PAGEVIEW.value,
            url=location.pathname,
            referrer=external_referrer(self.platform.referrer, location.hostname),
            session_id=self.get_session_id(),
            language=self.platform.language,
            properties=merged,
        )
        deliver(self.transport, self.config.api_url, payload.model_dump_json())
        return payload

    # =========================================================================
    # REMOTE CONFIGURATION
    # =========================================================================

    @guarded
    def fetch_config(self) -> None:
        """Request the site's configuration document.

        The transport hands the decoded document to ``apply_config`` once it
        arrives; tracking does not wait for it.
        """
        self.transport.fetch_json(
            self.config.config_url, {"site_id": self.config.site_id}, self.apply_config
        )

    @guarded
    def apply_config(self, data: Any) -> None:
        """Inject the script tags of a configuration document."""
        if not isinstance(data, dict):
            return
        for tag in data.get("tags") or []:
            self._apply_tag(tag)

    @guarded
    def _apply_tag(self, tag: dict) -> None:
        if tag.get("type") != CUSTOM_SCRIPT_TAG:
            return
        url = (tag.get("config") or {}).get("url")
        if url:
            self.platform.inject_script(url)
