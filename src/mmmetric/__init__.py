"""
Lightweight, privacy-friendly page tracking for mmmetric.

Usage:
    from mmmetric import HeadlessPage, start_tracker

    page = HeadlessPage("https://example.com/pricing?utm_source=newsletter")
    agent = start_tracker(
        page,
        attributes={"data-site": "site_123", "data-api": "https://collector.example.com/track"},
    )
    ...
    agent.close()  # sends what is still queued

    # Embed snippet for templates:
    # {{ script_tag("https://cdn.example.com/track.js", "site_123") }}

    # Collector side, no-JS pixel:
    app.include_router(setup_pixel())
"""

from collections.abc import Mapping

from fastapi import APIRouter

from .config import CollectorConfig, TrackerConfig, resolve_config
from .core import (
    EventName,
    EventPayload,
    EventStore,
    Features,
    HeadlessPage,
    HttpxTransport,
    Platform,
    RecordingTransport,
    TrackingAgent,
    Transport,
)
from .embed import script_tag
from .routes import create_pixel_router

__version__ = "0.1.0"
__all__ = [
    "start_tracker", "setup_pixel", "script_tag",
    "TrackingAgent", "Features", "TrackerConfig", "CollectorConfig", "resolve_config",
    "EventName", "EventPayload", "Platform", "HeadlessPage",
    "Transport", "HttpxTransport", "RecordingTransport",
]


def start_tracker(
    platform: Platform,
    attributes: Mapping[str, str],
    script_src: str | None = None,
    transport: Transport | None = None,
    features: Features | None = None,
) -> TrackingAgent | None:
    """
    Start tracking a page.

    Args:
        platform: The page to observe
        attributes: Attributes of the embedding script tag (data-site,
                    data-api, data-cross-domain, data-supabase-url)
        script_src: URL the script was loaded from, used to infer the
                    collector endpoint when data-api is absent
        transport: Network transport (defaults to HttpxTransport)
        features: Detector toggles

    Returns:
        The running TrackingAgent, or None if the site id or collector
        endpoint could not be resolved. Call its close() when the page is
        done to flush queued sends and release the transport.
    """
    owned = transport is None
    transport = transport or HttpxTransport()
    agent = TrackingAgent.start(
        platform, transport, attributes, script_src=script_src, features=features
    )
    if agent is None and owned:
        transport.close()
    return agent


def setup_pixel(config: CollectorConfig | None = None) -> APIRouter:
    """
    Set up the tracking pixel router.

    Args:
        config: Collector configuration. Read from SUPABASE_URL and
                SUPABASE_SERVICE_ROLE_KEY when omitted.
    """
    return create_pixel_router(EventStore(config or CollectorConfig.from_env()))
