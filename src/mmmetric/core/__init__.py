"""
Core tracker module.

Contains the event models, the platform and transport interfaces, and the
tracking agent built on them.
"""

from .agent import Features, TrackingAgent
from .headless import HeadlessPage
from .models import (
    EngagementProperties,
    EventName,
    EventPayload,
    FileDownloadProperties,
    FormProperties,
    NotFoundProperties,
    OutboundProperties,
    PixelEvent,
    ScrollDepthProperties,
    WebVitalsProperties,
    properties_for,
)
from .platform import Anchor, Form, Location, PerformanceEntry, Platform, ScrollMetrics
from .session import SessionManager
from .store import EventStore, EventStoreError
from .transport import HttpxTransport, RecordingTransport, Transport, deliver

__all__ = [
    "EventName", "EventPayload", "PixelEvent", "properties_for",
    "EngagementProperties", "OutboundProperties", "FileDownloadProperties",
    "ScrollDepthProperties", "FormProperties", "WebVitalsProperties", "NotFoundProperties",
    "Platform", "Location", "ScrollMetrics", "Anchor", "Form", "PerformanceEntry",
    "HeadlessPage", "SessionManager",
    "Transport", "HttpxTransport", "RecordingTransport", "deliver",
    "EventStore", "EventStoreError",
    "TrackingAgent", "Features",
]
