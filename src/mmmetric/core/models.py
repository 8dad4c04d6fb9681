"""
Pydantic models for tracker events.
"""
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventName(str, Enum):
    """Event kinds emitted by the tracker."""

    PAGEVIEW = "pageview"
    ENGAGEMENT = "engagement"
    OUTBOUND = "outbound"
    FILE_DOWNLOAD = "file_download"
    SCROLL_DEPTH = "scroll_depth"
    FORM_START = "form_start"
    FORM_SUBMIT = "form_submit"
    WEB_VITALS = "web_vitals"
    NOT_FOUND = "404"
    PIXEL_VIEW = "pixel_view"  # recorded by the pixel endpoint, not the script


# =============================================================================
# Wire Models
# =============================================================================

class EventPayload(BaseModel):
    """A single event as posted to the collector."""
    site_id: str = Field(min_length=1)
    event_name: str = EventName.PAGEVIEW.value
    url: str  # path only
    referrer: str | None = None  # external referrers only
    session_id: str = Field(min_length=1)
    language: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class PixelEvent(BaseModel):
    """An event recorded by the no-JavaScript pixel endpoint."""
    site_id: str
    event_name: str = EventName.PIXEL_VIEW.value
    url: str
    referrer: str | None = None
    visitor_id: str
    session_id: str
    browser: str
    os: str
    device_type: str
    country: str | None = None


# =============================================================================
# Event Properties
# =============================================================================

class EventProperties(BaseModel):
    """Base for the known property sets of each event kind."""

    def to_properties(self) -> dict[str, Any]:
        """Open JSON map sent as the event's properties."""
        return self.model_dump(exclude_none=True)


class EngagementProperties(EventProperties):
    duration_seconds: int
    url: str


class OutboundProperties(EventProperties):
    href: str
    text: str = ""


class FileDownloadProperties(EventProperties):
    href: str
    filename: str
    extension: str


class ScrollDepthProperties(EventProperties):
    percent: int
    url: str


class FormProperties(EventProperties):
    form_id: str


class WebVitalsProperties(EventProperties):
    metric: str  # LCP, CLS, INP
    value: int | float  # CLS unrounded, others whole ms
    rating: str  # good, poor


class NotFoundProperties(EventProperties):
    url: str  # full href
    referrer: str = ""


PROPERTY_MODELS: dict[str, type[EventProperties]] = {
    EventName.ENGAGEMENT.value: EngagementProperties,
    EventName.OUTBOUND.value: OutboundProperties,
    EventName.FILE_DOWNLOAD.value: FileDownloadProperties,
    EventName.SCROLL_DEPTH.value: ScrollDepthProperties,
    EventName.FORM_START.value: FormProperties,
    EventName.FORM_SUBMIT.value: FormProperties,
    EventName.WEB_VITALS.value: WebVitalsProperties,
    EventName.NOT_FOUND.value: NotFoundProperties,
}


def properties_for(event_name: str | EventName, **fields: Any) -> dict[str, Any]:
    """Build the properties map for an event kind.

    Known kinds are validated against their model. Custom events
    pass their fields through unchanged.
    """
    name = event_name.value if isinstance(event_name, EventName) else event_name
    model = PROPERTY_MODELS.get(name)
    if model is None:
        return dict(fields)
    return model(**fields).to_properties()
