"""
Tracking pixel endpoint.

Serves a 1x1 transparent GIF for pages that cannot run the tracking
script (emails, AMP, no-JS pages) and records a ``pixel_view`` event for
the site in the query string. The image is always returned, whatever
happens to the recording.
"""

import hashlib
import logging
import time
from collections.abc import Mapping

import httpx
from fastapi import APIRouter, BackgroundTasks, Request, Response

from ..core.models import EventName, PixelEvent
from ..core.store import EventStore, EventStoreError
from ..user_agent import parse_user_agent

logger = logging.getLogger(__name__)

PIXEL_GIF = bytes([
    0x47, 0x49, 0x46, 0x38, 0x39, 0x61, 0x01, 0x00, 0x01, 0x00, 0x80, 0x00, 0x00, 0xff, 0xff, 0xff,
    0x00, 0x00, 0x00, 0x21, 0xf9, 0x04, 0x01, 0x00, 0x00, 0x00, 0x00, 0x2c, 0x00, 0x00, 0x00, 0x00,
    0x01, 0x00, 0x01, 0x00, 0x00, 0x02, 0x02, 0x44, 0x01, 0x00, 0x3b,
])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Access-Control-Allow-Origin": "*",
}


def pixel_response() -> Response:
    return Response(content=PIXEL_GIF, media_type="image/gif", headers=NO_CACHE_HEADERS)


def visitor_id(client_ip: str, user_agent: str) -> str:
    """First 8 bytes of SHA-256 over ip and user agent, hex encoded."""
    digest = hashlib.sha256(f"{client_ip}-{user_agent}".encode()).digest()
    return digest[:8].hex()


def build_pixel_event(site_id: str, headers: Mapping[str, str], now_ms: int) -> PixelEvent:
    """Build the event for a pixel hit from its request headers.

    The Referer of an image request is the page that embedded it, so it
    becomes the event URL. The page's own referrer is unknown.
    """
    user_agent = headers.get("user-agent") or ""
    client_ip = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    vid = visitor_id(client_ip, user_agent)
    ua = parse_user_agent(user_agent)

    return PixelEvent(
        site_id=site_id,
        event_name=EventName.PIXEL_VIEW.value,
        url=headers.get("referer") or "pixel",
        referrer=None,
        visitor_id=vid,
        session_id=f"px_{vid}_{now_ms}",
        browser=ua.browser,
        os=ua.os,
        device_type=ua.device_type,
        country=headers.get("cf-ipcountry") or None,
    )


async def record_event(store: EventStore, event: PixelEvent) -> None:
    try:
        await store.insert_event(event)
    except (EventStoreError, httpx.HTTPError) as e:
        logger.error(f"Pixel insert error: {e}")


def create_pixel_router(store: EventStore) -> APIRouter:
    """Create the pixel router.

    Args:
        store: Event store the hits are written to

    Usage:
        store = EventStore(CollectorConfig.from_env())
        app.include_router(create_pixel_router(store))
    """
    router = APIRouter()

    @router.get("/pixel")
    async def pixel(request: Request, background_tasks: BackgroundTasks):
        params = request.query_params
        site_id = params.get("site_id") or params.get("id")  # 'id' for shorter URLs
        if not site_id:
            return pixel_response()

        try:
            event = build_pixel_event(site_id, request.headers, int(time.time() * 1000))
        except Exception as e:
            logger.error(f"Pixel error: {e}")
            return Response(content=PIXEL_GIF, media_type="image/gif")

        background_tasks.add_task(record_event, store, event)
        return pixel_response()

    return router
