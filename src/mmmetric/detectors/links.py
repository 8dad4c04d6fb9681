"""
Link click detectors: outbound links and file downloads.

Both listen for clicks in the capture phase and read the closest
enclosing anchor. Every click is counted; there is no dedup.
"""
import logging
from urllib.parse import urljoin, urlparse

from ..config import MAX_LINK_TEXT, SESSION_PARAM
from ..core.models import EventName, properties_for
from ..core.platform import CLICK, ClickEvent
from .base import Detector, guarded

logger = logging.getLogger(__name__)

DOWNLOAD_EXTENSIONS = (
    ".pdf", ".docx", ".xlsx", ".zip", ".rar", ".csv", ".mp3", ".mp4",
    ".dmg", ".exe", ".pptx", ".jpg", ".png", ".gif", ".svg",
)


def resolve_href(href: str, base: str) -> str:
    """Absolute URL of a link on the page at ``base``, as the browser reports it."""
    return urljoin(base, href)


def link_hostname(href: str, origin: str) -> str:
    return urlparse(resolve_href(href, origin + "/")).hostname or ""


def with_session_param(href: str, session_id: str) -> str:
    separator = "&" if "?" in href else "?"
    return f"{href}{separator}{SESSION_PARAM}={session_id}"


def download_extension(href: str) -> str | None:
    """Tracked extension (without the dot) of a link target, if any."""
    target = href.lower().split("?")[0]
    for ext in DOWNLOAD_EXTENSIONS:
        if target.endswith(ext):
            return ext[1:]
    return None


def download_filename(href: str) -> str:
    return href.split("/")[-1].split("?")[0]


class OutboundLinks(Detector):
    """Reports clicks on links to other hosts.

    Links to hosts listed in ``data-cross-domain`` are decorated with the
    session id so the visit continues on the destination.
    """

    def install(self) -> None:
        self.platform.add_listener(CLICK, self._on_click)

    @guarded
    def _on_click(self, event: ClickEvent) -> None:
        anchor = event.anchor if event else None
        if anchor is None or not anchor.href:
            return

        location = self.platform.location
        href = resolve_href(anchor.href, location.href)
        hostname = link_hostname(href, location.origin)
        if hostname == location.hostname:
            return

        self.track(
            EventName.OUTBOUND.value,
            properties_for(
                EventName.OUTBOUND,
                href=href,
                text=(anchor.text or "")[:MAX_LINK_TEXT],
            ),
        )
        if self.agent.config.is_cross_domain(hostname):
            anchor.href = with_session_param(href, self.agent.get_session_id())
            logger.debug(f"Propagating session to {hostname}")


class FileDownloads(Detector):
    """Reports clicks on links to downloadable files."""

    def install(self) -> None:
        self.platform.add_listener(CLICK, self._on_click)

    @guarded
    def _on_click(self, event: ClickEvent) -> None:
        anchor = event.anchor if event else None
        if anchor is None or not anchor.href:
            return

        href = resolve_href(anchor.href, self.platform.location.href)
        extension = download_extension(href)
        if extension is None:
            return

        self.track(
            EventName.FILE_DOWNLOAD.value,
            properties_for(
                EventName.FILE_DOWNLOAD,
                href=href,
                filename=download_filename(href),
                extension=extension,
            ),
        )
