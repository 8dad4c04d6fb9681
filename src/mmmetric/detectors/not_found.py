"""404 page detection from the document title."""
from ..config import DEFERRED_CHECK_MS
from ..core.models import EventName, properties_for
from .base import Detector, guarded


class NotFound(Detector):
    """Checks once, shortly after load, whether the title mentions 404."""

    def install(self) -> None:
        self.platform.set_timeout(self.check, DEFERRED_CHECK_MS)

    @guarded
    def check(self) -> None:
        if "404" not in (self.platform.title or "").lower():
            return
        self.track(
            EventName.NOT_FOUND.value,
            properties_for(
                EventName.NOT_FOUND,
                url=self.platform.location.href,
                referrer=self.platform.referrer or "",
            ),
        )
