"""Form start and submit tracking."""
from ..core.models import EventName, properties_for
from ..core.platform import FOCUSIN, SUBMIT, FocusEvent, Form, SubmitEvent
from .base import Detector, guarded

FIELD_TAGS = {"INPUT", "TEXTAREA", "SELECT"}


class FormTracking(Detector):
    """Emits form_start on the first field focus and form_submit on submit.

    A form stays active from its first focus until it is submitted, so
    repeated focusing does not emit repeated starts.
    """

    def __init__(self, agent):
        super().__init__(agent)
        self.active: set[Form] = set()

    def install(self) -> None:
        self.platform.add_listener(FOCUSIN, self._on_focus)
        self.platform.add_listener(SUBMIT, self._on_submit)

    @guarded
    def _on_focus(self, event: FocusEvent) -> None:
        if event.tag_name.upper() not in FIELD_TAGS:
            return
        form = event.form
        if form is None or form in self.active:
            return
        self.active.add(form)
        self.track(
            EventName.FORM_START.value,
            properties_for(EventName.FORM_START, form_id=form.form_id),
        )

    @guarded
    def _on_submit(self, event: SubmitEvent) -> None:
        form = event.form
        if form is None or event.tag_name.upper() != "FORM":
            return
        self.active.discard(form)
        self.track(
            EventName.FORM_SUBMIT.value,
            properties_for(EventName.FORM_SUBMIT, form_id=form.form_id),
        )
