"""
Agreement gate.

Decides whether a mounting agreement must be signed and holds the signing
session: UNREAD -> SCROLLED -> SIGNING -> READY_TO_SUBMIT. The state is
computed from the in-memory inputs; a restored draft only seeds them.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ...config import AGREEMENT_VERSION, SCROLL_TOLERANCE
from ...errors import ValidationError
from ...models import Agreement, AgreementTemplate, ServiceItem, ServiceType
from ...shared.validators import names_match
from .schemas import AgreementDraft
from .signature import Point, SignaturePad

logger = logging.getLogger(__name__)


def agreement_required(items: Iterable[ServiceItem]) -> bool:
    return any(item.service_type == ServiceType.MOUNT for item in items)


def not_required() -> Agreement:
    return Agreement(required=False, accepted=False)


class GateState(str, Enum):
    UNREAD = "UNREAD"
    SCROLLED = "SCROLLED"
    SIGNING = "SIGNING"
    READY_TO_SUBMIT = "READY_TO_SUBMIT"


class GateCondition(str, Enum):
    SCROLLED = "scrolled"
    SIGNED = "signed"
    NAME_MATCHES = "name_matches"
    ACKNOWLEDGED = "acknowledged"


UNMET_MESSAGES = {
    GateCondition.SCROLLED: "Scroll to the bottom of the agreement",
    GateCondition.SIGNED: "Draw your signature in the signature pad",
    GateCondition.NAME_MATCHES: "Enter your full legal name exactly as shown",
    GateCondition.ACKNOWLEDGED: "Check the agreement acknowledgement box",
}


class AgreementGate:
    def __init__(
        self,
        expected_name: str,
        template: AgreementTemplate,
        version: Optional[str] = None,
        tolerance: float = SCROLL_TOLERANCE,
        pad: Optional[SignaturePad] = None,
    ):
        self.expected_name = expected_name.strip()
        self.template = template
        self.version = version or template.version or AGREEMENT_VERSION
        self.tolerance = tolerance
        self.pad = pad or SignaturePad()

        self.scroll_position: float = 0
        self.scrolled_to_bottom = False
        self.typed_name = ""
        self.name_error: Optional[str] = None
        self.acknowledged = False

    # --- scrolling ----------------------------------------------------

    def on_layout(self, scroll_height: float, client_height: float) -> None:
        """Text that fits without scrolling counts as read"""
        if scroll_height <= client_height:
            self._mark_scrolled()

    def on_scroll(self, scroll_top: float, scroll_height: float, client_height: float) -> None:
        self.scroll_position = scroll_top
        if scroll_height - scroll_top <= client_height + self.tolerance:
            self._mark_scrolled()

    def _mark_scrolled(self) -> None:
        if not self.scrolled_to_bottom:
            logger.info("📜 Agreement scrolled to bottom, signing unlocked")
        self.scrolled_to_bottom = True

    def _require_unlocked(self, field: str) -> None:
        if not self.scrolled_to_bottom:
            raise ValidationError(field, "Please scroll to the bottom of the agreement before signing")

    # --- inputs -------------------------------------------------------

    def add_stroke(self, points: list[Point]) -> None:
        self._require_unlocked("signature")
        self.pad.add_stroke(points)

    def clear_signature(self) -> None:
        self.pad.clear()

    def set_typed_name(self, name: str) -> None:
        """Store the typed name; a mismatch is reported but never blocks typing"""
        self._require_unlocked("typedName")
        self.typed_name = name
        if not name.strip() or not self.expected_name or names_match(name, self.expected_name):
            self.name_error = None
        else:
            self.name_error = f"Name must match: {self.expected_name}"

    def set_acknowledged(self, checked: bool) -> None:
        self._require_unlocked("acknowledged")
        self.acknowledged = checked

    # --- gating -------------------------------------------------------

    @property
    def signed(self) -> bool:
        return self.pad.signed

    @property
    def name_matches(self) -> bool:
        return names_match(self.typed_name, self.expected_name)

    def unmet_conditions(self) -> list[GateCondition]:
        checks = {
            GateCondition.SCROLLED: self.scrolled_to_bottom,
            GateCondition.SIGNED: self.signed,
            GateCondition.NAME_MATCHES: self.name_matches,
            GateCondition.ACKNOWLEDGED: self.acknowledged,
        }
        return [condition for condition, ok in checks.items() if not ok]

    @property
    def can_continue(self) -> bool:
        return not self.unmet_conditions()

    @property
    def state(self) -> GateState:
        if not self.scrolled_to_bottom:
            return GateState.UNREAD
        if self.can_continue:
            return GateState.READY_TO_SUBMIT
        if self.signed or self.typed_name or self.acknowledged:
            return GateState.SIGNING
        return GateState.SCROLLED

    def accept(self, now: Optional[datetime] = None) -> Agreement:
        """
        Produce the accepted agreement. The signature image is rendered here.

        Raises:
            ValidationError: Listing every unmet condition
        """
        unmet = self.unmet_conditions()
        if unmet:
            raise ValidationError("agreement", "; ".join(UNMET_MESSAGES[c] for c in unmet))

        return Agreement(
            required=True,
            accepted=True,
            signature_name=self.typed_name.strip(),
            signature_image=self.pad.export_png_base64(),
            accepted_at=now or datetime.now(timezone.utc),
            version=self.version,
        )

    # --- draft persistence ----------------------------------------------

    def snapshot(self) -> AgreementDraft:
        return AgreementDraft(
            scrollPosition=self.scroll_position,
            scrolledToBottom=self.scrolled_to_bottom,
            typedName=self.typed_name,
            checkboxChecked=self.acknowledged,
            strokes=self.pad.strokes,
        )

    def restore(self, draft: AgreementDraft) -> None:
        """
        Seed inputs from a cached draft. Signature, name and checkbox are only
        restored when the draft records that the text was read, and only
        recorded strokes count as a signature.
        """
        self.scroll_position = draft.scrollPosition
        if not draft.scrolledToBottom:
            return
        self._mark_scrolled()
        self.pad.load_strokes(draft.strokes)
        if draft.typedName:
            self.set_typed_name(draft.typedName)
        self.acknowledged = draft.checkboxChecked
