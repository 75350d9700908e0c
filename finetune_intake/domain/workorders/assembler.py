"""
Work order assembly and submission.

Builds the create-work-order payload from the frozen draft and submits it
once. When a signed agreement is attached, the sign-agreement call runs as
a follow-up whose failure is reported but never undoes the work order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ...errors import (
    AgreementWorkflowError,
    AlreadySubmittedError,
    IntakeError,
    SubmissionInProgressError,
    ValidationError,
)
from ...models import (
    Agreement,
    Customer,
    ExistingBoot,
    ExistingEquipment,
    ServiceItem,
    ServiceType,
    WorkOrderStatus,
)
from ..agreements.gate import agreement_required
from .draft import WorkOrderDraft
from .repository import WorkOrderRepository
from .status import derive_status

logger = logging.getLogger(__name__)


@dataclass
class AgreementFollowUp:
    attempted: bool = False
    succeeded: bool = False
    error: Optional[str] = None
    pdf_url: Optional[str] = None


@dataclass
class SubmissionResult:
    work_order_id: int
    status: WorkOrderStatus
    agreement: AgreementFollowUp = field(default_factory=AgreementFollowUp)


def _item_payload(item: ServiceItem) -> dict:
    entry: dict = {"serviceType": item.service_type.value}

    equipment = item.equipment
    if isinstance(equipment, ExistingEquipment):
        entry["equipmentId"] = equipment.equipment_id
    else:
        new_equipment = {
            "brand": equipment.brand,
            "model": equipment.model,
            "condition": equipment.condition.value,
            "abilityLevel": equipment.ability_level.value,
        }
        if equipment.length is not None:
            new_equipment["length"] = equipment.length
        entry["newEquipment"] = new_equipment

    if item.service_type != ServiceType.MOUNT:
        return entry

    if isinstance(item.boot, ExistingBoot):
        entry["bootId"] = item.boot.boot_id
    else:
        entry["newBoot"] = {"brand": item.boot.brand, "model": item.boot.model, "bsl": item.boot.bsl}

    entry["bindingBrand"] = item.binding.brand
    if item.binding.model:
        entry["bindingModel"] = item.binding.model

    if item.profile is not None:
        entry["heightInches"] = item.profile.height_inches
        entry["weight"] = item.profile.weight
        entry["age"] = item.profile.age
        entry["skiAbilityLevel"] = item.profile.ability_level.value

    return entry


def build_payload(customer: Customer, items: list[ServiceItem], agreement: Optional[Agreement]) -> dict:
    """Create-work-order request body. Keys that do not apply are left out, never null."""
    payload = {
        "customerFirstName": customer.first_name,
        "customerLastName": customer.last_name,
        "email": customer.email,
        "phone": customer.phone,
        "equipment": [_item_payload(item) for item in items],
    }

    if agreement is not None and agreement.required:
        fields = {
            "agreementAccepted": agreement.accepted,
            "agreementVersion": agreement.version,
            "signedName": agreement.signature_name,
            "signatureImageBase64": agreement.signature_image,
            "agreementAcceptedAt": agreement.accepted_at.isoformat() if agreement.accepted_at else None,
        }
        payload.update({k: v for k, v in fields.items() if v is not None})

    return payload


def check_ready(draft: WorkOrderDraft) -> Optional[Agreement]:
    """
    Everything that must hold before anything is sent.

    Returns the agreement to submit, or None when no agreement applies.

    Raises:
        ValidationError: If the draft cannot be submitted
    """
    if draft.customer is None:
        raise ValidationError("customer", "Select or create a customer first")
    if not draft.items:
        raise ValidationError("items", "At least one equipment item is required")

    if not agreement_required(draft.items):
        return None
    agreement = draft.agreement
    if agreement is None or not agreement.accepted:
        raise ValidationError("agreement", "The binding mounting agreement must be signed before submitting")
    return agreement


class WorkOrderAssembler:
    """Submits one work order, at most once"""

    def __init__(self, repo: WorkOrderRepository):
        self.repo = repo
        self._lock = asyncio.Lock()
        self.result: Optional[SubmissionResult] = None

    @property
    def submitting(self) -> bool:
        return self._lock.locked()

    @property
    def submitted(self) -> bool:
        return self.result is not None

    async def submit(self, draft: WorkOrderDraft) -> SubmissionResult:
        """
        Submit the draft.

        Raises:
            SubmissionInProgressError: If a submission is already running
            AlreadySubmittedError: If this work order was already created
            ValidationError: Before any network call, if the draft is incomplete
            QuotaExceededError: If the shop's daily limit is reached
            NetworkError: If creation failed; the draft is untouched and can be resubmitted
        """
        if self._lock.locked():
            raise SubmissionInProgressError("A submission is already in progress")
        if self.result is not None:
            raise AlreadySubmittedError(f"Work order {self.result.work_order_id} was already submitted")

        async with self._lock:
            agreement = check_ready(draft)
            payload = build_payload(draft.customer, draft.items, agreement)

            work_order_id = await self.repo.create(payload)
            logger.info(f"✅ Work order {work_order_id} created with {len(draft.items)} item(s)")

            # A created work order is never re-submitted, whatever the follow-up does
            self.result = SubmissionResult(
                work_order_id=work_order_id,
                status=derive_status(draft.items),
            )
            if agreement is not None and agreement.accepted:
                self.result.agreement = await self._sign(work_order_id, draft.customer, agreement)
            return self.result

    async def _sign(self, work_order_id: int, customer: Customer, agreement: Agreement) -> AgreementFollowUp:
        payload = {
            "signatureName": agreement.signature_name,
            "email": customer.email,
            "phone": customer.phone,
            "signatureImageBase64": agreement.signature_image,
        }
        try:
            pdf_url = await self.repo.sign_agreement(work_order_id, payload)
        except IntakeError as e:
            failure = AgreementWorkflowError(f"Agreement for work order {work_order_id} was not signed: {e}")
            logger.error(f"❌ {failure}")
            return AgreementFollowUp(attempted=True, succeeded=False, error=str(failure))

        logger.info(f"✅ Agreement signed for work order {work_order_id}")
        return AgreementFollowUp(attempted=True, succeeded=True, pdf_url=pdf_url)
