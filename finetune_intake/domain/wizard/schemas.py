"""Wizard schemas - session state returned after every step action"""

from typing import Any, Optional

from pydantic import BaseModel

from ..customers.schemas import CustomerResponse
from .session import WizardSession


class WizardStateResponse(BaseModel):
    sessionId: str
    step: str
    customer: Optional[CustomerResponse] = None
    items: list[dict[str, Any]]
    status: Optional[str] = None
    agreementRequired: bool
    agreementAccepted: bool
    submitting: bool
    workOrderId: Optional[int] = None

    @classmethod
    def from_session(cls, session: WizardSession) -> "WizardStateResponse":
        draft = session.draft
        agreement = draft.agreement
        result = session.assembler.result
        return cls(
            sessionId=session.id,
            step=session.step.value,
            customer=CustomerResponse.from_customer(draft.customer) if draft.customer else None,
            items=[item.model_dump(mode="json", by_alias=True) for item in draft.items],
            status=draft.status.value if draft.status else None,
            agreementRequired=session.agreement_required,
            agreementAccepted=bool(agreement and agreement.accepted),
            submitting=session.assembler.submitting,
            workOrderId=result.work_order_id if result else None,
        )
