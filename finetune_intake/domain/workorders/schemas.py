"""Work order domain schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel

from .assembler import SubmissionResult


class ReviewResponse(BaseModel):
    """Everything shown on the review step"""

    customer: Optional[dict[str, Any]] = None
    items: list[dict[str, Any]]
    status: Optional[str] = None
    agreementRequired: bool
    agreementAccepted: bool
    payload: Optional[dict[str, Any]] = None


class AgreementFollowUpResponse(BaseModel):
    attempted: bool
    succeeded: bool
    error: Optional[str] = None
    pdfUrl: Optional[str] = None


class SubmissionResponse(BaseModel):
    workOrderId: int
    status: str
    agreement: AgreementFollowUpResponse

    @classmethod
    def from_result(cls, result: SubmissionResult) -> "SubmissionResponse":
        return cls(
            workOrderId=result.work_order_id,
            status=result.status.value,
            agreement=AgreementFollowUpResponse(
                attempted=result.agreement.attempted,
                succeeded=result.agreement.succeeded,
                error=result.agreement.error,
                pdfUrl=result.agreement.pdf_url,
            ),
        )
