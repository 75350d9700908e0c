"""Agreement domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ScrollEvent(BaseModel):
    """Scroll position of the agreement text box"""

    scrollTop: float = 0
    scrollHeight: float
    clientHeight: float


class LayoutEvent(BaseModel):
    """Agreement text box measured after render or resize"""

    scrollHeight: float
    clientHeight: float


class StrokeEvent(BaseModel):
    """One pen-down to pen-up stroke on the signature pad"""

    points: list[tuple[float, float]] = Field(min_length=1)


class TypedNameEvent(BaseModel):
    name: str = ""


class AcknowledgementEvent(BaseModel):
    checked: bool


class AgreementDraft(BaseModel):
    """Best-effort copy of the gate inputs kept between page loads"""

    scrollPosition: float = 0
    scrolledToBottom: bool = False
    typedName: str = ""
    checkboxChecked: bool = False
    strokes: list[list[tuple[float, float]]] = Field(default_factory=list)


class GateResponse(BaseModel):
    """Schema for agreement gate state"""

    state: str
    title: str
    agreementText: str
    expectedName: str
    scrolledToBottom: bool
    signed: bool
    typedName: str
    nameError: Optional[str] = None
    acknowledged: bool
    canContinue: bool
    unmet: list[str]


class AgreementResponse(BaseModel):
    required: bool
    accepted: bool
    signatureName: Optional[str] = None
    acceptedAt: Optional[datetime] = None
    version: Optional[str] = None
