"""Agreement router - FastAPI endpoints for the mounting agreement step"""

import logging

from fastapi import APIRouter, Depends

from ..wizard.session import WizardSession, get_session
from .draft_store import AgreementDraftStore, get_draft_store
from .gate import UNMET_MESSAGES, AgreementGate
from .schemas import (
    AcknowledgementEvent,
    AgreementResponse,
    GateResponse,
    LayoutEvent,
    ScrollEvent,
    StrokeEvent,
    TypedNameEvent,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intake/sessions/{session_id}/agreement", tags=["Agreement"])


def _gate_response(gate: AgreementGate) -> GateResponse:
    return GateResponse(
        state=gate.state.value,
        title=gate.template.title,
        agreementText=gate.template.agreement_text,
        expectedName=gate.expected_name,
        scrolledToBottom=gate.scrolled_to_bottom,
        signed=gate.signed,
        typedName=gate.typed_name,
        nameError=gate.name_error,
        acknowledged=gate.acknowledged,
        canContinue=gate.can_continue,
        unmet=[UNMET_MESSAGES[c] for c in gate.unmet_conditions()],
    )


async def _saved(session: WizardSession, gate: AgreementGate, drafts: AgreementDraftStore) -> GateResponse:
    await drafts.save(session.id, gate.snapshot())
    return _gate_response(gate)


@router.get("", response_model=GateResponse)
async def get_agreement(session: WizardSession = Depends(get_session)):
    """Agreement text and the current state of the signing gate"""
    return _gate_response(session.require_gate())


@router.post("/layout", response_model=GateResponse)
async def report_layout(
    data: LayoutEvent,
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.on_layout(data.scrollHeight, data.clientHeight)
    return await _saved(session, gate, drafts)


@router.post("/scroll", response_model=GateResponse)
async def report_scroll(
    data: ScrollEvent,
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.on_scroll(data.scrollTop, data.scrollHeight, data.clientHeight)
    return await _saved(session, gate, drafts)


@router.post("/strokes", response_model=GateResponse)
async def add_stroke(
    data: StrokeEvent,
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.add_stroke(data.points)
    return await _saved(session, gate, drafts)


@router.delete("/signature", response_model=GateResponse)
async def clear_signature(
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.clear_signature()
    return await _saved(session, gate, drafts)


@router.post("/name", response_model=GateResponse)
async def type_name(
    data: TypedNameEvent,
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.set_typed_name(data.name)
    return await _saved(session, gate, drafts)


@router.post("/acknowledge", response_model=GateResponse)
async def acknowledge(
    data: AcknowledgementEvent,
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    gate = session.require_gate()
    gate.set_acknowledged(data.checked)
    return await _saved(session, gate, drafts)


@router.post("/accept", response_model=AgreementResponse)
async def accept_agreement(
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    """Accept once every condition is met; moves the wizard to review"""
    agreement = session.require_gate().accept()
    session.accept_agreement(agreement)
    await drafts.clear(session.id)
    logger.info(f"✍️ Agreement accepted by {agreement.signature_name} ({agreement.version})")
    return AgreementResponse(
        required=agreement.required,
        accepted=agreement.accepted,
        signatureName=agreement.signature_name,
        acceptedAt=agreement.accepted_at,
        version=agreement.version,
    )
