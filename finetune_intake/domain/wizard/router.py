"""Wizard router - FastAPI endpoints for intake sessions, review and submission"""

import logging

from fastapi import APIRouter, Depends

from ...services.finetune_api import FineTuneAPI, get_finetune_api
from ..agreements.draft_store import AgreementDraftStore, get_draft_store
from ..workorders.assembler import build_payload
from ..workorders.schemas import ReviewResponse, SubmissionResponse
from .schemas import WizardStateResponse
from .session import WizardSession, WizardSessionStore, get_session, get_session_store
from .steps import Step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intake", tags=["Intake"])


@router.post("/sessions", response_model=WizardStateResponse, status_code=201)
async def start_session(
    store: WizardSessionStore = Depends(get_session_store),
    api: FineTuneAPI = Depends(get_finetune_api),
):
    """Start a new work order intake"""
    session = store.create(api)
    return WizardStateResponse.from_session(session)


@router.get("/sessions/{session_id}", response_model=WizardStateResponse)
async def get_session_state(session: WizardSession = Depends(get_session)):
    return WizardStateResponse.from_session(session)


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(
    session: WizardSession = Depends(get_session),
    store: WizardSessionStore = Depends(get_session_store),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    """Abandon the intake and drop any saved agreement draft"""
    await drafts.clear(session.id)
    store.discard(session.id)


@router.post("/sessions/{session_id}/back", response_model=WizardStateResponse)
async def go_back(session: WizardSession = Depends(get_session)):
    session.back()
    return WizardStateResponse.from_session(session)


@router.get("/sessions/{session_id}/review", response_model=ReviewResponse)
async def review(session: WizardSession = Depends(get_session)):
    """Everything that will be submitted, including the exact request body"""
    session.require_step(Step.REVIEW)
    draft = session.draft
    agreement = draft.agreement
    return ReviewResponse(
        customer=draft.customer.model_dump(mode="json", by_alias=True),
        items=[item.model_dump(mode="json", by_alias=True) for item in draft.items],
        status=draft.status.value if draft.status else None,
        agreementRequired=session.agreement_required,
        agreementAccepted=bool(agreement and agreement.accepted),
        payload=build_payload(draft.customer, draft.items, agreement),
    )


@router.post("/sessions/{session_id}/submit", response_model=SubmissionResponse)
async def submit(
    session: WizardSession = Depends(get_session),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    """Create the work order; a quota error moves the session to LIMIT_REACHED"""
    result = await session.submit()
    await drafts.clear(session.id)
    return SubmissionResponse.from_result(result)
