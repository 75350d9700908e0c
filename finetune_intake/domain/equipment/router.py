"""Equipment router - FastAPI endpoints for building the work order's service items"""

import logging

from fastapi import APIRouter, Depends

from ...config import FINETUNE_SHOP_ID
from ...services.finetune_api import FineTuneAPI, get_finetune_api
from ..agreements.draft_store import AgreementDraftStore, get_draft_store
from ..agreements.gate import agreement_required
from ..agreements.repository import AgreementRepository
from ..wizard.schemas import WizardStateResponse
from ..wizard.session import WizardSession, get_session
from ..wizard.steps import Step
from .repository import EquipmentRepository
from .schemas import (
    BindingRequest,
    BootOptionResponse,
    BootRequest,
    EquipmentOptionsResponse,
    EquipmentRequest,
    EquipmentStateResponse,
    ProfileRequest,
    ServiceTypeRequest,
)
from .service import EquipmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intake/sessions/{session_id}/equipment", tags=["Equipment"])


def get_equipment_service(api: FineTuneAPI = Depends(get_finetune_api)) -> EquipmentService:
    """Dependency injection for EquipmentService"""
    return EquipmentService(EquipmentRepository(api))


def get_agreement_repository(api: FineTuneAPI = Depends(get_finetune_api)) -> AgreementRepository:
    """Dependency injection for AgreementRepository"""
    return AgreementRepository(api)


def _editing(session: WizardSession) -> WizardSession:
    session.require_step(Step.EQUIPMENT)
    return session


# ============================================================================
# OPTIONS
# ============================================================================


@router.get("/options", response_model=EquipmentOptionsResponse)
async def get_options(session: WizardSession = Depends(get_session)):
    """Customer equipment, boots and the model catalog"""
    return EquipmentOptionsResponse.from_options(_editing(session).builder.options)


@router.get("/boots", response_model=list[BootOptionResponse])
async def get_boot_choices(
    session: WizardSession = Depends(get_session),
    service: EquipmentService = Depends(get_equipment_service),
):
    """Boots to offer for the item being edited"""
    builder = _editing(session).builder
    boots = await service.boot_choices(builder.draft, builder.options)
    builder.offer_boots(boots)
    return [BootOptionResponse(**b.model_dump()) for b in boots]


# ============================================================================
# DRAFT ITEM
# ============================================================================


@router.get("", response_model=EquipmentStateResponse)
async def get_equipment_state(session: WizardSession = Depends(get_session)):
    return EquipmentStateResponse.from_builder(session.builder)


@router.post("/draft/service-type", response_model=EquipmentStateResponse)
async def select_service_type(data: ServiceTypeRequest, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    builder.select_service_type(data.serviceType)
    return EquipmentStateResponse.from_builder(builder)


@router.post("/draft/equipment", response_model=EquipmentStateResponse)
async def choose_equipment(data: EquipmentRequest, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    if data.kind == "existing":
        builder.use_existing_equipment(data.equipmentId)
    else:
        builder.describe_new_equipment(
            brand=data.brand,
            model=data.model,
            condition=data.condition,
            ability_level=data.abilityLevel,
            length=data.length,
        )
    return EquipmentStateResponse.from_builder(builder)


@router.post("/draft/boot", response_model=EquipmentStateResponse)
async def choose_boot(data: BootRequest, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    if data.kind == "existing":
        builder.use_existing_boot(data.bootId)
    else:
        builder.describe_new_boot(brand=data.brand, model=data.model, bsl=data.bsl)
    return EquipmentStateResponse.from_builder(builder)


@router.post("/draft/binding", response_model=EquipmentStateResponse)
async def set_binding(data: BindingRequest, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    builder.set_binding(brand=data.brand, model=data.model)
    return EquipmentStateResponse.from_builder(builder)


@router.post("/draft/profile", response_model=EquipmentStateResponse)
async def set_profile(data: ProfileRequest, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    builder.set_profile(
        height_inches=data.heightInches,
        weight=data.weight,
        age=data.age,
        ability_level=data.abilityLevel,
        height_feet=data.heightFeet,
    )
    return EquipmentStateResponse.from_builder(builder)


@router.delete("/draft", response_model=EquipmentStateResponse)
async def discard_draft(session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    builder.discard_draft()
    return EquipmentStateResponse.from_builder(builder)


# ============================================================================
# ITEM LIST
# ============================================================================


@router.post("/items", response_model=EquipmentStateResponse, status_code=201)
async def add_item(session: WizardSession = Depends(get_session)):
    """Validate the draft and add it to the work order"""
    builder = _editing(session).builder
    builder.add_item()
    return EquipmentStateResponse.from_builder(builder)


@router.delete("/items/{item_id}", response_model=EquipmentStateResponse)
async def remove_item(item_id: str, session: WizardSession = Depends(get_session)):
    builder = _editing(session).builder
    builder.remove_item(item_id)
    return EquipmentStateResponse.from_builder(builder)


@router.post("/complete", response_model=WizardStateResponse)
async def complete_items(
    session: WizardSession = Depends(get_session),
    agreements: AgreementRepository = Depends(get_agreement_repository),
    drafts: AgreementDraftStore = Depends(get_draft_store),
):
    """Finish the equipment step; goes to the agreement when any item is a mount"""
    items = _editing(session).builder.validate_all()

    template = saved = None
    if agreement_required(items) and session.gate is None:
        template = await agreements.get_template(FINETUNE_SHOP_ID)
        saved = await drafts.load(session.id)

    session.complete_items(items, template, saved)
    return WizardStateResponse.from_session(session)
