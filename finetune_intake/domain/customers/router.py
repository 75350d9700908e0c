"""Customer router - FastAPI endpoints for resolving the work order's customer"""

import logging

from fastapi import APIRouter, Depends

from ...errors import DuplicateCustomerError, ValidationError
from ...models import Customer
from ...services.finetune_api import FineTuneAPI, get_finetune_api
from ..equipment.router import get_equipment_service
from ..equipment.service import EquipmentService
from ..wizard.schemas import WizardStateResponse
from ..wizard.session import WizardSession, get_session
from .repository import CustomerRepository
from .schemas import (
    CustomerCreate,
    CustomerResponse,
    CustomerSelect,
    DuplicateResolution,
    SearchInput,
    SearchRequest,
    SearchResultsResponse,
)
from .service import CustomerResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intake/sessions/{session_id}/customer", tags=["Customers"])


def get_customer_resolver(api: FineTuneAPI = Depends(get_finetune_api)) -> CustomerResolver:
    """Dependency injection for CustomerResolver"""
    return CustomerResolver(CustomerRepository(api))


def _search_state(session: WizardSession) -> SearchResultsResponse:
    live = session.live_search
    return SearchResultsResponse(
        query=live.query,
        searching=live.searching,
        results=[CustomerResponse.from_customer(c) for c in live.results],
        error=live.error,
    )


async def _resolve(
    session: WizardSession, customer: Customer, equipment: EquipmentService
) -> WizardStateResponse:
    options = await equipment.load_options(customer)
    session.resolve_customer(customer, options)
    return WizardStateResponse.from_session(session)


@router.post("/search/input", response_model=SearchResultsResponse)
async def search_input(data: SearchInput, session: WizardSession = Depends(get_session)):
    """Keystroke in the live search box; results arrive after the debounce"""
    session.live_search.update(data.text)
    return _search_state(session)


@router.get("/search", response_model=SearchResultsResponse)
async def search_state(session: WizardSession = Depends(get_session)):
    """Latest live search results"""
    return _search_state(session)


@router.post("/search", response_model=list[CustomerResponse])
async def search_now(
    data: SearchRequest,
    session: WizardSession = Depends(get_session),
    resolver: CustomerResolver = Depends(get_customer_resolver),
):
    """Search immediately, without debouncing"""
    session.search_results = await resolver.search(data.query)
    return [CustomerResponse.from_customer(c) for c in session.search_results]


@router.post("/select", response_model=WizardStateResponse)
async def select_customer(
    data: CustomerSelect,
    session: WizardSession = Depends(get_session),
    equipment: EquipmentService = Depends(get_equipment_service),
):
    """Use an existing customer from the search results"""
    customer = session.find_result(data.customerId)
    logger.info(f"👤 Selected existing customer {customer.id}")
    return await _resolve(session, customer, equipment)


@router.post("", response_model=WizardStateResponse)
async def create_customer(
    data: CustomerCreate,
    session: WizardSession = Depends(get_session),
    resolver: CustomerResolver = Depends(get_customer_resolver),
    equipment: EquipmentService = Depends(get_equipment_service),
):
    """
    Create a new customer.

    A duplicate is held on the session and answered with 409; the operator
    then chooses through /duplicate.
    """
    try:
        customer = await resolver.create(data)
    except DuplicateCustomerError as e:
        session.pending_duplicate = e.existing
        raise
    return await _resolve(session, customer, equipment)


@router.post("/duplicate", response_model=WizardStateResponse)
async def resolve_duplicate(
    data: DuplicateResolution,
    session: WizardSession = Depends(get_session),
    equipment: EquipmentService = Depends(get_equipment_service),
):
    """Use the existing customer, or go back to editing the form"""
    existing = session.pending_duplicate
    if existing is None:
        raise ValidationError("useExisting", "There is no duplicate customer to resolve")

    if not data.useExisting:
        session.pending_duplicate = None
        return WizardStateResponse.from_session(session)

    logger.info(f"👤 Using existing customer {existing.id} instead of creating a duplicate")
    return await _resolve(session, existing, equipment)
