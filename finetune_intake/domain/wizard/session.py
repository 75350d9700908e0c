"""
Wizard sessions.

A session owns the work order draft for one browser session and hands each
step only the slice it needs: the builder gets the customer's options, the
gate gets the customer name, the assembler gets a frozen copy of the draft.
Sessions live in memory only.
"""

import logging
import secrets
import time
from typing import Optional

from fastapi import Depends, Path

from ...config import SESSION_TTL_SECONDS
from ...errors import InvalidTransitionError, QuotaExceededError, SessionNotFoundError, ValidationError
from ...models import Agreement, AgreementTemplate, Customer, ServiceItem
from ...services.finetune_api import FineTuneAPI
from ..agreements.gate import AgreementGate, agreement_required, not_required
from ..agreements.schemas import AgreementDraft
from ..customers.live_search import LiveSearch
from ..customers.repository import CustomerRepository
from ..customers.service import CustomerResolver
from ..equipment.builder import EquipmentItemBuilder, EquipmentOptions
from ..workorders.assembler import SubmissionResult, WorkOrderAssembler
from ..workorders.draft import WorkOrderDraft
from ..workorders.repository import WorkOrderRepository
from .steps import Event, Step, next_step

logger = logging.getLogger(__name__)


class WizardSession:
    def __init__(self, session_id: str, api: FineTuneAPI):
        self.id = session_id
        self.step = Step.CUSTOMER
        self.draft = WorkOrderDraft()

        self.live_search: LiveSearch = CustomerResolver(CustomerRepository(api)).live_search()
        self.search_results: list[Customer] = []
        self.pending_duplicate: Optional[Customer] = None

        self.builder = EquipmentItemBuilder()
        self.gate: Optional[AgreementGate] = None
        self.assembler = WorkOrderAssembler(WorkOrderRepository(api))

        self.last_seen = time.monotonic()

    @property
    def agreement_required(self) -> bool:
        return agreement_required(self.draft.items)

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def require_step(self, *steps: Step) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise InvalidTransitionError(f"Not available during {self.step.value} (needs {allowed})")

    def require_gate(self) -> AgreementGate:
        self.require_step(Step.AGREEMENT)
        if self.gate is None:
            raise InvalidTransitionError("No agreement is pending for this work order")
        return self.gate

    def advance(self, event: Event) -> Step:
        previous = self.step
        self.step = next_step(previous, event, agreement_required=self.agreement_required)
        logger.info(f"🧭 Session {self.id[:8]}: {previous.value} -> {self.step.value} ({event.value})")
        return self.step

    def back(self) -> Step:
        return self.advance(Event.BACK)

    # --- customer -----------------------------------------------------

    def find_result(self, customer_id: int) -> Customer:
        for customer in [*self.live_search.results, *self.search_results]:
            if customer.id == customer_id:
                return customer
        raise ValidationError("customerId", "Customer not found in search results")

    def resolve_customer(self, customer: Customer, options: EquipmentOptions) -> Step:
        self.require_step(Step.CUSTOMER)
        if self.draft.customer != customer:
            # Items and agreement belong to the previous customer
            self.builder = EquipmentItemBuilder(options)
            self.draft = WorkOrderDraft(customer=customer)
            self.gate = None
        else:
            self.builder.options = options

        self.pending_duplicate = None
        self.live_search.cancel()
        return self.advance(Event.CUSTOMER_RESOLVED)

    # --- equipment ----------------------------------------------------

    def complete_items(
        self,
        items: list[ServiceItem],
        template: Optional[AgreementTemplate] = None,
        saved: Optional[AgreementDraft] = None,
    ) -> Step:
        self.require_step(Step.EQUIPMENT)
        required = agreement_required(items)
        if required and self.gate is None and template is None:
            raise InvalidTransitionError("Agreement template has not been loaded")
        self.draft.items = items

        if required:
            if self.gate is None:
                self.gate = AgreementGate(self.draft.customer.full_name, template)
                if saved is not None:
                    self.gate.restore(saved)
            if self.draft.agreement is not None and not self.draft.agreement.required:
                self.draft.agreement = None
        else:
            self.gate = None
            self.draft.agreement = not_required()

        return self.advance(Event.ITEMS_COMPLETED)

    # --- agreement ----------------------------------------------------

    def accept_agreement(self, agreement: Agreement) -> Step:
        self.require_gate()
        self.draft.agreement = agreement
        return self.advance(Event.AGREEMENT_ACCEPTED)

    # --- submission ---------------------------------------------------

    async def submit(self) -> SubmissionResult:
        # SUBMITTED is let through so the assembler reports the resubmission
        self.require_step(Step.REVIEW, Step.SUBMITTED)
        try:
            result = await self.assembler.submit(self.draft.frozen())
        except QuotaExceededError:
            self.advance(Event.QUOTA_EXCEEDED)
            raise
        self.advance(Event.SUBMIT_SUCCEEDED)
        return result


class WizardSessionStore:
    """In-memory sessions keyed by a random id, dropped after an idle TTL"""

    def __init__(self, ttl: int = SESSION_TTL_SECONDS):
        self.ttl = ttl
        self._sessions: dict[str, WizardSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, api: FineTuneAPI) -> WizardSession:
        self.purge_expired()
        session = WizardSession(secrets.token_urlsafe(16), api)
        self._sessions[session.id] = session
        logger.info(f"🆕 Started intake session {session.id[:8]} ({len(self._sessions)} active)")
        return session

    def get(self, session_id: str) -> WizardSession:
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            self.discard(session_id)
            raise SessionNotFoundError("Intake session not found or expired")
        session.touch()
        return session

    def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.live_search.cancel()

    def _expired(self, session: WizardSession) -> bool:
        return time.monotonic() - session.last_seen > self.ttl

    def purge_expired(self) -> int:
        expired = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for sid in expired:
            self.discard(sid)
        if expired:
            logger.info(f"🧹 Dropped {len(expired)} idle intake session(s)")
        return len(expired)


session_store = WizardSessionStore()


def get_session_store() -> WizardSessionStore:
    return session_store


def get_session(
    session_id: str = Path(...),
    store: WizardSessionStore = Depends(get_session_store),
) -> WizardSession:
    """Dependency resolving the session named in the URL"""
    return store.get(session_id)
