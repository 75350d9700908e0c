import pytest

from finetune_intake.domain.equipment.builder import EquipmentOptions
from finetune_intake.domain.wizard.session import WizardSession, WizardSessionStore
from finetune_intake.domain.wizard.steps import Event, Step, next_step
from finetune_intake.errors import (
    InvalidTransitionError,
    QuotaExceededError,
    SessionNotFoundError,
)
from finetune_intake.models import (
    AgreementTemplate,
    Binding,
    Customer,
    EquipmentRecord,
    ExistingBoot,
    ExistingEquipment,
    ServiceItem,
    ServiceType,
)

OPTIONS = EquipmentOptions(equipment=[EquipmentRecord(id=42, brand="Atomic")])


def tune_item():
    return ServiceItem(service_type=ServiceType.TUNE, equipment=ExistingEquipment(equipment_id=42))


def mount_item():
    return ServiceItem(
        service_type=ServiceType.MOUNT,
        equipment=ExistingEquipment(equipment_id=42),
        boot=ExistingBoot(boot_id=9),
        binding=Binding(brand="Look"),
    )


@pytest.mark.parametrize(
    "step, event, required, expected",
    [
        (Step.CUSTOMER, Event.CUSTOMER_RESOLVED, False, Step.EQUIPMENT),
        (Step.EQUIPMENT, Event.ITEMS_COMPLETED, True, Step.AGREEMENT),
        (Step.EQUIPMENT, Event.ITEMS_COMPLETED, False, Step.REVIEW),
        (Step.EQUIPMENT, Event.BACK, False, Step.CUSTOMER),
        (Step.AGREEMENT, Event.AGREEMENT_ACCEPTED, True, Step.REVIEW),
        (Step.AGREEMENT, Event.BACK, True, Step.EQUIPMENT),
        (Step.REVIEW, Event.BACK, True, Step.AGREEMENT),
        (Step.REVIEW, Event.BACK, False, Step.EQUIPMENT),
        (Step.REVIEW, Event.SUBMIT_SUCCEEDED, False, Step.SUBMITTED),
        (Step.REVIEW, Event.QUOTA_EXCEEDED, True, Step.LIMIT_REACHED),
    ],
)
def test_transitions(step, event, required, expected):
    assert next_step(step, event, agreement_required=required) == expected


@pytest.mark.parametrize(
    "step, event",
    [
        (Step.CUSTOMER, Event.BACK),
        (Step.CUSTOMER, Event.SUBMIT_SUCCEEDED),
        (Step.EQUIPMENT, Event.AGREEMENT_ACCEPTED),
        (Step.SUBMITTED, Event.BACK),
        (Step.LIMIT_REACHED, Event.BACK),
        (Step.LIMIT_REACHED, Event.SUBMIT_SUCCEEDED),
    ],
)
def test_illegal_transitions(step, event):
    with pytest.raises(InvalidTransitionError):
        next_step(step, event, agreement_required=False)


@pytest.fixture
def session(api):
    return WizardSession("session-1", api)


def test_tune_only_skips_agreement(session, jane):
    session.resolve_customer(jane, OPTIONS)
    assert session.step == Step.EQUIPMENT
    assert session.builder.options is OPTIONS

    session.complete_items([tune_item()])

    assert session.step == Step.REVIEW
    assert session.gate is None
    assert session.draft.agreement.required is False
    assert session.draft.status.value == "PENDING"


def test_mount_goes_through_agreement(session, jane):
    session.resolve_customer(jane, OPTIONS)

    with pytest.raises(InvalidTransitionError):
        session.complete_items([mount_item()])

    session.complete_items([mount_item()], AgreementTemplate(agreement_text="terms"))

    assert session.step == Step.AGREEMENT
    assert session.gate.expected_name == "Jane Doe"

    session.back()
    assert session.step == Step.EQUIPMENT


def test_new_customer_resets_items(session, jane):
    session.resolve_customer(jane, OPTIONS)
    session.builder.items.append(tune_item())
    session.back()

    session.resolve_customer(jane, OPTIONS)
    assert len(session.builder.items) == 1

    session.back()
    other = Customer(id=8, first_name="John", last_name="Roe", email="john@example.com", phone="5559876543")
    session.resolve_customer(other, OPTIONS)

    assert session.builder.items == []
    assert session.draft.customer == other


def test_steps_guard_actions(session, jane):
    with pytest.raises(InvalidTransitionError):
        session.complete_items([tune_item()])
    with pytest.raises(InvalidTransitionError):
        session.require_gate()

    session.resolve_customer(jane, OPTIONS)
    with pytest.raises(InvalidTransitionError):
        session.resolve_customer(jane, OPTIONS)


@pytest.mark.asyncio
async def test_quota_moves_to_limit_reached(session, fake_api, jane):
    fake_api.on("POST", "/api/public/workorders", status=429, body={"message": "limit"})
    session.resolve_customer(jane, OPTIONS)
    session.complete_items([tune_item()])

    with pytest.raises(QuotaExceededError):
        await session.submit()

    assert session.step == Step.LIMIT_REACHED
    with pytest.raises(InvalidTransitionError):
        await session.submit()


@pytest.mark.asyncio
async def test_submit_success(session, fake_api, jane):
    fake_api.on("POST", "/api/public/workorders", status=201, body={"workOrderId": 5})
    session.resolve_customer(jane, OPTIONS)
    session.complete_items([tune_item()])

    result = await session.submit()

    assert result.work_order_id == 5
    assert session.step == Step.SUBMITTED


def test_store_expires_idle_sessions(api):
    store = WizardSessionStore(ttl=60)
    session = store.create(api)
    assert store.get(session.id) is session

    session.last_seen -= 120

    with pytest.raises(SessionNotFoundError):
        store.get(session.id)
    assert len(store) == 0


def test_store_purges_expired(api):
    store = WizardSessionStore(ttl=60)
    stale = store.create(api)
    fresh = store.create(api)
    stale.last_seen -= 120

    assert store.purge_expired() == 1
    assert store.get(fresh.id) is fresh

    with pytest.raises(SessionNotFoundError):
        store.get("missing")
