import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from finetune_intake.domain.agreements.gate import not_required
from finetune_intake.domain.workorders.assembler import WorkOrderAssembler, build_payload
from finetune_intake.domain.workorders.draft import WorkOrderDraft
from finetune_intake.domain.workorders.repository import WorkOrderRepository
from finetune_intake.errors import (
    AlreadySubmittedError,
    NetworkError,
    QuotaExceededError,
    SubmissionInProgressError,
    ValidationError,
)
from finetune_intake.models import (
    AbilityLevel,
    Agreement,
    Binding,
    Condition,
    ExistingEquipment,
    NewBoot,
    NewEquipment,
    ServiceItem,
    ServiceType,
    SkierProfile,
    WorkOrderStatus,
)
from finetune_intake.services.finetune_api import FineTuneAPI

CREATE = "/api/public/workorders"
SIGN = "/api/public/workorders/101/sign-agreement"
SIGNATURE = "data:image/png;base64,iVBORw0KGgo="
ACCEPTED_AT = datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def assembler(api):
    return WorkOrderAssembler(WorkOrderRepository(api))


@pytest.fixture
def tune_draft(jane):
    return WorkOrderDraft(
        customer=jane,
        items=[ServiceItem(service_type=ServiceType.TUNE, equipment=ExistingEquipment(equipment_id=42))],
        agreement=not_required(),
    )


@pytest.fixture
def mount_draft(jane):
    item = ServiceItem(
        service_type=ServiceType.MOUNT,
        equipment=NewEquipment(
            brand="Atomic",
            model="Bent 100",
            condition=Condition.NEW,
            ability_level=AbilityLevel.ADVANCED,
            length=180,
        ),
        boot=NewBoot(brand="Salomon", model="S/Pro", bsl=305),
        binding=Binding(brand="Look"),
        profile=SkierProfile(height_inches=70, weight=170, age=34, ability_level=AbilityLevel.ADVANCED),
    )
    agreement = Agreement(
        required=True,
        accepted=True,
        signature_name="Jane Doe",
        signature_image=SIGNATURE,
        accepted_at=ACCEPTED_AT,
        version="v1",
    )
    return WorkOrderDraft(customer=jane, items=[item], agreement=agreement)


def test_tune_only_payload(tune_draft):
    payload = build_payload(tune_draft.customer, tune_draft.items, tune_draft.agreement)

    assert payload == {
        "customerFirstName": "Jane",
        "customerLastName": "Doe",
        "email": "jane@example.com",
        "phone": "5551234567",
        "equipment": [{"serviceType": "TUNE", "equipmentId": 42}],
    }


def test_mount_with_new_boot_payload(mount_draft):
    payload = build_payload(mount_draft.customer, mount_draft.items, mount_draft.agreement)

    assert payload["equipment"] == [
        {
            "serviceType": "MOUNT",
            "newEquipment": {
                "brand": "Atomic",
                "model": "Bent 100",
                "condition": "NEW",
                "abilityLevel": "ADVANCED",
                "length": 180,
            },
            "newBoot": {"brand": "Salomon", "model": "S/Pro", "bsl": 305},
            "bindingBrand": "Look",
            "heightInches": 70,
            "weight": 170,
            "age": 34,
            "skiAbilityLevel": "ADVANCED",
        }
    ]
    assert payload["agreementAccepted"] is True
    assert payload["agreementVersion"] == "v1"
    assert payload["signedName"] == "Jane Doe"
    assert payload["signatureImageBase64"] == SIGNATURE
    assert payload["agreementAcceptedAt"] == "2026-01-15T10:30:00+00:00"


@pytest.mark.asyncio
async def test_tune_only_submission(assembler, fake_api, tune_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101, "status": "created"})

    result = await assembler.submit(tune_draft)

    assert result.work_order_id == 101
    assert result.status == WorkOrderStatus.PENDING
    assert result.agreement.attempted is False
    assert fake_api.body("POST", CREATE)["equipment"] == [{"serviceType": "TUNE", "equipmentId": 42}]
    assert [r.url.path for r in fake_api.requests] == [CREATE]


@pytest.mark.asyncio
async def test_signed_agreement_follows_creation(assembler, fake_api, mount_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101})
    fake_api.on("POST", SIGN, body={"success": True, "pdfUrl": "https://files.test/agreement-101.pdf"})

    result = await assembler.submit(mount_draft)

    assert result.agreement.succeeded is True
    assert result.agreement.pdf_url == "https://files.test/agreement-101.pdf"
    assert fake_api.body("POST", SIGN) == {
        "signatureName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "5551234567",
        "signatureImageBase64": SIGNATURE,
    }


@pytest.mark.asyncio
async def test_sign_failure_does_not_undo_work_order(assembler, fake_api, mount_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101})
    fake_api.on("POST", SIGN, status=500, body={"message": "PDF service unavailable"})

    result = await assembler.submit(mount_draft)

    assert result.work_order_id == 101
    assert result.agreement.attempted is True
    assert result.agreement.succeeded is False
    assert "PDF service unavailable" in result.agreement.error
    assert assembler.submitted


@pytest.mark.asyncio
async def test_plain_text_sign_reply_keeps_work_order(assembler, fake_api, mount_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101})
    fake_api.on("POST", SIGN, handler=lambda request: httpx.Response(200, text="OK"))

    result = await assembler.submit(mount_draft)

    assert result.work_order_id == 101
    assert result.agreement.attempted is True
    assert result.agreement.succeeded is False
    assert assembler.submitted
    with pytest.raises(AlreadySubmittedError):
        await assembler.submit(mount_draft)
    assert len(fake_api.calls("POST", CREATE)) == 1


@pytest.mark.asyncio
async def test_list_sign_reply_is_a_failed_follow_up(assembler, fake_api, mount_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101})
    fake_api.on("POST", SIGN, body=["unexpected"])

    result = await assembler.submit(mount_draft)

    assert result.agreement.succeeded is False
    assert "Unexpected sign agreement response" in result.agreement.error


@pytest.mark.asyncio
async def test_quota_exceeded(assembler, fake_api, tune_draft):
    fake_api.on("POST", CREATE, status=429, body={"message": "Daily limit of 20 work orders reached"})

    with pytest.raises(QuotaExceededError) as exc:
        await assembler.submit(tune_draft)

    assert exc.value.message == "Daily limit of 20 work orders reached"
    assert not assembler.submitted


@pytest.mark.asyncio
async def test_network_failure_allows_resubmission(assembler, fake_api, tune_draft):
    attempts = []

    def flaky(request):
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(503, json={"message": "try later"})
        return httpx.Response(201, json={"workOrderId": 101})

    fake_api.on("POST", CREATE, handler=flaky)

    with pytest.raises(NetworkError) as exc:
        await assembler.submit(tune_draft)
    assert exc.value.status_code == 503
    assert len(tune_draft.items) == 1

    result = await assembler.submit(tune_draft)
    assert result.work_order_id == 101


@pytest.mark.asyncio
async def test_no_resubmission_after_success(assembler, fake_api, tune_draft):
    fake_api.on("POST", CREATE, status=201, body={"workOrderId": 101})

    await assembler.submit(tune_draft)
    with pytest.raises(AlreadySubmittedError):
        await assembler.submit(tune_draft)

    assert len(fake_api.calls("POST", CREATE)) == 1


@pytest.mark.asyncio
async def test_concurrent_submit_is_refused(tune_draft):
    release = asyncio.Event()

    async def slow(request):
        await release.wait()
        return httpx.Response(201, json={"workOrderId": 101})

    api = FineTuneAPI(base_url="http://finetune.test", transport=httpx.MockTransport(slow))
    assembler = WorkOrderAssembler(WorkOrderRepository(api))

    first = asyncio.create_task(assembler.submit(tune_draft))
    await asyncio.sleep(0.01)
    assert assembler.submitting

    with pytest.raises(SubmissionInProgressError):
        await assembler.submit(tune_draft)

    release.set()
    result = await first
    assert result.work_order_id == 101


@pytest.mark.asyncio
async def test_unsigned_mount_is_rejected_before_network(assembler, fake_api, mount_draft):
    mount_draft.agreement = None

    with pytest.raises(ValidationError) as exc:
        await assembler.submit(mount_draft)

    assert exc.value.field == "agreement"
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_empty_items_rejected_before_network(assembler, fake_api, jane):
    with pytest.raises(ValidationError) as exc:
        await assembler.submit(WorkOrderDraft(customer=jane))

    assert exc.value.field == "items"
    assert fake_api.requests == []
