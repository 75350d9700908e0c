import httpx
import pytest

from finetune_intake.errors import NetworkError, QuotaExceededError
from finetune_intake.services.finetune_api import FineTuneAPI


@pytest.mark.asyncio
async def test_requests_carry_bearer_token(api, fake_api):
    fake_api.on("GET", "/api/ski-models", body=[{"brand": "Atomic", "model": "Bent 100", "length": 180}])

    models = await api.get_ski_models()

    assert models[0]["brand"] == "Atomic"
    assert fake_api.requests[0].headers["Authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_lookup_miss_is_none(api):
    assert await api.lookup_customer("nobody@example.com", "5550000000") is None


@pytest.mark.asyncio
async def test_missing_equipment_boots_is_empty(api):
    assert await api.get_equipment_boots(42) == []


@pytest.mark.asyncio
async def test_quota_status_raises_quota_error(api, fake_api):
    fake_api.on("POST", "/api/public/workorders", status=429, body={"detail": "Daily limit reached"})

    with pytest.raises(QuotaExceededError) as exc:
        await api.create_work_order({"equipment": []})
    assert exc.value.message == "Daily limit reached"


@pytest.mark.asyncio
async def test_server_error_raises_network_error(api, fake_api):
    fake_api.on("GET", "/api/customers/7/equipment", status=500, body={"message": "db down"})

    with pytest.raises(NetworkError) as exc:
        await api.get_customer_equipment(7)
    assert exc.value.status_code == 500
    assert str(exc.value) == "db down"


@pytest.mark.asyncio
async def test_unreachable_api_raises_network_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = FineTuneAPI(base_url="http://finetune.test", transport=httpx.MockTransport(refuse))

    with pytest.raises(NetworkError) as exc:
        await api.search_customers("name", "Jane")
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_first_active_agreement_template(api, fake_api):
    fake_api.on(
        "GET",
        "/api/agreement-templates/shop/3",
        body=[
            {"agreementText": "old terms", "isActive": False},
            {"agreementText": "current terms", "isActive": True, "version": "v2"},
        ],
    )

    template = await api.get_agreement_template("3")

    assert template["agreementText"] == "current terms"


@pytest.mark.asyncio
async def test_no_template_configured(api):
    assert await api.get_agreement_template("3") is None


@pytest.mark.asyncio
async def test_non_json_reply_raises_network_error(api, fake_api):
    fake_api.on("GET", "/api/ski-models", handler=lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(NetworkError) as exc:
        await api.get_ski_models()
    assert exc.value.status_code == 200
