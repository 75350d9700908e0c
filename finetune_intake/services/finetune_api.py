import logging
from typing import Any, Optional

import httpx

from ..config import FINETUNE_API_TOKEN, FINETUNE_API_URL, HTTP_TIMEOUT_SECONDS
from ..errors import NetworkError, QuotaExceededError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict):
        return data.get("message") or data.get("detail") or default
    return default


class FineTuneAPI:
    """Client for the FineTune persistence API"""

    def __init__(
        self,
        base_url: str = FINETUNE_API_URL,
        token: Optional[str] = FINETUNE_API_TOKEN,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        allow_404: bool = False,
    ) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"❌ FineTune API {method} {path} failed: {e}")
            raise NetworkError(f"Could not reach the FineTune API: {e}") from e

        if allow_404 and response.status_code == 404:
            return None

        if response.status_code == 429:
            message = _error_message(response, "Daily work order limit reached")
            logger.warning(f"⚠️ FineTune API {method} {path} quota exhausted: {message}")
            raise QuotaExceededError(message)

        if response.status_code >= 400:
            message = _error_message(response, f"Request failed with status {response.status_code}")
            logger.error(f"❌ FineTune API {method} {path} returned {response.status_code}: {message}")
            raise NetworkError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"❌ FineTune API {method} {path} returned a non-JSON body")
            raise NetworkError(
                "Unexpected response from the FineTune API", status_code=response.status_code
            ) from e

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def search_customers(self, field: str, query: str) -> list[dict]:
        """Search customers by one classified filter (email, phone or name)"""
        results = await self._request("GET", "/api/customers/search", params={field: query})
        return results or []

    async def lookup_customer(self, email: str, phone: str) -> Optional[dict]:
        """Exact email+phone match; None when no customer exists"""
        return await self._request(
            "GET",
            "/api/customers/lookup",
            params={"email": email, "phone": phone},
            allow_404=True,
        )

    async def create_customer(self, payload: dict) -> dict:
        logger.info(f"📥 Creating customer {payload.get('email')}")
        return await self._request("POST", "/api/customers", json=payload)

    # ------------------------------------------------------------------
    # Equipment
    # ------------------------------------------------------------------

    async def get_customer_equipment(self, customer_id: int) -> list[dict]:
        return await self._request("GET", f"/api/customers/{customer_id}/equipment") or []

    async def get_customer_boots(self, customer_id: int) -> list[dict]:
        return await self._request("GET", f"/api/customers/{customer_id}/boots") or []

    async def get_ski_models(self) -> list[dict]:
        return await self._request("GET", "/api/ski-models") or []

    async def get_equipment_boots(self, equipment_id: int) -> list[dict]:
        """Boots previously mounted on a specific equipment item"""
        return (
            await self._request(
                "GET", f"/api/public/workorders/equipment/{equipment_id}/boots", allow_404=True
            )
            or []
        )

    # ------------------------------------------------------------------
    # Agreements & work orders
    # ------------------------------------------------------------------

    async def get_agreement_template(self, shop_id: str) -> Optional[dict]:
        """Active agreement template for a shop, if one is configured"""
        templates = await self._request(
            "GET", f"/api/agreement-templates/shop/{shop_id}", allow_404=True
        )
        if not templates:
            return None
        active = [t for t in templates if t.get("isActive", True)]
        return active[0] if active else None

    async def create_work_order(self, payload: dict) -> dict:
        logger.info(
            f"📝 Submitting work order for {payload.get('email')} "
            f"with {len(payload.get('equipment', []))} item(s)"
        )
        return await self._request("POST", "/api/public/workorders", json=payload)

    async def sign_agreement(self, work_order_id: int, payload: dict) -> dict:
        logger.info(f"✍️ Signing agreement for work order {work_order_id}")
        return await self._request(
            "POST", f"/api/public/workorders/{work_order_id}/sign-agreement", json=payload
        )


# Shared client configured from the environment
finetune_api = FineTuneAPI()


def get_finetune_api() -> FineTuneAPI:
    """Dependency injection for the FineTune API client"""
    return finetune_api
