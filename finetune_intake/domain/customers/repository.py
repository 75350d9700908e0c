"""Customer repository - FineTune API operations for customers"""

from typing import Optional

from ...models import Customer
from ...services.finetune_api import FineTuneAPI


class CustomerRepository:
    """Repository for customer operations against the FineTune API"""

    def __init__(self, api: FineTuneAPI):
        self.api = api

    async def search(self, field: str, query: str) -> list[Customer]:
        results = await self.api.search_customers(field, query)
        return [Customer.model_validate(r) for r in results]

    async def lookup(self, email: str, phone: str) -> Optional[Customer]:
        record = await self.api.lookup_customer(email, phone)
        return Customer.model_validate(record) if record else None

    async def create(self, first_name: str, last_name: str, email: str, phone: str) -> Customer:
        record = await self.api.create_customer(
            {
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "phone": phone,
            }
        )
        return Customer.model_validate(record)
