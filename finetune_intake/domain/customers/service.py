"""Customer service - resolving the customer a work order is for"""

import logging
from enum import Enum
from typing import Optional

from ...errors import DuplicateCustomerError
from ...models import Customer
from ...shared.validators import require_text, validate_email, validate_phone
from .live_search import LiveSearch
from .repository import CustomerRepository
from .schemas import CustomerCreate

logger = logging.getLogger(__name__)


class SearchField(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    NAME = "name"


def classify_query(query: str) -> SearchField:
    """Pick the server-side filter for a free-text query"""
    query = query.strip()
    if "@" in query:
        return SearchField.EMAIL
    if query.isdigit():
        return SearchField.PHONE
    return SearchField.NAME


class CustomerResolver:
    """Finds or creates the customer, refusing to silently create duplicates"""

    def __init__(self, repo: CustomerRepository):
        self.repo = repo

    async def search(self, query: str) -> list[Customer]:
        field = classify_query(query)
        logger.info(f"🔍 Customer search by {field.value}")
        return await self.repo.search(field.value, query.strip())

    async def lookup(self, email: str, phone: str) -> Optional[Customer]:
        return await self.repo.lookup(email, phone)

    def live_search(self) -> LiveSearch:
        return LiveSearch(self.search)

    @staticmethod
    def validate(data: CustomerCreate) -> CustomerCreate:
        """Check the new-customer form; the first bad field wins"""
        first_name = require_text("firstName", data.firstName, "First name")
        last_name = require_text("lastName", data.lastName, "Last name")
        email = validate_email(data.email)
        phone = validate_phone(data.phone)
        return CustomerCreate(firstName=first_name, lastName=last_name, email=email, phone=phone)

    async def create(self, data: CustomerCreate) -> Customer:
        """
        Create a new customer after a duplicate check.

        Raises:
            ValidationError: If a field is blank or malformed
            DuplicateCustomerError: If email+phone already belong to a customer;
                no create call is made
        """
        data = self.validate(data)

        existing = await self.lookup(data.email, data.phone)
        if existing:
            logger.warning(f"⚠️ Duplicate customer for {data.email}, id={existing.id}")
            raise DuplicateCustomerError(existing)

        customer = await self.repo.create(data.firstName, data.lastName, data.email, data.phone)
        logger.info(f"✅ Created customer {customer.id}")
        return customer
