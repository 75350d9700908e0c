"""Customer domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import Customer
from ...shared.validators import filter_phone_input


class CustomerCreate(BaseModel):
    """Schema for the new-customer form. Field checks happen in the resolver."""

    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""

    @field_validator("phone", mode="before")
    @classmethod
    def filter_phone(cls, v):
        return filter_phone_input(v)


class SearchInput(BaseModel):
    """Schema for a live-search keystroke"""

    text: str = ""


class SearchRequest(BaseModel):
    """Schema for an immediate search"""

    query: str


class CustomerSelect(BaseModel):
    """Schema for choosing a customer from search results"""

    customerId: int


class DuplicateResolution(BaseModel):
    """Operator's answer to a duplicate-customer prompt"""

    useExisting: bool


class CustomerResponse(BaseModel):
    """Schema for customer response"""

    id: Optional[int] = None
    firstName: str
    lastName: str
    email: str
    phone: str

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            id=customer.id,
            firstName=customer.first_name,
            lastName=customer.last_name,
            email=customer.email,
            phone=customer.phone,
        )


class SearchResultsResponse(BaseModel):
    query: str
    searching: bool
    results: list[CustomerResponse]
    error: Optional[str] = None
