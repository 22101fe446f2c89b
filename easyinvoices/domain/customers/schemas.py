"""Customer domain schemas - Pydantic models shared by server and client"""

from typing import Optional

from pydantic import BaseModel

from ..appointments.schemas import AppointmentOut
from ..invoices.schemas import InvoiceDescriptor

CUSTOMER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "address",
    "city",
    "zip_code",
    "notes",
)

REQUIRED_CUSTOMER_FIELDS = ("first_name", "last_name", "email")


class CustomerPayload(BaseModel):
    """Customer form as posted by the admin page (no id means insert)"""

    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None

    def field_values(self) -> dict:
        return {field: getattr(self, field) for field in CUSTOMER_FIELDS}


class CustomerAggregate(BaseModel):
    """Customer with embedded appointments and invoices, as returned by the filter"""

    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    appointments: list[AppointmentOut] = []
    invoices: list[InvoiceDescriptor] = []

    @classmethod
    def from_model(cls, customer) -> "CustomerAggregate":
        return cls(
            id=customer.id,
            **{field: getattr(customer, field) for field in CUSTOMER_FIELDS},
            appointments=[AppointmentOut.from_model(a) for a in customer.appointments],
            invoices=[InvoiceDescriptor.from_model(i) for i in customer.invoices],
        )
