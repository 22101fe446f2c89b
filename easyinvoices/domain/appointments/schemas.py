"""Appointment schemas shared by the backend API and the admin page client"""

from typing import Optional

from pydantic import BaseModel, Field

from ...shared.dates import to_db_string


class ServiceOut(BaseModel):
    id: Optional[int] = None
    name: str = ""


class ProviderOut(BaseModel):
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""


class AppointmentOut(BaseModel):
    """Appointment as embedded in a customer aggregate; flags are 0/1"""

    id: int
    start_datetime: str
    end_datetime: str
    notes: Optional[str] = None
    service: ServiceOut = Field(default_factory=ServiceOut)
    provider: ProviderOut = Field(default_factory=ProviderOut)
    is_paid: int = 0
    is_shown: int = 0
    is_invoice: int = 0

    @classmethod
    def from_model(cls, appointment) -> "AppointmentOut":
        service = appointment.service
        provider = appointment.provider
        return cls(
            id=appointment.id,
            start_datetime=to_db_string(appointment.start_datetime),
            end_datetime=to_db_string(appointment.end_datetime),
            notes=appointment.notes,
            service=ServiceOut(id=service.id, name=service.name) if service else ServiceOut(),
            provider=(
                ProviderOut(id=provider.id, first_name=provider.first_name, last_name=provider.last_name)
                if provider
                else ProviderOut()
            ),
            is_paid=int(bool(appointment.is_paid)),
            is_shown=int(bool(appointment.is_shown)),
            is_invoice=int(bool(appointment.is_invoice)),
        )


class AppointmentFlags(BaseModel):
    """Request body of ajax_save_appointment_checked"""

    id: int
    is_paid: int
    is_shown: int
    is_invoice: int
