"""Appointment repository - Database operations for appointment flags"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.get(Appointment, appointment_id)

    @staticmethod
    def update_flags(db: Session, appointment: Appointment, is_paid: bool, is_shown: bool, is_invoice: bool) -> Appointment:
        """Persist exactly the three admin page flags"""
        appointment.is_paid = is_paid
        appointment.is_shown = is_shown
        appointment.is_invoice = is_invoice
        db.commit()
        db.refresh(appointment)
        return appointment
