"""Appointment service - flag updates from the customers admin page"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError
from ...shared.validators import parse_flag, parse_numeric_id
from .repository import AppointmentRepository
from .schemas import AppointmentFlags

logger = logging.getLogger(__name__)


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    @staticmethod
    def parse_flags(appointment_id, is_paid, is_shown, is_invoice) -> AppointmentFlags:
        """Build the flags request from raw form values (0/1 only)"""
        return AppointmentFlags(
            id=parse_numeric_id(appointment_id, "id"),
            is_paid=parse_flag(is_paid, "is_paid"),
            is_shown=parse_flag(is_shown, "is_shown"),
            is_invoice=parse_flag(is_invoice, "is_invoice"),
        )

    def save_checked(self, flags: AppointmentFlags) -> None:
        """Store the paid / no-show / include-in-invoice flags. Replays are harmless."""
        appointment = self.repo.get_appointment_by_id(self.db, flags.id)
        if appointment is None:
            raise NotFoundError(f"Appointment not found: {flags.id}")

        try:
            self.repo.update_flags(
                self.db,
                appointment,
                is_paid=bool(flags.is_paid),
                is_shown=bool(flags.is_shown),
                is_invoice=bool(flags.is_invoice),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Could not save flags of appointment {flags.id}: {e}")
            raise PersistenceError("Could not save appointment flags.") from e

        logger.info(
            f"✅ Appointment {flags.id} flags saved "
            f"(paid={flags.is_paid}, shown={flags.is_shown}, invoice={flags.is_invoice})"
        )
