"""Customer service - Business logic for the customers admin page"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import BadArgumentError, NotFoundError, PersistenceError, ValidationError
from ...shared.validators import is_valid_email, missing_required_fields, parse_numeric_id
from .repository import CustomerRepository
from .schemas import REQUIRED_CUSTOMER_FIELDS, CustomerAggregate, CustomerPayload

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def filter_customers(self, key: str) -> list[CustomerAggregate]:
        """Customer aggregates matching the filter key"""
        customers = self.repo.filter_customers(self.db, key)
        return [CustomerAggregate.from_model(c) for c in customers]

    @staticmethod
    def parse_payload(raw: str) -> CustomerPayload:
        """Parse the JSON encoded ``customer`` form field"""
        try:
            return CustomerPayload.model_validate_json(raw)
        except PydanticValidationError as e:
            raise BadArgumentError(f"Invalid customer data: {e.errors()[0].get('msg', 'malformed')}") from e

    def validate(self, payload: CustomerPayload) -> bool:
        """
        Validate customer data before insert or update.

        Raises:
            NotFoundError: If an id is given that does not exist
            ValidationError: Listing missing required fields, an invalid email,
                or an email that already belongs to another customer
        """
        if payload.id is not None and self.repo.get_customer_by_id(self.db, payload.id) is None:
            raise NotFoundError(f"Provided customer id does not exist in the database: {payload.id}")

        missing = missing_required_fields(payload.field_values(), REQUIRED_CUSTOMER_FIELDS)
        if missing:
            raise ValidationError("Not all required fields are provided: " + ", ".join(missing), missing)

        if not is_valid_email(payload.email):
            raise ValidationError(f"Invalid email address provided: {payload.email}", ["email"])

        existing = self.repo.get_customer_by_email(self.db, payload.email)
        if existing is not None and existing.id != payload.id:
            raise ValidationError(
                f"Given email address belongs to another customer record: {payload.email}", ["email"]
            )

        return True

    def save_customer(self, payload: CustomerPayload) -> int:
        """Insert (no id) or update a customer, returning its id"""
        self.validate(payload)

        values = payload.field_values()
        values["email"] = values["email"].strip()

        try:
            if payload.id is None:
                customer = self.repo.create_customer(self.db, **values)
                logger.info(f"✅ Created customer {customer.id}")
            else:
                customer = self.repo.get_customer_by_id(self.db, payload.id)
                customer = self.repo.update_customer(self.db, customer, **values)
                logger.info(f"✅ Updated customer {customer.id}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Could not save customer: {e}")
            raise PersistenceError("Could not save customer record.") from e

        return customer.id

    def delete_customer(self, customer_id: Any) -> bool:
        """
        Delete a customer. Deleting an absent id is not an error.

        Returns:
            True when a row was removed, False when it did not exist
        """
        customer_id = parse_numeric_id(customer_id, "customer_id")

        customer = self.repo.get_customer_by_id(self.db, customer_id)
        if customer is None:
            logger.info(f"Customer {customer_id} already absent, nothing to delete")
            return False

        try:
            self.repo.delete_customer(self.db, customer)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Could not delete customer {customer_id}: {e}")
            raise PersistenceError("Could not delete customer record.") from e

        logger.info(f"🗑️ Deleted customer {customer_id}")
        return True
