"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ...models import Appointment, Customer
from .schemas import CUSTOMER_FIELDS


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def filter_customers(db: Session, key: str = "") -> list[Customer]:
        """
        Customers whose text fields contain ``key`` (case-insensitive), with
        appointments and invoices eagerly loaded. An empty key returns everyone.
        """
        query = db.query(Customer).options(
            selectinload(Customer.appointments).selectinload(Appointment.service),
            selectinload(Customer.appointments).selectinload(Appointment.provider),
            selectinload(Customer.invoices),
        )

        key = (key or "").strip()
        if key:
            query = query.filter(
                or_(*(getattr(Customer, field).icontains(key, autoescape=True) for field in CUSTOMER_FIELDS))
            )

        return query.order_by(Customer.first_name, Customer.last_name, Customer.id).all()

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.get(Customer, customer_id)

    @staticmethod
    def get_customer_by_email(db: Session, email: str) -> Optional[Customer]:
        return db.query(Customer).filter(func.lower(Customer.email) == email.strip().lower()).first()

    @staticmethod
    def create_customer(db: Session, **customer_data) -> Customer:
        """Create a new customer"""
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        """Update a customer with provided fields"""
        for key, value in updates.items():
            if hasattr(customer, key):
                setattr(customer, key, value)

        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete_customer(db: Session, customer: Customer) -> None:
        """Delete a customer together with its appointments and invoices"""
        db.delete(customer)
        db.commit()
