from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(256), nullable=False)
    last_name = Column(String(512), nullable=False)
    email = Column(String(512), nullable=False, index=True)
    phone_number = Column(String(128), nullable=True)
    address = Column(String(256), nullable=True)
    city = Column(String(256), nullable=True)
    zip_code = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Deleting a customer removes the appointments and invoice rows it owns
    appointments = relationship(
        "Appointment",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Appointment.start_datetime",
    )
    invoices = relationship(
        "Invoice",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Invoice.id",
    )


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    duration = Column(Integer, nullable=True)  # minutes
    price = Column(Float, nullable=True)
    currency = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)


class Provider(Base):
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(256), nullable=False)
    last_name = Column(String(512), nullable=False)
    email = Column(String(512), nullable=True)


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    book_datetime = Column(DateTime, server_default=func.now())
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)

    id_users_customer = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    id_services = Column(Integer, ForeignKey("services.id"), nullable=True)
    id_users_provider = Column(Integer, ForeignKey("providers.id"), nullable=True)

    # Admin page flags
    is_paid = Column(Boolean, default=False, nullable=False)
    is_shown = Column(Boolean, default=False, nullable=False)  # rendered as "No Show"
    is_invoice = Column(Boolean, default=False, nullable=False)  # include when invoicing

    customer = relationship("Customer", back_populates="appointments")
    service = relationship("Service")
    provider = relationship("Provider")
