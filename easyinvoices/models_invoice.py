"""
Invoice model for customer invoicing
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


class Invoice(Base):
    """One rendered invoice artifact issued to a customer"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # Set by the store on insert, never supplied by the client
    invoice_datetime = Column(DateTime, nullable=False)
    filename = Column(String(512), nullable=False)
    file_link = Column(String(1024), nullable=False)
    hash = Column(String(64), unique=True, nullable=False, index=True)
    id_users_customer = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    customer = relationship("Customer", back_populates="invoices")
