"""
Backend API used by the customers admin page

All endpoints are form-encoded POSTs returning JSON. Domain errors are
reported as ``{"exceptions": [...]}`` by the handler registered in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from ..config import COMPANY_EMAIL, COMPANY_NAME, INVOICES_BASE_URL, INVOICES_DIR
from ..csrf import verify_csrf_token
from ..database import get_db
from ..domain.appointments.service import AppointmentService
from ..domain.customers.schemas import CustomerAggregate
from ..domain.customers.service import CustomerService
from ..domain.invoices.pdf_service import InvoicePDFRenderer
from ..domain.invoices.schemas import InvoiceCreated
from ..domain.invoices.service import InvoiceService
from ..email_service import send_invoice_email

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/backend_api",
    tags=["Backend API"],
    dependencies=[Depends(verify_csrf_token)],
)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    renderer = InvoicePDFRenderer(INVOICES_DIR, company_name=COMPANY_NAME, company_email=COMPANY_EMAIL)
    return InvoiceService(db, renderer=renderer, mailer=send_invoice_email, base_url=INVOICES_BASE_URL)


@router.post("/ajax_filter_customers", response_model=list[CustomerAggregate])
async def ajax_filter_customers(
    key: str = Form(""),
    service: CustomerService = Depends(get_customer_service),
):
    """Customers matching the key, with embedded appointments and invoices"""
    return service.filter_customers(key)


@router.post("/ajax_save_customer")
async def ajax_save_customer(
    customer: str = Form(...),
    service: CustomerService = Depends(get_customer_service),
):
    """Insert or update a customer (``customer`` is a JSON object)"""
    payload = service.parse_payload(customer)
    customer_id = service.save_customer(payload)
    return {"id": customer_id}


@router.post("/ajax_delete_customer")
async def ajax_delete_customer(
    customer_id: str = Form(...),
    service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer; deleting an absent id succeeds"""
    service.delete_customer(customer_id)
    return {}


@router.post("/ajax_save_appointment_checked")
async def ajax_save_appointment_checked(
    id: str = Form(...),  # noqa: A002
    is_paid: str = Form(...),
    is_shown: str = Form(...),
    is_invoice: str = Form(...),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Persist the paid / no-show / include-in-invoice flags of an appointment"""
    flags = service.parse_flags(id, is_paid, is_shown, is_invoice)
    service.save_checked(flags)
    return {}


@router.post("/ajax_create_invoice", response_model=InvoiceCreated)
async def ajax_create_invoice(
    id_users_customer: str = Form(...),
    sendEmail: str = Form("false"),  # noqa: N803
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create an invoice for the customer and optionally email it"""
    return await service.create_invoice(id_users_customer, sendEmail)
