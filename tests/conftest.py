import os
import tempfile
from datetime import datetime

# Configure the app before it is imported: in-memory database, no CSRF check
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CSRF_ENABLED"] = "false"
os.environ["INVOICES_DIR"] = tempfile.mkdtemp(prefix="easyinvoices-")
os.environ.pop("RESEND_API_KEY", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from easyinvoices.database import Base, SessionLocal, engine, get_db  # noqa: E402
from easyinvoices.domain.invoices.pdf_service import InvoicePDFRenderer  # noqa: E402
from easyinvoices.domain.invoices.service import InvoiceService  # noqa: E402
from easyinvoices.main import app  # noqa: E402
from easyinvoices.models import Appointment, Customer, Provider, Service  # noqa: E402
from easyinvoices.routes.backend_api import get_invoice_service  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(database):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def seeded(db):
    """John Smith (1), Ada Lee (2) and Grace Hopper (3); appointment 7 belongs to John"""
    service = Service(id=1, name="Consultation", duration=30, price=50.0, currency="EUR")
    provider = Provider(id=1, first_name="Chris", last_name="Doe", email="chris@clinic.test")
    john = Customer(id=1, first_name="John", last_name="Smith", email="john.smith@example.com", phone_number="555-0100")
    ada = Customer(id=2, first_name="Ada", last_name="Lee", email="ada@lee.io", city="Berlin")
    grace = Customer(id=3, first_name="Grace", last_name="Hopper", email="grace@hopper.dev")
    db.add_all([service, provider, john, ada, grace])
    db.flush()

    db.add_all(
        [
            Appointment(
                id=7,
                start_datetime=datetime(2024, 3, 4, 9, 30),
                end_datetime=datetime(2024, 3, 4, 10, 0),
                id_users_customer=1,
                id_services=1,
                id_users_provider=1,
            ),
            Appointment(
                id=8,
                start_datetime=datetime(2024, 3, 11, 14, 0),
                end_datetime=datetime(2024, 3, 11, 14, 30),
                id_users_customer=3,
                id_services=1,
                id_users_provider=1,
                is_invoice=True,
            ),
        ]
    )
    db.commit()
    return {"john": 1, "ada": 2, "grace": 3, "appointment": 7}


class FakeMailer:
    """Records invoice emails; raises ``error`` when set"""

    def __init__(self):
        self.sent = []
        self.error = None

    async def __call__(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)
        return {"id": f"email-{len(self.sent)}"}


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def invoices_dir(tmp_path):
    return tmp_path / "invoices"


@pytest.fixture
def renderer(invoices_dir):
    return InvoicePDFRenderer(invoices_dir, company_name="Test Clinic", company_email="billing@clinic.test")


@pytest.fixture
def invoice_override(renderer, mailer):
    """Route invoice creation to a temporary directory and the fake mailer"""

    def override(db: Session = Depends(get_db)) -> InvoiceService:
        return InvoiceService(db, renderer=renderer, mailer=mailer, base_url="/storage/invoices")

    app.dependency_overrides[get_invoice_service] = override
    yield
    app.dependency_overrides.pop(get_invoice_service, None)


@pytest.fixture
async def client(invoice_override):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
