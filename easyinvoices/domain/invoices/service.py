"""Invoice service - Creates invoice artifacts for customers"""

import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from ...config import INVOICES_BASE_URL
from ...errors import MailerError, NotFoundError, PersistenceError
from ...models import Customer
from ...shared.dates import now, to_db_string
from ...shared.validators import parse_bool, parse_numeric_id
from .pdf_service import InvoicePDFRenderer
from .repository import InvoiceRepository
from .schemas import EMAIL_FAILED, EMAIL_SENT, EMAIL_SKIPPED, InvoiceCreated

logger = logging.getLogger(__name__)

# Upper bound of invoices one customer can receive within the same second
MAX_HASH_SEQUENCE = 1000

Mailer = Callable[..., Awaitable[Any]]


def invoice_filename(customer_id: int, invoice_hash: str) -> str:
    return f"invoice_{customer_id}_{invoice_hash}.pdf"


class InvoiceService:
    """Service layer for invoice creation"""

    def __init__(
        self,
        db: Session,
        renderer: InvoicePDFRenderer,
        mailer: Optional[Mailer] = None,
        base_url: str = INVOICES_BASE_URL,
    ):
        self.db = db
        self.repo = InvoiceRepository()
        self.renderer = renderer
        self.mailer = mailer
        self.base_url = base_url.rstrip("/")

    def _unique_hash(self, moment) -> str:
        for sequence in range(MAX_HASH_SEQUENCE):
            invoice_hash = self.repo.generate_hash(moment, sequence)
            if not self.repo.hash_exists(self.db, invoice_hash):
                return invoice_hash
        logger.error(f"❌ No free invoice hash left for {moment}")
        raise PersistenceError(f"Could not allocate a unique invoice hash for {moment}")

    async def create_invoice(self, customer_id: Any, send_email: Any = False) -> InvoiceCreated:
        """
        Create an invoice for a customer.

        Renders the PDF, stores the invoice row and optionally emails the
        customer. Email delivery is best effort: a mailer failure is reported in
        ``email_status`` and never removes the stored invoice.

        Raises:
            BadArgumentError: On a non-numeric customer id or unparsable sendEmail
            NotFoundError: If the customer does not exist
            RendererError: If the artifact cannot be written
            PersistenceError: If no unique hash is left or the row cannot be stored
        """
        customer_id = parse_numeric_id(customer_id, "id_users_customer")
        send_email = parse_bool(send_email, "sendEmail")

        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError(f"Customer not found: {customer_id}")

        created_at = now()
        invoice_hash = self._unique_hash(created_at)
        filename = invoice_filename(customer_id, invoice_hash)
        file_link = f"{self.base_url}/{filename}"

        path = self.renderer.render(customer, invoice_hash, filename, created_at)

        try:
            invoice_id = self.repo.add(
                self.db,
                {
                    "filename": filename,
                    "file_link": file_link,
                    "hash": invoice_hash,
                    "id_users_customer": customer_id,
                },
                created_at=created_at,
            )
        except PersistenceError:
            path.unlink(missing_ok=True)
            raise
        row = self.repo.get_row(self.db, invoice_id)
        invoice_datetime = to_db_string(row["invoice_datetime"])
        logger.info(f"🧾 Invoice {invoice_id} created for customer {customer_id}: {filename}")

        result = InvoiceCreated(
            id=invoice_id,
            invoice_datetime=invoice_datetime,
            filename=filename,
            file_link=file_link,
            hash=invoice_hash,
            email_status=EMAIL_SKIPPED,
        )

        if send_email:
            try:
                if self.mailer is None:
                    raise MailerError("Email service not configured")
                await self.mailer(
                    to=customer.email,
                    customer_name=f"{customer.first_name} {customer.last_name}",
                    invoice_hash=invoice_hash,
                    invoice_datetime=invoice_datetime,
                    file_link=file_link,
                    filename=filename,
                    pdf_bytes=path.read_bytes(),
                )
                result.email_status = EMAIL_SENT
            except (MailerError, OSError) as e:
                logger.warning(f"⚠️ Invoice {invoice_id} stored but email failed: {e}")
                result.email_status = EMAIL_FAILED
                result.email_error = str(e)

        return result
