"""Invoice schemas"""

from typing import Optional

from pydantic import BaseModel

from ...shared.dates import to_db_string

EMAIL_SKIPPED = "skipped"
EMAIL_SENT = "sent"
EMAIL_FAILED = "failed"


class InvoiceDescriptor(BaseModel):
    id: int
    invoice_datetime: str
    filename: str
    file_link: str
    hash: str

    @classmethod
    def from_model(cls, invoice) -> "InvoiceDescriptor":
        return cls(
            id=invoice.id,
            invoice_datetime=to_db_string(invoice.invoice_datetime),
            filename=invoice.filename,
            file_link=invoice.file_link,
            hash=invoice.hash,
        )


class InvoiceCreated(InvoiceDescriptor):
    """Reply of ajax_create_invoice; email delivery is best effort"""

    email_status: str = EMAIL_SKIPPED
    email_error: Optional[str] = None
