"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import COMPANY_NAME, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import invoice_created_template
from .errors import MailerError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        # newer mjml releases return an object exposing .html and .errors
        if getattr(result, "errors", None):
            logger.warning(f"MJML compilation warnings: {result.errors}")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise MailerError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address
        attachments: Optional list of {"filename", "content"} dicts

    Raises:
        MailerError: If the email service is not configured or the send fails
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise MailerError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        email_data = {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }

        if attachments:
            email_data["attachments"] = [
                {"filename": attachment["filename"], "content": list(attachment["content"])}
                for attachment in attachments
            ]

        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise MailerError(f"Failed to send email: {str(e)}") from e


async def send_invoice_email(
    to: str,
    customer_name: str,
    invoice_hash: str,
    invoice_datetime: str,
    file_link: str,
    filename: str,
    pdf_bytes: bytes,
) -> dict:
    """Send a freshly created invoice to the customer with the PDF attached"""
    mjml_content = invoice_created_template(
        customer_name=customer_name,
        company_name=COMPANY_NAME,
        invoice_hash=invoice_hash,
        invoice_datetime=invoice_datetime,
        file_link=file_link,
    )

    return await send_email(
        to=to,
        subject=f"Invoice {invoice_hash} - {COMPANY_NAME}",
        mjml_content=mjml_content,
        attachments=[{"filename": filename, "content": pdf_bytes}],
    )
