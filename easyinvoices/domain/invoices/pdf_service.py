"""Invoice PDF rendering"""

import io
import logging
from datetime import datetime
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...errors import RendererError
from ...models import Customer
from ...utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)


class InvoicePDFRenderer:
    """Render invoice PDFs into a directory owned by the server process"""

    def __init__(self, output_dir: Path, company_name: str = "Easy!Invoices", company_email: str = ""):
        self.output_dir = Path(output_dir)
        self.company_name = company_name
        self.company_email = company_email

        # PDF settings
        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch

        self.brand_color = colors.HexColor("#35A768")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename

    def render(self, customer: Customer, invoice_hash: str, filename: str, issued_at: datetime) -> Path:
        """
        Render the invoice of ``customer`` and write it to ``output_dir/filename``.

        Raises:
            RendererError: If the PDF cannot be produced or a file with the same
                name already exists (existing artifacts are never overwritten)
        """
        try:
            pdf_bytes = self.generate(customer, invoice_hash, issued_at)
        except Exception as e:
            logger.error(f"❌ Invoice PDF generation failed for customer {customer.id}: {e}")
            raise RendererError(f"Could not render invoice: {e}") from e

        path = self.path_for(filename)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as handle:
                handle.write(pdf_bytes)
        except FileExistsError as e:
            logger.error(f"❌ Invoice file already exists, refusing to overwrite: {path}")
            raise RendererError(f"Invoice file already exists: {filename}") from e
        except OSError as e:
            logger.error(f"❌ Could not write invoice file {path}: {e}")
            raise RendererError(f"Could not write invoice file: {filename}") from e

        logger.info(f"📄 Rendered invoice {filename} ({len(pdf_bytes)} bytes)")
        return path

    def generate(self, customer: Customer, invoice_hash: str, issued_at: datetime) -> bytes:
        """Generate PDF and return bytes"""
        buffer = io.BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Invoice {invoice_hash}",
        )

        story = []
        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=24,
            textColor=self.brand_color,
            spaceAfter=12,
        )
        body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_gray,
            spaceAfter=6,
        )

        story.append(Paragraph("INVOICE", title_style))
        story.append(Paragraph(sanitize_string(self.company_name), body_style))
        if self.company_email:
            story.append(Paragraph(sanitize_string(self.company_email), body_style))
        story.append(Spacer(1, 0.3 * inch))

        full_name = f"{customer.first_name or ''} {customer.last_name or ''}".strip()
        address = ", ".join(part for part in (customer.address, customer.city, customer.zip_code) if part)
        info_data = [
            ["Invoice:", invoice_hash],
            ["Date:", issued_at.strftime("%B %d, %Y %H:%M")],
            ["Customer:", full_name],
            ["Email:", customer.email or "N/A"],
            ["Phone:", customer.phone_number or "N/A"],
            ["Address:", address or "N/A"],
        ]
        info_table = Table(info_data, colWidths=[1.5 * inch, 4.5 * inch])
        info_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 10),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 0), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        story.append(info_table)
        story.append(Spacer(1, 0.4 * inch))

        story.append(self._appointments_table(customer))

        doc.build(story)
        buffer.seek(0)
        return buffer.getvalue()

    def _appointments_table(self, customer: Customer) -> Table:
        table_data = [["Date", "Service", "Provider", "Paid", "Price"]]
        total = 0.0

        for appointment in customer.appointments:
            if not appointment.is_invoice:
                continue
            service = appointment.service
            provider = appointment.provider
            price = (service.price or 0.0) if service else 0.0
            total += price
            table_data.append(
                [
                    appointment.start_datetime.strftime("%Y-%m-%d %H:%M"),
                    service.name if service else "-",
                    f"{provider.first_name} {provider.last_name}" if provider else "-",
                    "Yes" if appointment.is_paid else "No",
                    f"{price:,.2f} {service.currency or ''}".strip() if service else "-",
                ]
            )

        if len(table_data) == 1:
            table_data.append(["-", "No appointments included", "", "", ""])
        table_data.append(["", "", "", "Total", f"{total:,.2f}"])

        table = Table(
            table_data,
            colWidths=[1.5 * inch, 1.9 * inch, 1.5 * inch, 0.6 * inch, 1.0 * inch],
            repeatRows=1,
        )
        table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    # Data rows
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 1), (-1, -1), "TOP"),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, self.light_gray]),
                    ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 10),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("LEFTPADDING", (0, 0), (-1, -1), 8),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        return table
