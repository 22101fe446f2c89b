"""
MJML Email Templates
"""

from typing import Optional

from .utils.sanitization import sanitize_string

THEME = {
    "primary": "#35A768",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    company_name: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {company_name}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def invoice_created_template(
    customer_name: str,
    company_name: str,
    invoice_hash: str,
    invoice_datetime: str,
    file_link: str,
) -> str:
    """Invoice notification for a customer, the PDF travels as attachment"""
    customer_name = sanitize_string(customer_name)
    company_name = sanitize_string(company_name)

    content = f"""
    <mj-text>
      Hi {customer_name},
    </mj-text>

    <mj-text>
      Please find attached your invoice from <strong>{company_name}</strong>.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Invoice: {invoice_hash}<br/>
      Issued: {invoice_datetime}
    </mj-text>
    """

    return get_base_template(
        title="Your invoice",
        preview_text=f"Invoice {invoice_hash} from {company_name}",
        content_sections=content,
        company_name=company_name,
        cta_url=file_link if file_link.startswith("http") else None,
        cta_label="View Invoice",
    )


__all__ = [
    "get_base_template",
    "invoice_created_template",
    "THEME",
]
