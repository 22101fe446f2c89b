"""
View state and HTML fragments of the customers admin page
"""

from typing import Optional

from ..domain.appointments.schemas import AppointmentOut
from ..domain.customers.schemas import CUSTOMER_FIELDS, CustomerAggregate
from ..domain.invoices.schemas import InvoiceDescriptor
from ..shared.dates import format_date
from ..utils.sanitization import sanitize_dict, sanitize_string
from .lang import LANG

INVALID_FIELD_STYLE = "2px solid red"


class CustomersPageView:
    """
    Everything the customers page displays.

    The controller mutates this object; a renderer (template, test, TUI)
    reads it. HTML fragments are already escaped.
    """

    def __init__(self):
        self.filter_key = ""
        self.filter_disabled = False
        self.results_html = ""
        self.results_dimmed = False
        self.selected_customer_id: Optional[int] = None

        self.form: dict[str, str] = {}
        self.form_readonly = True
        self.invalid_fields: set[str] = set()
        self.form_message: Optional[str] = None

        self.add_edit_delete_visible = True
        self.save_cancel_visible = False
        self.edit_enabled = False
        self.delete_enabled = False

        self.appointments_html = ""
        self.selected_appointment_id: Optional[int] = None
        self.appointment_details_html = ""
        self.invoices_html = ""

        self.message_box: Optional[dict] = None
        self.notifications: list[str] = []

        self.clear_form()

    def clear_form(self) -> None:
        self.form = {"id": "", **{field: "" for field in CUSTOMER_FIELDS}}

    def fill_form(self, customer: CustomerAggregate) -> None:
        self.form = {"id": str(customer.id)}
        for field in CUSTOMER_FIELDS:
            value = getattr(customer, field)
            self.form[field] = "" if value is None else str(value)

    def field_border(self, field: str) -> str:
        return INVALID_FIELD_STYLE if field in self.invalid_fields else ""

    def notify(self, message: str) -> None:
        self.notifications.append(message)


def customer_row_html(customer: CustomerAggregate) -> str:
    """Row of the filter results list"""
    safe = sanitize_dict(customer.model_dump(include=set(CUSTOMER_FIELDS)))
    name = f"{safe['first_name'] or ''} {safe['last_name'] or ''}"
    info = safe["email"] or ""
    if customer.phone_number:
        info = f"{info}, {safe['phone_number']}"

    return (
        f'<div class="customer-row" data-id="{customer.id}">'
        f"<strong>{name}</strong><br>{info}"
        "</div><hr>"
    )


def no_records_html() -> str:
    return f"<em>{LANG['no_records_found']}</em>"


def _checkbox(css_class: str, label: str, appointment: AppointmentOut, customer_id: int, index: int, checked: int) -> str:
    checked_attr = ' checked="checked"' if checked == 1 else ""
    return (
        f'<label><input type="checkbox" class="{css_class} app_save" '
        f'customer-id="{customer_id}" appointment-index="{index}" '
        f'data-id="{appointment.id}" value="{appointment.id}"{checked_attr} />{label}</label> '
    )


def appointment_row_html(appointment: AppointmentOut, customer_id: int, index: int, date_format: str) -> str:
    """Appointment row with its paid / no-show / include-in-invoice checkboxes"""
    start = format_date(appointment.start_datetime, date_format, True)
    end = format_date(appointment.end_datetime, date_format, True)
    provider = f"{appointment.provider.first_name} {appointment.provider.last_name}"

    return (
        f'<div class="appointment-row" data-id="{appointment.id}">'
        f"{start} - {end}<br>"
        f"{sanitize_string(appointment.service.name)}, {sanitize_string(provider)}"
        "<div>"
        + _checkbox("is_paid", LANG["is_paid"], appointment, customer_id, index, appointment.is_paid)
        + _checkbox("is_shown", LANG["no_show"], appointment, customer_id, index, appointment.is_shown)
        + _checkbox("is_invoice", LANG["include_in_invoice"], appointment, customer_id, index, appointment.is_invoice)
        + "</div></div>"
    )


def appointment_details_html(appointment: AppointmentOut, date_format: str) -> str:
    start = format_date(appointment.start_datetime, date_format, True)
    end = format_date(appointment.end_datetime, date_format, True)
    provider = f"{appointment.provider.first_name} {appointment.provider.last_name}"

    return (
        "<div>"
        f"<strong>{sanitize_string(appointment.service.name)}</strong><br>"
        f"{sanitize_string(provider)}<br>"
        f"{start} - {end}<br>"
        "</div>"
    )


def invoice_link_html(invoice: InvoiceDescriptor) -> str:
    return f'<a href="{sanitize_string(invoice.file_link)}">{sanitize_string(invoice.filename)}</a><br/>'
