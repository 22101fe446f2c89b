"""
Customers admin page controller

Holds the current filter results and selection, runs the add/edit form state
machine, validates the form and turns user gestures into backend API calls.
All rendering goes into a ``CustomersPageView``.
"""

import logging
from typing import Any, Optional

import httpx

from ..config import DATE_FORMAT
from ..domain.customers.schemas import CUSTOMER_FIELDS, REQUIRED_CUSTOMER_FIELDS, CustomerAggregate, CustomerPayload
from ..domain.invoices.schemas import EMAIL_FAILED
from ..shared.validators import is_valid_email, missing_required_fields
from .api_client import AjaxExceptionsError, BackendApiClient
from .lang import LANG
from .view import (
    CustomersPageView,
    appointment_details_html,
    appointment_row_html,
    customer_row_html,
    invoice_link_html,
    no_records_html,
)

logger = logging.getLogger(__name__)

# Form states
IDLE = "idle"
EDITING_NEW = "editing_new"
EDITING_EXISTING = "editing_existing"

_FAILED = object()


class CustomersHelper:
    """Controller of the customers admin page"""

    def __init__(self, api: BackendApiClient, view: Optional[CustomersPageView] = None, date_format: str = DATE_FORMAT):
        self.api = api
        self.view = view or CustomersPageView()
        self.date_format = date_format
        self.filter_results: list[CustomerAggregate] = []
        self.customer_index = -1
        self.state = IDLE

    async def initialize(self) -> None:
        self.reset_form()
        await self.filter("")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_customer(self, customer_id: Any) -> tuple[int, Optional[CustomerAggregate]]:
        """Linear scan of the cached results by id"""
        for index, customer in enumerate(self.filter_results):
            if str(customer.id) == str(customer_id):
                return index, customer
        return -1, None

    @property
    def selected_customer(self) -> Optional[CustomerAggregate]:
        if 0 <= self.customer_index < len(self.filter_results):
            return self.filter_results[self.customer_index]
        return None

    @property
    def is_editing(self) -> bool:
        return self.state != IDLE

    def _sync_controls(self) -> None:
        view = self.view
        editing = self.is_editing
        view.filter_disabled = editing
        view.results_dimmed = editing
        view.add_edit_delete_visible = not editing
        view.save_cancel_visible = editing
        has_selection = not editing and self.selected_customer is not None
        view.edit_enabled = has_selection
        view.delete_enabled = has_selection

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def handle_ajax_exceptions(self, exc: AjaxExceptionsError) -> None:
        logger.warning(f"Backend reported exceptions: {exc.exceptions}")
        self.view.message_box = {
            "title": LANG["server_error"],
            "message": str(exc),
            "exceptions": exc.exceptions,
        }

    def ajax_failure_handler(self, exc: Exception) -> None:
        logger.error(f"❌ Backend request failed: {exc}")
        self.view.notify(LANG["connection_error"])

    async def _request(self, method, *args):
        try:
            return await method(*args)
        except AjaxExceptionsError as e:
            self.handle_ajax_exceptions(e)
        except (httpx.HTTPError, ValueError) as e:
            self.ajax_failure_handler(e)
        return _FAILED

    # ------------------------------------------------------------------
    # Filter & selection
    # ------------------------------------------------------------------

    async def on_filter_submit(self, key: str) -> None:
        if self.view.filter_disabled:
            return
        self.view.filter_key = key
        self.reset_form()
        await self.filter(key)

    async def on_filter_clear(self) -> None:
        if self.view.filter_disabled:
            return
        self.view.filter_key = ""
        self.reset_form()
        await self.filter("")

    async def filter(self, key: str, select_id: Optional[int] = None, display: bool = False) -> None:
        """
        Replace the cached results with the customers matching ``key``.

        Args:
            key: Filter key
            select_id: Record to select once the results arrive
            display: Also display the selected record in the form
        """
        results = await self._request(self.api.filter_customers, key)
        if results is _FAILED:
            return

        self.filter_results = results
        selected_id = self.view.selected_customer_id
        self.customer_index, _ = self.find_customer(selected_id) if selected_id is not None else (-1, None)
        if self.customer_index < 0:
            self.view.selected_customer_id = None

        if results:
            self.view.results_html = "".join(customer_row_html(c) for c in results)
        else:
            self.view.results_html = no_records_html()

        if select_id is not None:
            self.select(select_id, display)
        self._sync_controls()

    def select(self, customer_id: Any, display: bool = False) -> None:
        """Highlight a record of the current results; unknown ids select nothing"""
        index, customer = self.find_customer(customer_id)
        self.view.selected_customer_id = customer.id if customer else None

        if display and customer is not None:
            self.display(customer)
            self.customer_index = index
        self._sync_controls()

    def on_customer_row_click(self, customer_id: Any) -> None:
        if self.is_editing:
            return  # Do nothing while a customer record is edited.

        index, customer = self.find_customer(customer_id)
        if customer is None:
            return

        self.display(customer)
        self.customer_index = index
        self.view.selected_customer_id = customer.id
        self._sync_controls()

    def display(self, customer: CustomerAggregate) -> None:
        """Render a customer record with its appointments and invoices"""
        view = self.view
        view.fill_form(customer)
        view.form_readonly = True

        view.appointments_html = "".join(
            appointment_row_html(appointment, customer.id, index, self.date_format)
            for index, appointment in enumerate(customer.appointments)
        )
        view.selected_appointment_id = None
        view.appointment_details_html = ""
        view.invoices_html = "".join(invoice_link_html(invoice) for invoice in customer.invoices)

    def on_appointment_row_click(self, appointment_id: Any) -> None:
        customer = self.selected_customer
        if customer is None:
            return

        for appointment in customer.appointments:
            if str(appointment.id) == str(appointment_id):
                self.view.selected_appointment_id = appointment.id
                self.view.appointment_details_html = appointment_details_html(appointment, self.date_format)
                return

    # ------------------------------------------------------------------
    # Appointment flags & invoices
    # ------------------------------------------------------------------

    async def on_appointment_flags_change(
        self, customer_id: Any, appointment_id: Any, is_paid: int, is_shown: int, is_invoice: int
    ) -> bool:
        """
        Persist the three checkboxes of an appointment row and mirror them in
        the cached results. Replies for a customer that is no longer cached are
        dropped.
        """
        flags = (int(bool(is_paid)), int(bool(is_shown)), int(bool(is_invoice)))
        response = await self._request(self.api.save_appointment_checked, int(appointment_id), *flags)
        if response is _FAILED:
            return False

        _, customer = self.find_customer(customer_id)
        appointment = None
        if customer is not None:
            appointment = next((a for a in customer.appointments if str(a.id) == str(appointment_id)), None)
        if appointment is None:
            logger.info(f"Discarding flags reply for appointment {appointment_id}, no longer displayed")
            return True

        appointment.is_paid, appointment.is_shown, appointment.is_invoice = flags
        self.view.notify(LANG["appointment_saved"])
        return True

    async def on_create_invoice(self, send_email: bool) -> bool:
        customer = self.selected_customer
        if customer is None:
            return False
        customer_id = customer.id

        invoice = await self._request(self.api.create_invoice, customer_id, send_email)
        if invoice is _FAILED:
            return False

        self.view.notify(LANG["invoice_created"])
        if invoice.email_status == EMAIL_FAILED:
            self.view.notify(LANG["invoice_email_failed"])

        _, customer = self.find_customer(customer_id)
        if customer is None:
            logger.info(f"Discarding invoice reply for customer {customer_id}, no longer cached")
            return True

        customer.invoices.append(invoice)
        if self.view.form.get("id") == str(customer_id):
            self.view.invoices_html += invoice_link_html(invoice)
        return True

    # ------------------------------------------------------------------
    # Form state machine
    # ------------------------------------------------------------------

    def on_add(self) -> None:
        if self.is_editing:
            return
        self.reset_form()
        self.state = EDITING_NEW
        self.view.form_readonly = False
        self._sync_controls()

    def on_edit(self) -> None:
        if self.is_editing or self.selected_customer is None:
            return
        self.state = EDITING_EXISTING
        self.view.form_readonly = False
        self._sync_controls()

    def on_cancel(self) -> None:
        if not self.is_editing:
            return
        customer_id = self.view.form.get("id", "")
        self.reset_form()
        if customer_id:
            self.select(customer_id, display=True)

    def set_field(self, field: str, value: str) -> None:
        """Type into a form input; readonly inputs ignore it"""
        if self.view.form_readonly or field not in CUSTOMER_FIELDS:
            return
        self.view.form[field] = value

    async def on_save(self) -> bool:
        if not self.is_editing:
            return False

        form = self.view.form
        customer = CustomerPayload(**{field: form.get(field, "") for field in CUSTOMER_FIELDS})
        if form.get("id"):
            customer.id = int(form["id"])

        if not self.validate():
            return False

        return await self.save(customer)

    def validate(self) -> bool:
        """Check the form before saving; marks invalid inputs and shows a message"""
        view = self.view
        view.form_message = None
        view.invalid_fields = set()

        missing = missing_required_fields(view.form, REQUIRED_CUSTOMER_FIELDS)
        if missing:
            view.invalid_fields.update(missing)
            view.form_message = LANG["fields_are_required"]
            return False

        if not is_valid_email(view.form.get("email")):
            view.invalid_fields.add("email")
            view.form_message = LANG["invalid_email"]
            return False

        return True

    async def save(self, customer: CustomerPayload) -> bool:
        customer_id = await self._request(self.api.save_customer, customer)
        if customer_id is _FAILED:
            return False

        self.view.notify(LANG["customer_saved"])
        self.reset_form()
        await self.filter(self.view.filter_key, customer_id, True)
        return True

    def request_delete(self) -> None:
        """Ask for confirmation before deleting the displayed customer"""
        if not self.view.delete_enabled:
            return
        self.view.message_box = {
            "title": LANG["delete_customer"],
            "message": LANG["delete_record_prompt"],
            "buttons": [LANG["delete"], LANG["cancel"]],
        }

    def cancel_delete(self) -> None:
        self.view.message_box = None

    async def confirm_delete(self) -> bool:
        self.view.message_box = None
        customer_id = self.view.form.get("id")
        if not customer_id:
            return False
        return await self.delete(customer_id)

    async def delete(self, customer_id: Any) -> bool:
        response = await self._request(self.api.delete_customer, customer_id)
        if response is _FAILED:
            return False

        self.view.notify(LANG["customer_deleted"])
        self.reset_form()
        await self.filter(self.view.filter_key)
        return True

    def reset_form(self) -> None:
        """Bring the customer form back to its initial state"""
        view = self.view
        view.clear_form()
        view.form_readonly = True
        view.appointments_html = ""
        view.selected_appointment_id = None
        view.appointment_details_html = ""
        view.invoices_html = ""
        view.invalid_fields = set()
        view.form_message = None
        view.selected_customer_id = None

        self.customer_index = -1
        self.state = IDLE
        self._sync_controls()
