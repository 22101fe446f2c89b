import httpx
import pytest

from easyinvoices import config

from easyinvoices.admin_ui.api_client import BackendApiClient
from easyinvoices.admin_ui.customers_page import EDITING_EXISTING, EDITING_NEW, IDLE, CustomersHelper
from easyinvoices.admin_ui.lang import LANG
from easyinvoices.admin_ui.view import INVALID_FIELD_STYLE
from easyinvoices.errors import MailerError
from easyinvoices.models import Appointment, Customer


def assert_controls_consistent(helper):
    """Filter locked exactly while editing; edit/delete enabled exactly when idle with a selection"""
    view = helper.view
    editing = helper.state != IDLE
    assert view.filter_disabled == editing
    assert view.save_cancel_visible == editing
    assert view.add_edit_delete_visible == (not editing)
    has_selection = helper.state == IDLE and helper.selected_customer is not None
    assert view.edit_enabled == has_selection
    assert view.delete_enabled == has_selection


def row_count(helper):
    return helper.view.results_html.count('class="customer-row"')


class TestCustomersHelper:
    """Tests for the customers page controller against the real backend"""

    @pytest.fixture
    async def helper(self, client, seeded):
        api = BackendApiClient("http://testserver", client=client)
        helper = CustomersHelper(api, date_format="DMY")
        await helper.initialize()
        return helper

    @pytest.mark.asyncio
    async def test_initialize_lists_everyone(self, helper):
        assert row_count(helper) == 3
        assert helper.state == IDLE
        assert helper.view.form["id"] == ""
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_filter_without_matches(self, helper):
        await helper.on_filter_submit("nobody-here")

        assert helper.filter_results == []
        assert LANG["no_records_found"] in helper.view.results_html

    @pytest.mark.asyncio
    async def test_row_click_displays_customer(self, helper, seeded):
        await helper.on_filter_submit("smi")
        helper.on_customer_row_click(seeded["john"])

        view = helper.view
        assert view.form["first_name"] == "John"
        assert view.form["email"] == "john.smith@example.com"
        assert view.form_readonly is True
        assert view.selected_customer_id == seeded["john"]
        assert 'data-id="7"' in view.appointments_html
        assert "04/03/2024 09:30" in view.appointments_html
        assert view.invoices_html == ""
        assert view.edit_enabled and view.delete_enabled
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_row_click_ignored_while_editing(self, helper, seeded):
        helper.on_customer_row_click(seeded["ada"])
        helper.on_edit()

        helper.on_customer_row_click(seeded["john"])

        assert helper.state == EDITING_EXISTING
        assert helper.view.form["first_name"] == "Ada"
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_appointment_row_click_shows_details(self, helper, seeded):
        helper.on_customer_row_click(seeded["john"])
        helper.on_appointment_row_click(7)

        details = helper.view.appointment_details_html
        assert "Consultation" in details
        assert "Chris Doe" in details
        assert "04/03/2024 09:30 - 04/03/2024 10:00" in details

    @pytest.mark.asyncio
    async def test_add_locks_filter_and_requires_fields(self, helper, db):
        helper.on_add()
        assert helper.state == EDITING_NEW
        assert_controls_consistent(helper)

        helper.set_field("first_name", "Marie")
        saved = await helper.on_save()

        assert saved is False
        assert helper.state == EDITING_NEW
        assert helper.view.invalid_fields == {"last_name", "email"}
        assert helper.view.field_border("email") == INVALID_FIELD_STYLE
        assert helper.view.form_message == LANG["fields_are_required"]
        assert db.query(Customer).count() == 3

    @pytest.mark.asyncio
    async def test_invalid_email_blocks_save(self, helper):
        helper.on_add()
        for field, value in (("first_name", "Marie"), ("last_name", "Curie"), ("email", "marie-at-home")):
            helper.set_field(field, value)

        assert await helper.on_save() is False
        assert helper.view.invalid_fields == {"email"}
        assert helper.view.form_message == LANG["invalid_email"]

    @pytest.mark.asyncio
    async def test_save_new_customer_selects_it(self, helper):
        helper.on_add()
        for field, value in (("first_name", "Marie"), ("last_name", "Curie"), ("email", "marie@curie.fr")):
            helper.set_field(field, value)

        assert await helper.on_save() is True

        assert helper.state == IDLE
        assert row_count(helper) == 4
        assert helper.view.form["first_name"] == "Marie"
        assert helper.view.selected_customer_id == int(helper.view.form["id"])
        assert LANG["customer_saved"] in helper.view.notifications
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_edit_existing_customer(self, helper, seeded):
        helper.on_customer_row_click(seeded["john"])
        helper.on_edit()
        assert helper.view.form_readonly is False

        helper.set_field("first_name", "Johnny")
        assert await helper.on_save() is True

        assert helper.view.form["first_name"] == "Johnny"
        assert helper.view.form["id"] == str(seeded["john"])
        assert helper.selected_customer.first_name == "Johnny"

    @pytest.mark.asyncio
    async def test_server_validation_error_keeps_editing(self, helper):
        helper.on_add()
        for field, value in (("first_name", "Other"), ("last_name", "John"), ("email", "john.smith@example.com")):
            helper.set_field(field, value)

        assert await helper.on_save() is False

        assert helper.state == EDITING_NEW
        assert helper.view.message_box["title"] == LANG["server_error"]
        assert helper.view.message_box["exceptions"][0]["kind"] == "validation-error"
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_cancel_existing_reselects_row(self, helper, seeded):
        helper.on_customer_row_click(seeded["john"])
        helper.on_edit()
        helper.set_field("first_name", "Changed")

        helper.on_cancel()

        assert helper.state == IDLE
        assert helper.view.selected_customer_id == seeded["john"]
        assert helper.view.form["first_name"] == "John"
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_cancel_new_clears_form(self, helper):
        helper.on_add()
        helper.set_field("first_name", "Temp")

        helper.on_cancel()

        assert helper.state == IDLE
        assert helper.view.form["first_name"] == ""
        assert helper.view.selected_customer_id is None
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_delete_requires_confirmation(self, helper, seeded, db):
        helper.on_customer_row_click(seeded["john"])

        helper.request_delete()
        assert helper.view.message_box["title"] == LANG["delete_customer"]
        helper.cancel_delete()
        assert helper.view.message_box is None
        assert db.query(Customer).count() == 3

        helper.request_delete()
        assert await helper.confirm_delete() is True

        assert LANG["customer_deleted"] in helper.view.notifications
        assert helper.find_customer(seeded["john"]) == (-1, None)
        assert helper.view.form["id"] == ""
        assert row_count(helper) == 2
        assert_controls_consistent(helper)

    @pytest.mark.asyncio
    async def test_flag_toggle_updates_cache(self, helper, seeded, db):
        helper.on_customer_row_click(seeded["john"])

        assert await helper.on_appointment_flags_change(seeded["john"], 7, 1, 0, 1) is True

        appointment = helper.selected_customer.appointments[0]
        assert (appointment.is_paid, appointment.is_shown, appointment.is_invoice) == (1, 0, 1)
        assert LANG["appointment_saved"] in helper.view.notifications
        db.expire_all()
        assert db.get(Appointment, 7).is_paid is True

    @pytest.mark.asyncio
    async def test_flag_reply_for_uncached_customer_is_dropped(self, helper, seeded, db):
        await helper.on_filter_submit("ada")

        assert await helper.on_appointment_flags_change(seeded["john"], 7, 0, 1, 0) is True

        assert LANG["appointment_saved"] not in helper.view.notifications
        db.expire_all()
        assert db.get(Appointment, 7).is_shown is True

    @pytest.mark.asyncio
    async def test_create_invoice_appends_link(self, helper, seeded):
        helper.on_customer_row_click(seeded["grace"])

        assert await helper.on_create_invoice(False) is True

        invoices = helper.selected_customer.invoices
        assert len(invoices) == 1
        assert f'href="/storage/invoices/invoice_{seeded["grace"]}_{invoices[0].hash}.pdf"' in helper.view.invoices_html
        assert helper.view.notifications == [LANG["invoice_created"]]

    @pytest.mark.asyncio
    async def test_create_invoice_with_failed_email(self, helper, seeded, mailer):
        mailer.error = MailerError("Failed to send email: rejected")
        helper.on_customer_row_click(seeded["grace"])

        assert await helper.on_create_invoice(True) is True

        assert LANG["invoice_email_failed"] in helper.view.notifications
        assert len(helper.selected_customer.invoices) == 1

    @pytest.mark.asyncio
    async def test_invoice_reply_for_uncached_customer_is_dropped(self, helper, seeded, monkeypatch):
        helper.on_customer_row_click(seeded["grace"])
        create_invoice = helper.api.create_invoice

        async def create_then_refilter(customer_id, send_email):
            invoice = await create_invoice(customer_id, send_email)
            await helper.filter("ada")
            return invoice

        monkeypatch.setattr(helper.api, "create_invoice", create_then_refilter)

        assert await helper.on_create_invoice(False) is True

        assert helper.find_customer(seeded["grace"]) == (-1, None)
        assert helper.view.invoices_html == ""
        assert helper.view.notifications == [LANG["invoice_created"]]

    @pytest.mark.asyncio
    async def test_csrf_rejection_shows_server_message(self, helper, seeded, monkeypatch):
        monkeypatch.setattr(config, "CSRF_ENABLED", True)

        await helper.on_filter_submit("smi")

        assert helper.view.message_box["title"] == LANG["server_error"]
        assert helper.view.message_box["exceptions"][0]["kind"] == "csrf-failure"
        assert LANG["connection_error"] not in helper.view.notifications
        assert row_count(helper) == 3

    @pytest.mark.asyncio
    async def test_create_invoice_needs_selection(self, helper):
        assert await helper.on_create_invoice(False) is False


class TestCustomersHelperOffline:
    @pytest.mark.asyncio
    async def test_transport_error_leaves_page_unchanged(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://backend")
        helper = CustomersHelper(BackendApiClient("http://backend", client=http_client))

        await helper.initialize()

        assert helper.filter_results == []
        assert helper.view.results_html == ""
        assert helper.view.notifications == [LANG["connection_error"]]
        assert_controls_consistent(helper)
        await http_client.aclose()
