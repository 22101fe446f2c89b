"""English strings of the customers admin page"""

LANG = {
    "customer_saved": "Customer saved successfully.",
    "customer_deleted": "Customer deleted successfully.",
    "appointment_saved": "Appointment saved successfully.",
    "invoice_created": "Invoice created successfully.",
    "invoice_email_failed": "Invoice created, but the email could not be sent.",
    "fields_are_required": "Fields with * are required.",
    "invalid_email": "Invalid email address!",
    "no_records_found": "No records found...",
    "delete": "Delete",
    "cancel": "Cancel",
    "delete_customer": "Delete Customer",
    "delete_record_prompt": "Are you sure that you want to delete this record? This action cannot be undone.",
    "server_error": "Unexpected issues occurred!",
    "connection_error": "A connection error occurred, please try again.",
    "is_paid": "Is Paid",
    "no_show": "No Show",
    "include_in_invoice": "Include in Invoice",
}
