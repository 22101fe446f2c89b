"""
Typed client for the backend API endpoints used by the customers admin page
"""

import logging
from typing import Optional

import httpx

from ..config import BACKEND_BASE_URL
from ..csrf import CSRF_COOKIE_NAME, CSRF_FIELD_NAME
from ..domain.customers.schemas import CustomerAggregate, CustomerPayload
from ..domain.invoices.schemas import InvoiceCreated

logger = logging.getLogger(__name__)


class AjaxExceptionsError(Exception):
    """The backend answered with a non-empty ``exceptions`` list"""

    def __init__(self, exceptions: list[dict]):
        self.exceptions = exceptions
        super().__init__("; ".join(str(e.get("message", e)) for e in exceptions))

    @property
    def kinds(self) -> list[str]:
        return [e.get("kind", "") for e in self.exceptions]


class BackendApiClient:
    """
    Thin async wrapper around the ``/backend_api`` endpoints.

    Every request is form encoded and carries the CSRF token both as the
    ``csrfToken`` field and as the cookie it was issued with.
    """

    def __init__(
        self,
        base_url: str = BACKEND_BASE_URL,
        csrf_token: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.csrf_token = csrf_token
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        if csrf_token:
            self.client.cookies.set(CSRF_COOKIE_NAME, csrf_token)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _post(self, endpoint: str, data: dict):
        """
        POST to ``/backend_api/<endpoint>`` and return the decoded JSON body.

        Raises:
            AjaxExceptionsError: If the reply carries exceptions
            httpx.HTTPError: On transport errors and non-JSON error replies
        """
        payload = {CSRF_FIELD_NAME: self.csrf_token, **data}
        response = await self.client.post(f"{self.base_url}/backend_api/{endpoint}", data=payload)

        try:
            body = response.json()
        except ValueError:
            response.raise_for_status()
            raise

        logger.debug(f"{endpoint} response: {body}")

        if isinstance(body, dict) and body.get("exceptions"):
            raise AjaxExceptionsError(body["exceptions"])

        response.raise_for_status()
        return body

    async def filter_customers(self, key: str) -> list[CustomerAggregate]:
        body = await self._post("ajax_filter_customers", {"key": key})
        return [CustomerAggregate.model_validate(item) for item in body]

    async def save_customer(self, customer: CustomerPayload) -> int:
        body = await self._post(
            "ajax_save_customer",
            {"customer": customer.model_dump_json(exclude_none=True)},
        )
        return int(body["id"])

    async def delete_customer(self, customer_id: int) -> None:
        await self._post("ajax_delete_customer", {"customer_id": str(customer_id)})

    async def save_appointment_checked(
        self, appointment_id: int, is_paid: int, is_shown: int, is_invoice: int
    ) -> None:
        await self._post(
            "ajax_save_appointment_checked",
            {
                "id": str(appointment_id),
                "is_paid": str(is_paid),
                "is_shown": str(is_shown),
                "is_invoice": str(is_invoice),
            },
        )

    async def create_invoice(self, customer_id: int, send_email: bool) -> InvoiceCreated:
        body = await self._post(
            "ajax_create_invoice",
            {"id_users_customer": str(customer_id), "sendEmail": "true" if send_email else "false"},
        )
        return InvoiceCreated.model_validate(body)
