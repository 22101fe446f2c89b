"""Invoice repository - Database operations for invoice records"""

import hashlib
import logging
from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import ClauseElement

from ...errors import BadArgumentError, NotFoundError, PersistenceError, UnknownFieldError
from ...models_invoice import Invoice
from ...shared.dates import now, parse_db_string
from ...shared.validators import is_numeric

logger = logging.getLogger(__name__)

INVOICE_COLUMNS = tuple(column.name for column in Invoice.__table__.columns)


def _row_to_dict(invoice: Invoice) -> dict:
    return {column: getattr(invoice, column) for column in INVOICE_COLUMNS}


class InvoiceRepository:
    """
    Record store for the ``invoices`` table.

    Records are plain mappings whose keys are the column names. ``add`` is an
    upsert: records without an ``id`` are inserted, others are updated.
    """

    @staticmethod
    def add(db: Session, invoice: dict, created_at: Optional[datetime] = None) -> int:
        """
        Insert or update an invoice record.

        Inserts are stamped with ``created_at`` (default: now); a client
        supplied ``invoice_datetime`` is ignored on insert.

        Returns:
            The id of the inserted or updated record

        Raises:
            NotFoundError: If an id is given that does not exist
            PersistenceError: If the database write fails
        """
        InvoiceRepository.validate(db, invoice)

        if invoice.get("id") is None:
            return InvoiceRepository._insert(db, invoice, created_at or now())

        InvoiceRepository.update(db, invoice)
        return int(invoice["id"])

    @staticmethod
    def _insert(db: Session, invoice: dict, created_at: datetime) -> int:
        values = {key: value for key, value in invoice.items() if key in INVOICE_COLUMNS and key != "id"}
        values["invoice_datetime"] = created_at

        record = Invoice(**values)
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Could not insert invoice record: {e}")
            raise PersistenceError("Could not insert invoice record.") from e

        db.refresh(record)
        logger.info(f"🧾 Inserted invoice {record.id} ({record.filename})")
        return record.id

    @staticmethod
    def update(db: Session, invoice: dict) -> None:
        """
        Update the record identified by ``invoice["id"]``.

        Raises:
            PersistenceError: If no row was affected or the write failed
        """
        invoice_id = invoice.get("id")
        values = {key: value for key, value in invoice.items() if key in INVOICE_COLUMNS and key != "id"}
        if isinstance(values.get("invoice_datetime"), str):
            values["invoice_datetime"] = parse_db_string(values["invoice_datetime"])

        query = db.query(Invoice).filter(Invoice.id == invoice_id)
        try:
            affected = query.update(values, synchronize_session="fetch") if values else query.count()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Could not update invoice {invoice_id}: {e}")
            raise PersistenceError("Could not update invoice record.") from e

        if not affected:
            raise PersistenceError("Could not update invoice record.")

    @staticmethod
    def validate(db: Session, invoice: dict) -> bool:
        """
        Validate invoice data before insert or update.

        Raises:
            NotFoundError: If an id is given that does not exist in the database
        """
        invoice_id = invoice.get("id")
        if invoice_id is not None:
            if not is_numeric(invoice_id) or db.get(Invoice, int(invoice_id)) is None:
                raise NotFoundError("Provided invoice id does not exist in the database.")
        return True

    @staticmethod
    def delete(db: Session, invoice_id: Any) -> bool:
        """
        Delete an invoice record.

        Returns:
            False when the record does not exist, True once it is removed

        Raises:
            BadArgumentError: If the id is not numeric
        """
        if not is_numeric(invoice_id):
            raise BadArgumentError(f'Invalid argument type $invoice_id (value: "{invoice_id}")')

        invoice = db.get(Invoice, int(invoice_id))
        if invoice is None:
            return False

        try:
            db.delete(invoice)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError("Could not delete invoice record.") from e
        return True

    @staticmethod
    def get_row(db: Session, invoice_id: Any) -> Optional[dict]:
        """Return the record as a column -> value mapping, or None if absent"""
        if not is_numeric(invoice_id):
            raise BadArgumentError(f"Invalid argument given. Expected integer for the $invoice_id : {invoice_id}")

        invoice = db.get(Invoice, int(invoice_id))
        return _row_to_dict(invoice) if invoice else None

    @staticmethod
    def get_value(db: Session, field_name: Any, invoice_id: Any) -> Any:
        """
        Return a single field value of a record.

        Raises:
            BadArgumentError: If the id is not numeric or the field name not a string
            NotFoundError: If the record does not exist
            UnknownFieldError: If the field does not exist on the record
        """
        if not is_numeric(invoice_id):
            raise BadArgumentError(f"Invalid argument given, expected integer for the $invoice_id : {invoice_id}")
        if not isinstance(field_name, str):
            raise BadArgumentError(f"Invalid argument given, expected string for the $field_name : {field_name}")

        row = InvoiceRepository.get_row(db, invoice_id)
        if row is None:
            raise NotFoundError(f"The record with the provided id does not exist in the database : {invoice_id}")
        if field_name not in row:
            raise UnknownFieldError(f"The given field name does not exist in the database : {field_name}")
        return row[field_name]

    @staticmethod
    def get_batch(
        db: Session, where: Optional[Union[str, ClauseElement]] = None, **filters
    ) -> list[dict]:
        """
        Get all, or specific, invoice records.

        Args:
            where: SQL WHERE clause (without the keyword), e.g. ``"id_users_customer = 3"``,
                or a SQLAlchemy expression
            **filters: Column equality filters

        Example:
            InvoiceRepository.get_batch(db, "invoice_datetime >= '2016-01-01'")
        """
        query = db.query(Invoice)
        if isinstance(where, str):
            if where.strip():
                query = query.filter(text(where))
        elif where is not None:
            query = query.filter(where)

        for column, value in filters.items():
            if column not in INVOICE_COLUMNS:
                raise UnknownFieldError(f"The given field name does not exist in the database : {column}")
            query = query.filter(getattr(Invoice, column) == value)

        return [_row_to_dict(invoice) for invoice in query.order_by(Invoice.id).all()]

    @staticmethod
    def hash_exists(db: Session, invoice_hash: str) -> bool:
        return db.query(Invoice.id).filter(Invoice.hash == invoice_hash).first() is not None

    @staticmethod
    def generate_hash(moment: Optional[datetime] = None, sequence: int = 0) -> str:
        """
        Generate the hash that identifies an invoice.

        The hash is the md5 digest of the seconds-since-epoch of ``moment``
        (default: now). Invoices created within the same second get distinct
        hashes by passing an increasing ``sequence``.
        """
        moment = moment or datetime.now()
        seed = str(int(moment.timestamp()))
        if sequence:
            seed = f"{seed}-{sequence}"
        return hashlib.md5(seed.encode()).hexdigest()  # noqa: S324 - identifier, not a secret
