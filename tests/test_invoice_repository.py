import hashlib
from datetime import datetime

import pytest
from sqlalchemy import literal_column

from easyinvoices.domain.invoices.repository import INVOICE_COLUMNS, InvoiceRepository
from easyinvoices.errors import BadArgumentError, NotFoundError, PersistenceError, UnknownFieldError


def make_invoice(customer_id, suffix):
    return {
        "filename": f"invoice_{customer_id}_{suffix}.pdf",
        "file_link": f"/storage/invoices/invoice_{customer_id}_{suffix}.pdf",
        "hash": suffix,
        "id_users_customer": customer_id,
    }


class TestInvoiceRepository:
    """Unit tests for the invoices record store"""

    @pytest.fixture
    def invoice_id(self, db, seeded):
        return InvoiceRepository.add(db, make_invoice(seeded["john"], "aaa"))

    def test_add_inserts_and_sets_datetime(self, db, invoice_id):
        row = InvoiceRepository.get_row(db, invoice_id)

        assert set(row) == set(INVOICE_COLUMNS)
        assert row["hash"] == "aaa"
        assert isinstance(row["invoice_datetime"], datetime)
        assert row["invoice_datetime"].microsecond == 0

    def test_add_ignores_client_datetime_on_insert(self, db, seeded):
        data = make_invoice(seeded["ada"], "bbb")
        data["invoice_datetime"] = "2001-01-01 00:00:00"

        invoice_id = InvoiceRepository.add(db, data)

        assert InvoiceRepository.get_value(db, "invoice_datetime", invoice_id).year != 2001

    def test_add_with_id_updates(self, db, invoice_id):
        returned = InvoiceRepository.add(db, {"id": invoice_id, "filename": "renamed.pdf"})

        assert returned == invoice_id
        assert InvoiceRepository.get_value(db, "filename", invoice_id) == "renamed.pdf"

    def test_add_with_unknown_id_is_not_found(self, db, seeded):
        with pytest.raises(NotFoundError):
            InvoiceRepository.add(db, {"id": 999, "filename": "x.pdf"})

    def test_update_without_affected_row_fails(self, db, seeded):
        with pytest.raises(PersistenceError):
            InvoiceRepository.update(db, {"id": 999, "filename": "x.pdf"})

    def test_insert_duplicate_hash_is_persistence_failure(self, db, invoice_id, seeded):
        with pytest.raises(PersistenceError):
            InvoiceRepository.add(db, make_invoice(seeded["ada"], "aaa"))

    def test_validate(self, db, invoice_id):
        assert InvoiceRepository.validate(db, {"id": invoice_id}) is True
        assert InvoiceRepository.validate(db, {}) is True
        with pytest.raises(NotFoundError):
            InvoiceRepository.validate(db, {"id": "nope"})

    def test_delete(self, db, invoice_id):
        assert InvoiceRepository.delete(db, invoice_id) is True
        assert InvoiceRepository.delete(db, invoice_id) is False
        assert InvoiceRepository.get_row(db, invoice_id) is None

    def test_delete_non_numeric_id(self, db):
        with pytest.raises(BadArgumentError):
            InvoiceRepository.delete(db, "abc")

    def test_get_row_non_numeric_id(self, db):
        with pytest.raises(BadArgumentError):
            InvoiceRepository.get_row(db, "1; DROP TABLE invoices")

    def test_get_value_errors(self, db, invoice_id):
        with pytest.raises(BadArgumentError):
            InvoiceRepository.get_value(db, "hash", "x")
        with pytest.raises(BadArgumentError):
            InvoiceRepository.get_value(db, 42, invoice_id)
        with pytest.raises(NotFoundError):
            InvoiceRepository.get_value(db, "hash", 999)
        with pytest.raises(UnknownFieldError):
            InvoiceRepository.get_value(db, "amount", invoice_id)

    def test_get_batch(self, db, seeded):
        first = InvoiceRepository.add(db, make_invoice(seeded["john"], "h1"))
        second = InvoiceRepository.add(db, make_invoice(seeded["ada"], "h2"))
        third = InvoiceRepository.add(db, make_invoice(seeded["john"], "h3"))

        assert [r["id"] for r in InvoiceRepository.get_batch(db)] == [first, second, third]
        assert [r["id"] for r in InvoiceRepository.get_batch(db, "")] == [first, second, third]
        assert [r["id"] for r in InvoiceRepository.get_batch(db, f"id_users_customer = {seeded['john']}")] == [
            first,
            third,
        ]
        assert [r["id"] for r in InvoiceRepository.get_batch(db, literal_column("hash") == "h2")] == [second]
        assert [r["id"] for r in InvoiceRepository.get_batch(db, id_users_customer=seeded["ada"])] == [second]

    def test_get_batch_unknown_filter(self, db):
        with pytest.raises(UnknownFieldError):
            InvoiceRepository.get_batch(db, amount=3)

    def test_hash_exists(self, db, invoice_id):
        assert InvoiceRepository.hash_exists(db, "aaa") is True
        assert InvoiceRepository.hash_exists(db, "zzz") is False


class TestGenerateHash:
    def test_md5_of_epoch_seconds(self):
        moment = datetime(2024, 1, 2, 3, 4, 5)
        expected = hashlib.md5(str(int(moment.timestamp())).encode()).hexdigest()

        assert InvoiceRepository.generate_hash(moment) == expected

    def test_same_second_same_hash(self):
        moment = datetime(2024, 1, 2, 3, 4, 5)
        assert InvoiceRepository.generate_hash(moment) == InvoiceRepository.generate_hash(moment.replace(microsecond=9))

    def test_sequence_disambiguates(self):
        moment = datetime(2024, 1, 2, 3, 4, 5)
        hashes = {InvoiceRepository.generate_hash(moment, sequence) for sequence in range(3)}
        assert len(hashes) == 3


class TestInvoiceRepositoryIds:
    @pytest.mark.parametrize("invoice_id", ["²", "¹", "٣"])
    def test_unicode_digits_are_bad_arguments(self, db, invoice_id):
        with pytest.raises(BadArgumentError):
            InvoiceRepository.get_row(db, invoice_id)
        with pytest.raises(BadArgumentError):
            InvoiceRepository.delete(db, invoice_id)

    def test_created_at_stamps_insert(self, db, seeded):
        moment = datetime(2023, 12, 31, 23, 59, 59)

        invoice_id = InvoiceRepository.add(db, make_invoice(seeded["john"], "stamped"), created_at=moment)

        assert InvoiceRepository.get_value(db, "invoice_datetime", invoice_id) == moment
