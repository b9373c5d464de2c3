"""Tests for entry normalization and the entry service."""

from datetime import date, datetime
from decimal import Decimal
import json

import pytest

from kharcha.domain.entities import AdjustmentType, EntryType, PaymentMode
from kharcha.domain.entries import (
    entry_from_dict,
    entry_to_dict,
    generate_entry_id,
    normalize_entries,
    normalize_entry,
)
from kharcha.domain.errors import ConflictError, NotFoundError, ValidationError


class TestNormalizeEntry:
    """Tests for normalize_entry."""

    def test_full_entry(self):
        entry = normalize_entry(
            {
                "id": "abc",
                "amount": "1,250.50",
                "type": "expense",
                "date": "2024-03-15",
                "mode": "cash",
                "note": "Dinner",
                "category_id": "food_dining",
            }
        )
        assert entry.id == "abc"
        assert entry.amount == Decimal("1250.50")
        assert entry.type is EntryType.EXPENSE
        assert entry.date == date(2024, 3, 15)
        assert entry.mode is PaymentMode.CASH
        assert entry.note == "Dinner"
        assert entry.category_id == "food_dining"

    def test_mode_defaults_to_upi(self):
        entry = normalize_entry({"amount": 10, "type": "income", "date": "2024-03-15"})
        assert entry.mode is PaymentMode.UPI

    def test_legacy_online_mode(self):
        entry = normalize_entry({"amount": 10, "type": "expense", "date": "2024-03-15", "mode": "online"})
        assert entry.mode is PaymentMode.UPI

    @pytest.mark.parametrize("entry_type", ["cash_withdrawal", "cash_deposit"])
    def test_transfers_drop_mode(self, entry_type):
        entry = normalize_entry({"amount": 10, "type": entry_type, "date": "2024-03-15", "mode": "cash"})
        assert entry.mode is None

    def test_adjustment_type_kept_for_adjustments_only(self):
        adjustment = normalize_entry(
            {"amount": 5, "type": "balance_adjustment", "date": "2024-03-15", "adjustment_type": "subtract"}
        )
        expense = normalize_entry(
            {"amount": 5, "type": "expense", "date": "2024-03-15", "adjustment_type": "subtract"}
        )
        assert adjustment.adjustment_type is AdjustmentType.SUBTRACT
        assert expense.adjustment_type is None

    def test_invalid_adjustment_type_left_unset(self, caplog):
        entry = normalize_entry(
            {"amount": 5, "type": "balance_adjustment", "date": "2024-03-15", "adjustment_type": "sideways"}
        )
        assert entry.adjustment_type is None
        assert "Ignoring invalid adjustment_type" in caplog.text

    def test_amount_rounded_to_cents(self):
        entry = normalize_entry({"amount": "10.005", "type": "expense", "date": "2024-03-15"})
        assert entry.amount == Decimal("10.01")

    def test_datetime_is_coerced(self):
        entry = normalize_entry({"amount": 1, "type": "expense", "date": datetime(2024, 3, 15, 18, 30)})
        assert entry.date == date(2024, 3, 15)

    def test_generates_id(self):
        entry = normalize_entry({"amount": 1, "type": "expense", "date": "2024-03-15"})
        assert entry.id.isdigit()

    @pytest.mark.parametrize("missing", ["amount", "type", "date"])
    def test_missing_required_field(self, missing):
        raw = {"amount": 1, "type": "expense", "date": "2024-03-15"}
        del raw[missing]
        with pytest.raises(ValidationError, match=missing):
            normalize_entry(raw)

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "NaN", "Infinity"])
    def test_invalid_amount(self, amount):
        with pytest.raises(ValidationError, match="positive number"):
            normalize_entry({"amount": amount, "type": "expense", "date": "2024-03-15"})

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Unknown entry type"):
            normalize_entry({"amount": 1, "type": "refund", "date": "2024-03-15"})

    def test_unknown_mode(self):
        with pytest.raises(ValidationError, match="Unknown payment mode"):
            normalize_entry({"amount": 1, "type": "expense", "date": "2024-03-15", "mode": "card"})

    def test_invalid_date(self):
        with pytest.raises(ValidationError, match="Invalid entry date"):
            normalize_entry({"amount": 1, "type": "expense", "date": "2024-13-45"})


def test_normalize_entries_skips_invalid(caplog):
    entries = normalize_entries(
        [
            {"id": "1", "amount": 10, "type": "expense", "date": "2024-03-15"},
            {"id": "2", "amount": -1, "type": "expense", "date": "2024-03-15"},
            "not an entry",
            {"id": "3", "amount": 20, "type": "income", "date": "2024-03-16"},
        ]
    )
    assert [entry.id for entry in entries] == ["1", "3"]
    assert "Skipping entry at index 1" in caplog.text
    assert "Skipping entry at index 2" in caplog.text


def test_normalize_entries_reissues_repeated_ids(caplog):
    entries = normalize_entries(
        [
            {"id": "7", "amount": 10, "type": "expense", "date": "2024-03-15"},
            {"id": "7", "amount": 20, "type": "expense", "date": "2024-03-15"},
            {"amount": 30, "type": "expense", "date": "2024-03-15"},
        ],
        reserved_ids={"taken"},
    )
    ids = [entry.id for entry in entries]
    assert ids[0] == "7"
    assert len(set(ids)) == 3
    assert "taken" not in ids
    assert "repeats ID 7" in caplog.text


def test_generate_entry_id_avoids_existing():
    first = generate_entry_id()
    assert generate_entry_id({first, str(int(first) + 1)}) not in {first, str(int(first) + 1)}


def test_entry_dict_form():
    entry = normalize_entry(
        {"id": "x1", "amount": "12.50", "type": "balance_adjustment", "date": "2024-03-15", "adjustment_type": "add"}
    )
    data = entry_to_dict(entry)
    assert data == {
        "id": "x1",
        "amount": 12.5,
        "type": "balance_adjustment",
        "date": "2024-03-15",
        "mode": "upi",
        "adjustment_type": "add",
    }
    assert entry_from_dict(data) == entry


def test_entry_dict_integral_amount():
    entry = normalize_entry({"id": "x2", "amount": 200, "type": "cash_withdrawal", "date": "2024-03-15"})
    data = entry_to_dict(entry)
    assert data["amount"] == 200
    assert isinstance(data["amount"], int)
    assert "mode" not in data


class TestEntryService:
    """Tests for EntryService."""

    def test_add_and_get(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount="250", date=date(2024, 3, 15), note="Lunch")
        stored = entry_service.get_entry(entry.id)
        assert stored == entry
        assert stored.amount == Decimal("250")
        assert stored.mode is PaymentMode.UPI

    def test_add_with_explicit_id(self, entry_service):
        entry = entry_service.add_entry(type="income", amount=5, date="2024-03-15", entry_id="manual-1")
        assert entry.id == "manual-1"

    def test_duplicate_id_conflicts(self, entry_service):
        entry_service.add_entry(type="income", amount=5, date="2024-03-15", entry_id="dup")
        with pytest.raises(ConflictError, match="already exists"):
            entry_service.add_entry(type="income", amount=5, date="2024-03-15", entry_id="dup")

    def test_adjustment_requires_direction(self, entry_service):
        with pytest.raises(ValidationError, match="adjustment type"):
            entry_service.add_entry(type="balance_adjustment", amount=5, date="2024-03-15")

    def test_adjustment_rejects_bad_direction(self, entry_service):
        with pytest.raises(ValidationError, match="Unknown adjustment type"):
            entry_service.add_entry(
                type="balance_adjustment", amount=5, date="2024-03-15", adjustment_type="sideways"
            )

    def test_invalid_amount_not_stored(self, entry_service):
        with pytest.raises(ValidationError):
            entry_service.add_entry(type="expense", amount=0, date="2024-03-15")
        assert entry_service.list_entries() == []

    def test_generated_ids_are_unique(self, entry_service):
        ids = {entry_service.add_entry(type="expense", amount=1, date="2024-03-15").id for _ in range(20)}
        assert len(ids) == 20

    def test_update_entry(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15", mode="cash", note="Tea")
        updated = entry_service.update_entry(entry.id, amount="120", note=None)
        assert updated.id == entry.id
        assert updated.amount == Decimal("120")
        assert updated.mode is PaymentMode.CASH
        assert updated.note is None
        assert entry_service.get_entry(entry.id) == updated

    def test_update_to_transfer_drops_mode(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15", mode="cash")
        updated = entry_service.update_entry(entry.id, type=EntryType.CASH_DEPOSIT)
        assert updated.mode is None

    def test_update_missing(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.update_entry("nope", amount=5)

    def test_update_invalid_keeps_original(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15")
        with pytest.raises(ValidationError):
            entry_service.update_entry(entry.id, amount="-3")
        assert entry_service.get_entry(entry.id) == entry

    def test_update_to_adjustment_requires_direction(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15")
        with pytest.raises(ValidationError, match="adjustment type"):
            entry_service.update_entry(entry.id, type="balance_adjustment")
        assert entry_service.get_entry(entry.id) == entry

    def test_update_rejects_bad_direction(self, entry_service):
        entry = entry_service.add_entry(
            type="balance_adjustment", amount=100, date="2024-03-15", adjustment_type="add"
        )
        with pytest.raises(ValidationError, match="Unknown adjustment type"):
            entry_service.update_entry(entry.id, adjustment_type="sideways")
        assert entry_service.get_entry(entry.id).adjustment_type is AdjustmentType.ADD

    def test_update_to_adjustment_with_direction(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15")
        updated = entry_service.update_entry(
            entry.id, type="balance_adjustment", adjustment_type=AdjustmentType.SUBTRACT
        )
        assert updated.adjustment_type is AdjustmentType.SUBTRACT

    def test_delete(self, entry_service):
        entry = entry_service.add_entry(type="expense", amount=100, date="2024-03-15")
        entry_service.delete_entry(entry.id)
        assert entry_service.get_entry(entry.id) is None
        with pytest.raises(NotFoundError):
            entry_service.delete_entry(entry.id)

    def test_list_filters_and_sorts(self, entry_service):
        entry_service.add_entry(type="expense", amount=1, date="2024-03-10", entry_id="a")
        entry_service.add_entry(type="expense", amount=1, date="2024-03-20", entry_id="b")
        entry_service.add_entry(type="expense", amount=1, date="2024-04-02", entry_id="c")

        assert [e.id for e in entry_service.list_entries()] == ["a", "b", "c"]
        assert [e.id for e in entry_service.list_entries(newest_first=True)] == ["c", "b", "a"]
        march = entry_service.list_entries(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
        assert [e.id for e in march] == ["a", "b"]


class TestImportExport:
    """Tests for JSON import and export."""

    def test_export_then_replace_import(self, entry_service):
        entry_service.add_entry(type="income", amount=500, date="2024-03-01", entry_id="1")
        entry_service.add_entry(type="expense", amount="20.25", date="2024-03-02", mode="cash", entry_id="2")
        exported = entry_service.export_entries()

        entry_service.add_entry(type="expense", amount=1, date="2024-03-03", entry_id="3")
        result = entry_service.import_entries(json.dumps(exported))

        assert result.added == 2
        assert result.total == 2
        assert [e.id for e in entry_service.list_entries()] == ["1", "2"]

    def test_merge_skips_existing_ids(self, entry_service):
        entry_service.add_entry(type="income", amount=500, date="2024-03-01", entry_id="1")
        payload = {
            "entries": [
                {"id": "1", "amount": 999, "type": "income", "date": "2024-03-01"},
                {"id": "2", "amount": 50, "type": "expense", "date": "2024-03-02"},
            ]
        }
        result = entry_service.import_entries(payload, merge=True)

        assert (result.imported, result.added, result.skipped, result.total) == (2, 1, 1, 2)
        assert entry_service.get_entry("1").amount == Decimal("500")

    def test_invalid_json(self, entry_service):
        with pytest.raises(ValidationError, match="Could not parse JSON"):
            entry_service.import_entries("{not json")

    def test_no_valid_entries(self, entry_service):
        entry_service.add_entry(type="income", amount=500, date="2024-03-01", entry_id="keep")
        with pytest.raises(ValidationError, match="No valid entries"):
            entry_service.import_entries([{"amount": -1, "type": "expense", "date": "2024-03-01"}])
        assert entry_service.get_entry("keep") is not None

    def test_wrong_shape(self, entry_service):
        with pytest.raises(ValidationError, match="array or an object"):
            entry_service.import_entries("42")

    def test_replace_all(self, entry_service):
        entry_service.add_entry(type="income", amount=500, date="2024-03-01", entry_id="old")
        entry_service.replace_all([])
        assert entry_service.list_entries() == []

    def test_repeated_ids_are_reissued(self, entry_service):
        payload = [
            {"id": "1700000000000", "amount": 500, "type": "income", "date": "2024-03-01"},
            {"id": "1700000000000", "amount": 200, "type": "expense", "date": "2024-03-02"},
        ]
        result = entry_service.import_entries(payload)

        assert (result.added, result.total, result.reissued) == (2, 2, 1)
        entries = entry_service.list_entries()
        assert entries[0].id == "1700000000000"
        assert entries[1].id != "1700000000000"
        assert [e.amount for e in entries] == [Decimal("500"), Decimal("200")]

    def test_merge_reissues_repeated_ids(self, entry_service):
        entry_service.add_entry(type="income", amount=500, date="2024-03-01", entry_id="1")
        payload = [
            {"id": "1", "amount": 999, "type": "income", "date": "2024-03-01"},
            {"id": "2", "amount": 50, "type": "expense", "date": "2024-03-02"},
            {"id": "2", "amount": 70, "type": "expense", "date": "2024-03-03"},
        ]
        result = entry_service.import_entries(payload, merge=True)

        assert (result.imported, result.added, result.skipped, result.reissued) == (3, 2, 1, 1)
        ids = [e.id for e in entry_service.list_entries()]
        assert len(ids) == len(set(ids)) == 3
