"""Entry normalization and the entry store service."""

import json
import logging
import time
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Collection, Iterable, Mapping, Optional

from kharcha.database.base import Database
from kharcha.domain import errors
from kharcha.domain.entities import (
    AdjustmentType,
    Entry,
    EntryType,
    ImportResult,
    PaymentMode,
)
from kharcha.utils.amount_parser import parse_amount, to_cents
from kharcha.utils.date_parser import coerce_date

logger = logging.getLogger(__name__)

# Spellings written by older app versions
LEGACY_MODES = {"online": PaymentMode.UPI}


def generate_entry_id(existing_ids: Collection[str] = ()) -> str:
    """Generate a millisecond-timestamp ID not already present in existing_ids."""
    candidate = time.time_ns() // 1_000_000
    while str(candidate) in existing_ids:
        candidate += 1
    return str(candidate)


def _choice(enum_cls, value: Any, kind: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise errors.ValidationError(
            errors.unknown_choice(kind, value, [member.value for member in enum_cls])
        )


def _strict_adjustment(value: Any) -> AdjustmentType:
    # Only bulk loads tolerate a bad value
    return _choice(AdjustmentType, getattr(value, "value", value), "adjustment type")


def _require_direction(entry: Entry) -> None:
    if entry.type is EntryType.BALANCE_ADJUSTMENT and entry.adjustment_type is None:
        raise errors.ValidationError("Balance adjustments require an adjustment type (add or subtract)")


def _normalize_amount(value: Any) -> Decimal:
    try:
        amount = to_cents(parse_amount(value))
    except ValueError:
        raise errors.ValidationError(errors.invalid_amount(value))
    if amount <= 0:
        raise errors.ValidationError(errors.invalid_amount(value))
    return amount


def _normalize_mode(entry_type: EntryType, value: Any) -> Optional[PaymentMode]:
    if entry_type.is_transfer:
        return None
    if value is None or value == "":
        return PaymentMode.UPI
    if isinstance(value, str) and value.lower() in LEGACY_MODES:
        return LEGACY_MODES[value.lower()]
    return _choice(PaymentMode, value, "payment mode")


def _normalize_adjustment(entry_type: EntryType, value: Any) -> Optional[AdjustmentType]:
    if entry_type is not EntryType.BALANCE_ADJUSTMENT or value is None:
        return None
    try:
        return AdjustmentType(value)
    except ValueError:
        # Left unset: the balance fold skips it rather than guessing a direction
        logger.warning("Ignoring invalid adjustment_type %r", value)
        return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text != "" else None


def normalize_entry(raw: Mapping[str, Any], existing_ids: Collection[str] = ()) -> Entry:
    """Turn a raw mapping into a fully-populated Entry.

    Missing modes default to upi for expense, income and balance adjustments;
    transfers never carry a mode. A balance adjustment without a valid
    adjustment_type keeps it unset. A missing id is generated.

    Raises:
        ValidationError: If amount, type or date is missing or invalid
    """
    for required in ("amount", "type", "date"):
        if raw.get(required) in (None, ""):
            raise errors.ValidationError(f"Entry is missing required field '{required}'")

    entry_type = _choice(EntryType, raw["type"], "entry type")
    amount = _normalize_amount(raw["amount"])
    try:
        entry_date = coerce_date(raw["date"])
    except ValueError as e:
        raise errors.ValidationError(f"Invalid entry date: {e}")

    entry_id = raw.get("id")
    if entry_id in (None, ""):
        entry_id = generate_entry_id(existing_ids)

    return Entry(
        id=str(entry_id),
        amount=amount,
        type=entry_type,
        date=entry_date,
        mode=_normalize_mode(entry_type, raw.get("mode")),
        adjustment_type=_normalize_adjustment(entry_type, raw.get("adjustment_type")),
        note=_optional_text(raw.get("note")),
        category_id=_optional_text(raw.get("category_id")),
    )


def _normalize_all(
    raws: Iterable[Mapping[str, Any]], reserved_ids: Collection[str] = ()
) -> tuple[list[Entry], int]:
    entries: list[Entry] = []
    seen_ids: set[str] = set()
    taken = set(reserved_ids)
    reissued = 0
    for index, raw in enumerate(raws):
        if not isinstance(raw, Mapping):
            logger.warning("Skipping entry at index %d: not an object", index)
            continue
        try:
            entry = normalize_entry(raw, existing_ids=seen_ids | taken)
        except errors.ValidationError as e:
            logger.warning("Skipping entry at index %d: %s", index, e)
            continue
        if entry.id in seen_ids:
            new_id = generate_entry_id(seen_ids | taken)
            logger.warning("Entry at index %d repeats ID %s; stored as %s", index, entry.id, new_id)
            entry = replace(entry, id=new_id)
            reissued += 1
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries, reissued


def normalize_entries(
    raws: Iterable[Mapping[str, Any]], reserved_ids: Collection[str] = ()
) -> list[Entry]:
    """Normalize many raw entries, skipping (and logging) the invalid ones.

    IDs are unique in the result: an ID repeated within raws is re-issued.
    Generated and re-issued IDs also avoid reserved_ids.
    """
    return _normalize_all(raws, reserved_ids)[0]


def _amount_to_json(amount: Decimal) -> int | float:
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def entry_to_dict(entry: Entry) -> dict[str, Any]:
    """Convert an entry to its JSON wire form, omitting unset optional fields."""
    data: dict[str, Any] = {
        "id": entry.id,
        "amount": _amount_to_json(entry.amount),
        "type": entry.type.value,
        "date": entry.date.isoformat(),
    }
    if entry.mode is not None:
        data["mode"] = entry.mode.value
    if entry.adjustment_type is not None:
        data["adjustment_type"] = entry.adjustment_type.value
    if entry.note is not None:
        data["note"] = entry.note
    if entry.category_id is not None:
        data["category_id"] = entry.category_id
    return data


def entry_from_dict(data: Mapping[str, Any]) -> Entry:
    """Read an entry from its JSON wire form."""
    return normalize_entry(data)


class EntryService:
    """Service for managing the entry log."""

    def __init__(self, db: Database):
        """Initialize entry service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_entry(
        self,
        type: EntryType | str,
        amount: Decimal | str | int | float,
        date: date | str,
        mode: Optional[PaymentMode | str] = None,
        adjustment_type: Optional[AdjustmentType | str] = None,
        note: Optional[str] = None,
        category_id: Optional[str] = None,
        entry_id: Optional[str] = None,
    ) -> Entry:
        """Append a new entry to the log.

        Args:
            type: Entry type
            amount: Positive amount
            date: Calendar day of the entry
            mode: Payment mode (defaults to upi for non-transfer entries)
            adjustment_type: add or subtract, for balance adjustments
            note: Optional note
            category_id: Optional category reference
            entry_id: Optional explicit ID (generated if not provided)

        Returns:
            The stored entry

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If entry_id is already in use
        """
        existing_ids = {entry.id for entry in self.db.list_entries()}
        if entry_id is not None and entry_id in existing_ids:
            raise errors.ConflictError(errors.duplicate_entry_id(entry_id))

        if adjustment_type is not None:
            adjustment_type = _strict_adjustment(adjustment_type)

        raw = {
            "id": entry_id,
            "amount": amount,
            "type": getattr(type, "value", type),
            "date": date,
            "mode": getattr(mode, "value", mode),
            "adjustment_type": getattr(adjustment_type, "value", adjustment_type),
            "note": note,
            "category_id": category_id,
        }
        entry = normalize_entry(raw, existing_ids=existing_ids)
        _require_direction(entry)

        self.db.append_entry(entry)
        logger.debug("Added entry %s (%s %s)", entry.id, entry.type.value, entry.amount)
        return entry

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        """Get entry by ID."""
        for entry in self.db.list_entries():
            if entry.id == entry_id:
                return entry
        return None

    def require_entry(self, entry_id: str) -> Entry:
        """Get entry by ID or raise NotFoundError."""
        entry = self.get_entry(entry_id)
        if entry is None:
            raise errors.NotFoundError(errors.entry_not_found(entry_id))
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> Entry:
        """Replace an entry with an edited copy, preserving its ID.

        The edited copy is validated like a new entry: a balance adjustment
        must end up with a valid direction.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If the edited entry is invalid
        """
        current = self.require_entry(entry_id)
        if changes.get("adjustment_type") is not None:
            changes["adjustment_type"] = _strict_adjustment(changes["adjustment_type"])
        raw = entry_to_dict(current)
        for key, value in changes.items():
            if value is None:
                raw.pop(key, None)
            else:
                raw[key] = getattr(value, "value", value)
        raw["id"] = entry_id

        updated = normalize_entry(raw)
        _require_direction(updated)
        self.db.replace_entry(updated)
        logger.debug("Updated entry %s", entry_id)
        return updated

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        self.require_entry(entry_id)
        self.db.remove_entry(entry_id)
        logger.debug("Deleted entry %s", entry_id)

    def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = False,
    ) -> list[Entry]:
        """List entries in log order, optionally bounded by inclusive dates.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            newest_first: If True, sort by date then ID, newest first
        """
        entries = [
            entry
            for entry in self.db.list_entries()
            if (start_date is None or entry.date >= start_date)
            and (end_date is None or entry.date <= end_date)
        ]
        if newest_first:
            entries.sort(key=lambda entry: (entry.date, entry.id), reverse=True)
        return entries

    def replace_all(self, entries: Iterable[Entry]) -> None:
        """Replace the whole entry log."""
        self.db.replace_all_entries(list(entries))

    def export_entries(self) -> list[dict[str, Any]]:
        """Return the entry log in its JSON wire form."""
        return [entry_to_dict(entry) for entry in self.db.list_entries()]

    def import_entries(self, payload: str | list | dict, merge: bool = False) -> ImportResult:
        """Import entries from a JSON backup.

        Accepts a JSON array of entries or an object with an ``entries`` array.
        Invalid entries are skipped and an ID repeated within the backup is
        re-issued. With merge, entries whose ID already exists are skipped;
        otherwise the log is replaced.

        Raises:
            ValidationError: If the payload is not valid JSON or holds no valid entries
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise errors.ValidationError(f"Could not parse JSON backup: {e}")

        if isinstance(payload, dict):
            raw_entries = payload.get("entries") or []
        elif isinstance(payload, list):
            raw_entries = payload
        else:
            raise errors.ValidationError("JSON backup must be an array or an object with 'entries'")

        existing = self.db.list_entries() if merge else []
        existing_ids = {entry.id for entry in existing}
        imported, reissued = _normalize_all(raw_entries, reserved_ids=existing_ids)
        if not imported:
            raise errors.ValidationError("No valid entries found in the backup")

        if not merge:
            self.db.replace_all_entries(imported)
            return ImportResult(
                imported=len(imported),
                added=len(imported),
                skipped=0,
                total=len(imported),
                reissued=reissued,
            )

        new_entries = [entry for entry in imported if entry.id not in existing_ids]
        self.db.replace_all_entries(existing + new_entries)
        return ImportResult(
            imported=len(imported),
            added=len(new_entries),
            skipped=len(imported) - len(new_entries),
            total=len(existing) + len(new_entries),
            reissued=reissued,
        )
