"""Ledger aggregation: period totals and running account balances.

Two folds are defined over the same entry log and intentionally disagree:

- ``calculate_totals`` splits entries into expense and income, and every entry
  that is not an expense counts as income, including balance adjustments and
  cash transfers.
- ``calculate_current_balance`` only moves a balance for entries on the
  requested payment mode. Transfers carry no mode, so they move neither the
  bank nor the cash balance.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from kharcha.database.base import Database
from kharcha.database.mappers import baselines_from_blob, baselines_to_blob
from kharcha.domain.entities import (
    AccountBaselines,
    AdjustmentType,
    CategoryBreakdown,
    CategoryTotal,
    Entry,
    EntryType,
    PaymentMode,
    Totals,
)
from kharcha.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def entry_amount(entry: Entry) -> Decimal:
    """Return the entry amount as a Decimal, or 0 if it is missing or not numeric."""
    amount: Any = getattr(entry, "amount", None)
    if isinstance(amount, Decimal) and amount.is_finite():
        return amount
    try:
        return parse_amount(amount)
    except ValueError:
        logger.warning("Entry %s has a non-numeric amount %r", getattr(entry, "id", "?"), amount)
        return ZERO


def calculate_totals(entries: Iterable[Entry]) -> Totals:
    """Total a set of entries.

    Expense sums type=expense; income sums every other entry. The payment
    method breakdown only counts expense and income entries, treating a
    missing mode as upi.
    """
    expense = income = ZERO
    expense_upi = expense_cash = income_upi = income_cash = ZERO

    for entry in entries:
        amount = entry_amount(entry)
        is_cash = entry.mode == PaymentMode.CASH
        if entry.type == EntryType.EXPENSE:
            expense += amount
            if is_cash:
                expense_cash += amount
            else:
                expense_upi += amount
        else:
            income += amount
            if entry.type == EntryType.INCOME:
                if is_cash:
                    income_cash += amount
                else:
                    income_upi += amount

    return Totals(
        expense=expense,
        income=income,
        balance=income - expense,
        expense_upi=expense_upi,
        expense_cash=expense_cash,
        income_upi=income_upi,
        income_cash=income_cash,
    )


def calculate_category_breakdown(entries: Iterable[Entry]) -> CategoryBreakdown:
    """Total expense and income entries per category_id.

    Transfers and balance adjustments are left out. Entries without a
    category land in the uncategorized bucket. Categories are ordered by
    combined amount, largest first.
    """
    total_expense = total_income = ZERO
    buckets: dict[Optional[str], dict[str, Any]] = {}

    for entry in entries:
        if entry.type != EntryType.EXPENSE and entry.type != EntryType.INCOME:
            continue
        amount = entry_amount(entry)
        bucket = buckets.setdefault(
            entry.category_id or None, {"expense": ZERO, "income": ZERO, "count": 0}
        )
        if entry.type == EntryType.EXPENSE:
            total_expense += amount
            bucket["expense"] += amount
        else:
            total_income += amount
            bucket["income"] += amount
        bucket["count"] += 1

    totals = {
        category_id: CategoryTotal(category_id, **values)
        for category_id, values in buckets.items()
    }
    uncategorized = totals.pop(None, CategoryTotal(None))
    categories = sorted(totals.values(), key=lambda total: (-total.amount, total.category_id))
    return CategoryBreakdown(
        total_expense=total_expense,
        total_income=total_income,
        categories=tuple(categories),
        uncategorized=uncategorized,
    )


def _signed_contribution(entry: Entry, amount: Decimal) -> Decimal:
    if entry.type == EntryType.INCOME:
        return amount
    if entry.type == EntryType.EXPENSE:
        return -amount
    if entry.type == EntryType.BALANCE_ADJUSTMENT:
        if entry.adjustment_type == AdjustmentType.ADD:
            return amount
        if entry.adjustment_type == AdjustmentType.SUBTRACT:
            return -amount
        logger.warning("Balance adjustment entry %s missing adjustment_type; skipped", entry.id)
    return ZERO


def calculate_current_balance(
    baseline: Optional[Decimal],
    entries: Iterable[Entry],
    mode: PaymentMode | str,
) -> Optional[Decimal]:
    """Fold entries on one payment mode into a running balance.

    Args:
        baseline: Starting balance, or None if the user never set one
        entries: Entry log
        mode: Payment mode whose balance to compute

    Returns:
        The current balance, or None when no baseline is set
    """
    if baseline is None:
        return None

    balance = baseline if isinstance(baseline, Decimal) else Decimal(str(baseline))
    for entry in entries:
        if entry.mode is None or entry.mode != mode:
            continue
        amount = entry_amount(entry)
        if amount <= 0:
            continue
        balance += _signed_contribution(entry, amount)
    return balance


def derive_balances_from_entries(entries: Iterable[Entry]) -> tuple[Decimal, Decimal]:
    """Net flow of the whole log per rail, as (bank, cash), from a zero start."""
    entries = list(entries)
    return (
        calculate_current_balance(ZERO, entries, PaymentMode.UPI),
        calculate_current_balance(ZERO, entries, PaymentMode.CASH),
    )


class BalanceService:
    """Service for account baselines and current balances."""

    SETTING_KEY = "baselines"

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_baselines(self) -> AccountBaselines:
        """Get the stored baselines (both unset if never configured)."""
        return baselines_from_blob(self.db.get_setting(self.SETTING_KEY))

    def _save_baselines(self, baselines: AccountBaselines) -> None:
        self.db.set_setting(self.SETTING_KEY, baselines_to_blob(baselines))

    def set_initial_bank_balance(self, amount: Optional[Decimal]) -> AccountBaselines:
        """Set (or clear with None) the starting bank balance."""
        current = self.get_baselines()
        baselines = AccountBaselines(bank=amount, cash=current.cash)
        self._save_baselines(baselines)
        return baselines

    def set_initial_cash_balance(self, amount: Optional[Decimal]) -> AccountBaselines:
        """Set (or clear with None) the starting cash balance."""
        current = self.get_baselines()
        baselines = AccountBaselines(bank=current.bank, cash=amount)
        self._save_baselines(baselines)
        return baselines

    def get_current_bank_balance(self) -> Optional[Decimal]:
        """Current digital (upi) balance, or None if no baseline is set."""
        baseline = self.get_baselines().bank
        if baseline is None:
            return None
        return calculate_current_balance(baseline, self.db.list_entries(), PaymentMode.UPI)

    def get_current_cash_balance(self) -> Optional[Decimal]:
        """Current cash balance, or None if no baseline is set."""
        baseline = self.get_baselines().cash
        if baseline is None:
            return None
        return calculate_current_balance(baseline, self.db.list_entries(), PaymentMode.CASH)

    def get_net_flows(self) -> tuple[Decimal, Decimal]:
        """Net (bank, cash) flow of the whole log, ignoring baselines."""
        return derive_balances_from_entries(self.db.list_entries())
