"""Domain model entities for kharcha.

These are pure data classes representing the ledger and its derived state,
independent of how they are stored. Enum values are the exact spellings used
on the wire, so ``EntryType.CASH_WITHDRAWAL.value == "cash_withdrawal"``.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryType(str, Enum):
    """Kind of financial event recorded by an entry."""

    EXPENSE = "expense"
    INCOME = "income"
    BALANCE_ADJUSTMENT = "balance_adjustment"
    CASH_WITHDRAWAL = "cash_withdrawal"
    CASH_DEPOSIT = "cash_deposit"

    @property
    def is_transfer(self) -> bool:
        """Transfers move money between rails and carry no mode."""
        return self in (EntryType.CASH_WITHDRAWAL, EntryType.CASH_DEPOSIT)


class PaymentMode(str, Enum):
    """Payment rail: digital (upi) or physical cash."""

    UPI = "upi"
    CASH = "cash"


class AdjustmentType(str, Enum):
    """Direction of a manual balance adjustment."""

    ADD = "add"
    SUBTRACT = "subtract"


class Period(str, Enum):
    """Named calendar window used to scope aggregation."""

    TODAY = "today"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def _missing_(cls, value):
        if value == "daily":
            return cls.TODAY
        return None


class GoalPeriod(str, Enum):
    """Period a goal target applies to."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @property
    def calendar_period(self) -> Optional[Period]:
        """Calendar window for this goal, or None for the unbounded custom goal."""
        if self is GoalPeriod.CUSTOM:
            return None
        return Period(self.value)


class GoalCategory(str, Enum):
    """Savings goals are targets to reach; expense goals are limits."""

    SAVINGS = "savings"
    EXPENSE = "expense"


class CategoryType(str, Enum):
    """Whether a category is meant for expenses or income."""

    EXPENSE = "expense"
    INCOME = "income"


@dataclass(frozen=True)
class Entry:
    """A single recorded financial event."""

    id: str
    amount: Decimal
    type: EntryType
    date: date
    mode: Optional[PaymentMode] = None
    adjustment_type: Optional[AdjustmentType] = None
    note: Optional[str] = None
    category_id: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Totals:
    """Aggregated totals over a set of entries."""

    expense: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    expense_upi: Decimal = Decimal("0")
    expense_cash: Decimal = Decimal("0")
    income_upi: Decimal = Decimal("0")
    income_cash: Decimal = Decimal("0")


@dataclass(frozen=True)
class CategoryTotal:
    """Expense and income recorded against one category.

    category_id is None for the bucket of uncategorized entries.
    """

    category_id: Optional[str]
    expense: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    count: int = 0

    @property
    def amount(self) -> Decimal:
        return self.expense + self.income


@dataclass(frozen=True)
class CategoryBreakdown:
    """Per-category totals of expense and income entries."""

    total_expense: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    categories: tuple[CategoryTotal, ...] = ()
    uncategorized: CategoryTotal = field(default_factory=lambda: CategoryTotal(None))


@dataclass(frozen=True)
class AccountBaselines:
    """User-set starting balances. None means the balance is not tracked."""

    bank: Optional[Decimal] = None
    cash: Optional[Decimal] = None


@dataclass(frozen=True)
class Goals:
    """Goal targets keyed by period and category."""

    daily_savings_goal: Decimal = Decimal("0")
    weekly_savings_goal: Decimal = Decimal("0")
    monthly_savings_goal: Decimal = Decimal("0")
    yearly_savings_goal: Decimal = Decimal("0")
    custom_savings_goal: Decimal = Decimal("0")
    custom_savings_goal_name: str = ""
    daily_expense_goal: Decimal = Decimal("0")
    weekly_expense_goal: Decimal = Decimal("0")
    monthly_expense_goal: Decimal = Decimal("0")
    yearly_expense_goal: Decimal = Decimal("0")
    custom_expense_goal: Decimal = Decimal("0")
    custom_expense_goal_name: str = ""

    @staticmethod
    def field_name(period: GoalPeriod, category: GoalCategory) -> str:
        """Return the attribute holding the target for a period/category pair."""
        return f"{period.value}_{category.value}_goal"

    def target_for(self, period: GoalPeriod, category: GoalCategory) -> Decimal:
        return getattr(self, self.field_name(period, category))

    def name_for(self, category: GoalCategory) -> str:
        return getattr(self, f"custom_{category.value}_goal_name")

    def with_target(
        self,
        period: GoalPeriod,
        category: GoalCategory,
        amount: Decimal,
        name: Optional[str] = None,
    ) -> "Goals":
        """Return a copy with one target (and optionally the custom label) changed."""
        changes = {self.field_name(period, category): amount}
        if name is not None and period is GoalPeriod.CUSTOM:
            changes[f"custom_{category.value}_goal_name"] = name
        return replace(self, **changes)


@dataclass(frozen=True)
class GoalCompletionFlags:
    """Which savings goals have already been celebrated."""

    monthly: bool = False
    yearly: bool = False
    custom: bool = False

    def is_set(self, period: GoalPeriod) -> bool:
        return getattr(self, period.value, False)

    def with_flag(self, period: GoalPeriod, value: bool) -> "GoalCompletionFlags":
        if period.value not in ("monthly", "yearly", "custom"):
            return self
        return replace(self, **{period.value: value})


@dataclass(frozen=True)
class GoalProgress:
    """Progress of one goal for the current period."""

    current_value: Decimal
    target_goal: Decimal
    progress: Decimal
    remaining: Decimal
    is_completed: bool
    is_over_limit: bool
    category: GoalCategory
    period: GoalPeriod


@dataclass(frozen=True)
class StreakRecord:
    """Persisted consecutive-day activity counter."""

    current_streak: int = 0
    longest_streak: int = 0
    last_entry_date: Optional[date] = None


@dataclass(frozen=True)
class StreakUpdate:
    """Outcome of registering activity for a day."""

    record: StreakRecord
    is_new_streak: bool
    changed: bool

    @property
    def current_streak(self) -> int:
        return self.record.current_streak

    @property
    def longest_streak(self) -> int:
        return self.record.longest_streak


@dataclass(frozen=True)
class Category:
    """Display category for entries."""

    id: str
    name: str
    icon: str
    color: str
    type: CategoryType


@dataclass(frozen=True)
class EntryTemplate:
    """Saved defaults for a frequently recorded entry."""

    id: str
    name: str
    type: EntryType
    amount: Optional[Decimal] = None
    mode: Optional[PaymentMode] = None
    adjustment_type: Optional[AdjustmentType] = None
    note: Optional[str] = None
    category_id: Optional[str] = None


@dataclass(frozen=True)
class AchievementStatus:
    """An achievement rule together with its unlocked flag."""

    id: str
    name: str
    description: str
    icon: str
    unlocked: bool


@dataclass(frozen=True)
class AchievementCheck:
    """Result of evaluating the achievement rule table."""

    new_achievements: tuple[AchievementStatus, ...] = ()
    all_achievements: tuple[AchievementStatus, ...] = ()


@dataclass(frozen=True)
class ImportResult:
    """Counts reported by an entry import."""

    imported: int
    added: int
    skipped: int
    total: int
    reissued: int = 0


@dataclass(frozen=True)
class RecordResult:
    """Everything that happened when a new entry was recorded."""

    entry: Entry
    streak: StreakUpdate
    achievements: AchievementCheck = field(default_factory=AchievementCheck)
