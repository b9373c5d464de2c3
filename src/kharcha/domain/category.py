"""Category domain service."""

import re
from typing import Optional

from kharcha.database.base import Database
from kharcha.database.mappers import category_from_blob, category_to_blob
from kharcha.domain import errors
from kharcha.domain.entities import Category, CategoryType

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category("food_dining", "Food & Dining", "restaurant-outline", "#FF9800", CategoryType.EXPENSE),
    Category("groceries", "Groceries", "basket-outline", "#4CAF50", CategoryType.EXPENSE),
    Category("transportation", "Transportation", "car-outline", "#2196F3", CategoryType.EXPENSE),
    Category("shopping", "Shopping", "bag-outline", "#E91E63", CategoryType.EXPENSE),
    Category("bills_utilities", "Bills & Utilities", "flash-outline", "#FFC107", CategoryType.EXPENSE),
    Category("entertainment", "Entertainment", "film-outline", "#9C27B0", CategoryType.EXPENSE),
    Category("health_fitness", "Health & Fitness", "medical-outline", "#F44336", CategoryType.EXPENSE),
    Category("education", "Education", "school-outline", "#2196F3", CategoryType.EXPENSE),
    Category("personal_care", "Personal Care", "sparkles-outline", "#E91E63", CategoryType.EXPENSE),
    Category("travel", "Travel", "airplane-outline", "#00BCD4", CategoryType.EXPENSE),
    Category("transfer_person", "Transfer to Person", "person-outline", "#FF5722", CategoryType.EXPENSE),
    Category("income_salary", "Salary", "cash-outline", "#4CAF50", CategoryType.INCOME),
    Category("income_business", "Business", "briefcase-outline", "#2196F3", CategoryType.INCOME),
    Category("income_other", "Other Income", "wallet-outline", "#607D8B", CategoryType.INCOME),
    Category("other_general", "General", "ellipse-outline", "#9E9E9E", CategoryType.EXPENSE),
)

DEFAULT_CATEGORY_IDS = frozenset(category.id for category in DEFAULT_CATEGORIES)


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


class CategoryService:
    """Service for the category catalogue.

    Categories only affect display; aggregation never looks them up.
    """

    SETTING_KEY = "categories"

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _custom_categories(self) -> list[Category]:
        blob = self.db.get_setting(self.SETTING_KEY)
        if not isinstance(blob, list):
            return []
        categories = []
        for item in blob:
            category = category_from_blob(item)
            if category is not None and category.id not in DEFAULT_CATEGORY_IDS:
                categories.append(category)
        return categories

    def list_categories(self, category_type: Optional[CategoryType | str] = None) -> list[Category]:
        """List default categories followed by custom ones.

        Args:
            category_type: Optional filter (expense or income)
        """
        categories = list(DEFAULT_CATEGORIES) + self._custom_categories()
        if category_type is None:
            return categories
        return [category for category in categories if category.type == category_type]

    def get_category_by_id(self, category_id: str) -> Optional[Category]:
        """Get category by ID, or None if unknown."""
        for category in self.list_categories():
            if category.id == category_id:
                return category
        return None

    def add_category(
        self,
        name: str,
        icon: str = "ellipse-outline",
        color: str = "#9E9E9E",
        category_type: CategoryType | str = CategoryType.EXPENSE,
    ) -> Category:
        """Add a custom category.

        Raises:
            ValidationError: If the name or type is invalid
            ConflictError: If a category with the same name already exists
        """
        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Category name cannot be empty")
        try:
            category_type = CategoryType(getattr(category_type, "value", category_type))
        except ValueError:
            raise errors.ValidationError(
                errors.unknown_choice("category type", category_type, [t.value for t in CategoryType])
            )

        existing = self.list_categories()
        if any(category.name.lower() == name.lower() for category in existing):
            raise errors.ConflictError(f"Category '{name}' already exists")

        base_id = f"custom_{_slugify(name) or 'category'}"
        category_id = base_id
        taken = {category.id for category in existing}
        suffix = 2
        while category_id in taken:
            category_id = f"{base_id}_{suffix}"
            suffix += 1

        category = Category(category_id, name, icon, color, category_type)
        custom = self._custom_categories() + [category]
        self.db.set_setting(self.SETTING_KEY, [category_to_blob(c) for c in custom])
        return category

    def delete_category(self, category_id: str) -> None:
        """Delete a custom category. Entries keep their (now dangling) reference.

        Raises:
            ValidationError: If the category is a default one
            NotFoundError: If the category doesn't exist
        """
        if category_id in DEFAULT_CATEGORY_IDS:
            raise errors.ValidationError(f"Default category '{category_id}' cannot be deleted")
        custom = self._custom_categories()
        remaining = [category for category in custom if category.id != category_id]
        if len(remaining) == len(custom):
            raise errors.NotFoundError(errors.category_not_found(category_id))
        self.db.set_setting(self.SETTING_KEY, [category_to_blob(c) for c in remaining])
