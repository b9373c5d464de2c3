"""Entry templates: saved defaults for frequently recorded entries."""

import logging
from decimal import Decimal
from typing import Any, Optional

from kharcha.database.base import Database
from kharcha.database.mappers import template_from_blob, template_to_blob
from kharcha.domain import errors
from kharcha.domain.entities import AdjustmentType, EntryTemplate, EntryType, PaymentMode
from kharcha.domain.entries import generate_entry_id
from kharcha.utils.amount_parser import parse_amount, to_cents

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = ("type", "amount", "mode", "adjustment_type", "note", "category_id")


def _enum_value(enum_cls, value: Any, kind: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        raise errors.ValidationError(
            errors.unknown_choice(kind, value, [member.value for member in enum_cls])
        )


def build_template(template_id: str, name: str, fields: dict[str, Any]) -> EntryTemplate:
    """Validate raw template fields into an EntryTemplate.

    The amount is optional and, when given, must be positive. Transfers
    never keep a mode and only balance adjustments keep a direction.

    Raises:
        ValidationError: If the name, type, amount, mode or direction is invalid
    """
    name = (name or "").strip()
    if not name:
        raise errors.ValidationError("Template name cannot be empty")

    entry_type = _enum_value(EntryType, fields.get("type"), "entry type")
    if entry_type is None:
        raise errors.ValidationError("Template is missing required field 'type'")

    amount: Optional[Decimal] = None
    if fields.get("amount") not in (None, ""):
        try:
            amount = to_cents(parse_amount(fields["amount"]))
        except ValueError:
            raise errors.ValidationError(errors.invalid_amount(fields["amount"]))
        if amount <= 0:
            raise errors.ValidationError(errors.invalid_amount(fields["amount"]))

    mode = _enum_value(PaymentMode, fields.get("mode"), "payment mode")
    adjustment_type = _enum_value(AdjustmentType, fields.get("adjustment_type"), "adjustment type")

    return EntryTemplate(
        id=template_id,
        name=name,
        type=entry_type,
        amount=amount,
        mode=None if entry_type.is_transfer else mode,
        adjustment_type=adjustment_type if entry_type is EntryType.BALANCE_ADJUSTMENT else None,
        note=fields.get("note") or None,
        category_id=fields.get("category_id") or None,
    )


class TemplateService:
    """Service for saved entry templates."""

    SETTING_KEY = "templates"

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_templates(self) -> list[EntryTemplate]:
        """List templates in the order they were created."""
        blob = self.db.get_setting(self.SETTING_KEY)
        if not isinstance(blob, list):
            return []
        return [t for t in (template_from_blob(item) for item in blob) if t is not None]

    def _save(self, templates: list[EntryTemplate]) -> None:
        self.db.set_setting(self.SETTING_KEY, [template_to_blob(t) for t in templates])

    def get_template(self, template_id: str) -> Optional[EntryTemplate]:
        """Get template by ID, or None if unknown."""
        for template in self.list_templates():
            if template.id == template_id:
                return template
        return None

    def require_template(self, template_id: str) -> EntryTemplate:
        """Get template by ID or raise NotFoundError."""
        template = self.get_template(template_id)
        if template is None:
            raise errors.NotFoundError(errors.template_not_found(template_id))
        return template

    def add_template(self, name: str, **fields: Any) -> EntryTemplate:
        """Save a new template.

        Args:
            name: Display name, unique ignoring case
            **fields: type (required), amount, mode, adjustment_type, note, category_id

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If a template with the same name exists
        """
        templates = self.list_templates()
        template = build_template(
            generate_entry_id({t.id for t in templates}), name, fields
        )
        if any(t.name.lower() == template.name.lower() for t in templates):
            raise errors.ConflictError(f"Template '{template.name}' already exists")

        self._save(templates + [template])
        logger.debug("Added template %s (%s)", template.id, template.name)
        return template

    def update_template(self, template_id: str, name: Optional[str] = None, **changes: Any) -> EntryTemplate:
        """Replace a template with an edited copy. A None change clears the field.

        Raises:
            NotFoundError: If the template doesn't exist
            ValidationError: If the edited template is invalid
            ConflictError: If the new name belongs to another template
        """
        templates = self.list_templates()
        current = self.require_template(template_id)
        fields = {key: getattr(current, key) for key in TEMPLATE_FIELDS}
        fields.update(changes)
        updated = build_template(template_id, name if name is not None else current.name, fields)

        if any(
            t.id != template_id and t.name.lower() == updated.name.lower() for t in templates
        ):
            raise errors.ConflictError(f"Template '{updated.name}' already exists")

        self._save([updated if t.id == template_id else t for t in templates])
        return updated

    def delete_template(self, template_id: str) -> None:
        """Delete a template.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        templates = self.list_templates()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            raise errors.NotFoundError(errors.template_not_found(template_id))
        self._save(remaining)

    def entry_fields(self, template_id: str, **overrides: Any) -> dict[str, Any]:
        """Arguments for EntryService.add_entry built from a template.

        Overrides that are not None replace the template's values.

        Raises:
            NotFoundError: If the template doesn't exist
            ValidationError: If neither the template nor the overrides give an amount
        """
        template = self.require_template(template_id)
        fields = {key: getattr(template, key) for key in TEMPLATE_FIELDS}
        fields.update({key: value for key, value in overrides.items() if value is not None})
        if fields.get("amount") is None:
            raise errors.ValidationError(
                f"Template '{template.name}' has no amount; provide one when using it"
            )
        return fields
