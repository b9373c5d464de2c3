"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class StorageError(DomainError):
    """The persistence layer failed to read or write."""


def entry_not_found(entry_id: str) -> str:
    """Return message for missing entry."""
    return f"Entry '{entry_id}' not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category '{category_id}' not found"


def duplicate_entry_id(entry_id: str) -> str:
    """Return message for an entry ID that is already in the log."""
    return f"Entry with id '{entry_id}' already exists"


def invalid_amount(value: object) -> str:
    """Return message for an amount that is not a positive number."""
    return f"Amount must be a positive number, got '{value}'"


def unknown_choice(kind: str, value: object, choices: list[str]) -> str:
    """Return message for a value outside a closed vocabulary."""
    return f"Unknown {kind}: '{value}'. Supported values: {', '.join(choices)}"


def storage_failure(action: str, error: Exception) -> str:
    """Return message for a failed storage operation."""
    return f"Storage failure while {action}: {error}"


def template_not_found(template_id: str) -> str:
    """Return message for missing entry template."""
    return f"Template '{template_id}' not found"
