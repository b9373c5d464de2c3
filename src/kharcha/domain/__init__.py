"""Domain layer for kharcha application."""

# Services are imported lazily: the database layer imports domain.entities,
# and the services import the database layer.
_SERVICES = {
    "EntryService": "kharcha.domain.entries",
    "BalanceService": "kharcha.domain.ledger",
    "GoalService": "kharcha.domain.goals",
    "StreakService": "kharcha.domain.streak",
    "AchievementService": "kharcha.domain.achievements",
    "CategoryService": "kharcha.domain.category",
    "RecordingService": "kharcha.domain.recording",
    "TemplateService": "kharcha.domain.templates",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
