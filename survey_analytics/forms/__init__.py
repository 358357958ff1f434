"""Survey domain models and the read-only data access layer."""

from .models import (
    Form,
    FormStatus,
    Question,
    QuestionType,
    Option,
    Response,
    ResponseStatus,
    Answer,
    TRADER_CONFIG_KEY,
    is_eligible,
)
from .repository import (
    FormRepository,
    InMemoryFormRepository,
    PostgresFormRepository,
    get_repository,
)

__all__ = [
    "Form",
    "FormStatus",
    "Question",
    "QuestionType",
    "Option",
    "Response",
    "ResponseStatus",
    "Answer",
    "TRADER_CONFIG_KEY",
    "is_eligible",
    "FormRepository",
    "InMemoryFormRepository",
    "PostgresFormRepository",
    "get_repository",
]
