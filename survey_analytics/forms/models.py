"""
Survey Domain Models

Read-only views of the platform's forms, questions, options, responses and
answers. These are owned by the CRUD collaborators; the analytics engine
only reads them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FormStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TEXT_SHORT = "text_short"
    TEXT_LONG = "text_long"
    LIKERT_SCALE = "likert_scale"
    NUMERIC_SCALE = "numeric_scale"
    FILE_UPLOAD = "file_upload"
    INSTRUCTION = "instruction"
    TRADER_RATING = "trader_rating"


class ResponseStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


# Config key holding the embedded trader instrument
TRADER_CONFIG_KEY = "traderPerformance"


class Option(BaseModel):
    id: str
    text: str = ""
    value: str
    order_index: int = 0

    class Config:
        extra = "allow"


class Question(BaseModel):
    id: str
    form_id: Optional[str] = None
    type: QuestionType
    text: str = ""
    order_index: int = 0
    required: bool = False
    options: List[Option] = Field(default_factory=list)
    config: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"

    @property
    def effective_type(self) -> QuestionType:
        """
        Question type as analytics sees it.

        Trader questions were historically stored as single-choice 1..10
        questions carrying a traderPerformance payload in their config.
        """
        if self.config and TRADER_CONFIG_KEY in self.config:
            return QuestionType.TRADER_RATING
        return self.type

    @property
    def is_trader_rating(self) -> bool:
        return self.effective_type == QuestionType.TRADER_RATING

    def sorted_options(self) -> List[Option]:
        return sorted(self.options, key=lambda o: o.order_index)


class Form(BaseModel):
    id: str
    title: str = ""
    description: Optional[str] = None
    status: FormStatus = FormStatus.DRAFT
    questions: List[Question] = Field(default_factory=list)

    class Config:
        extra = "allow"

    @property
    def is_published(self) -> bool:
        return self.status == FormStatus.PUBLISHED

    def ordered_questions(self) -> List[Question]:
        """Questions by order_index; ties keep their stored position."""
        indexed = list(enumerate(self.questions))
        indexed.sort(key=lambda pair: (pair[1].order_index, pair[0]))
        return [q for _, q in indexed]

    def trader_questions(self) -> List[Question]:
        return [q for q in self.ordered_questions() if q.is_trader_rating]


class Answer(BaseModel):
    id: Optional[str] = None
    response_id: Optional[str] = None
    question_id: str
    value: Any = None

    class Config:
        extra = "allow"


class Response(BaseModel):
    id: str
    form_id: str
    respondent_id: str
    respondent_name: Optional[str] = None
    status: ResponseStatus = ResponseStatus.IN_PROGRESS
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    answers: List[Answer] = Field(default_factory=list)

    class Config:
        extra = "allow"

    def answers_by_question(self) -> Dict[str, Answer]:
        """Latest answer per question (a later duplicate wins)."""
        by_question: Dict[str, Answer] = {}
        for answer in self.answers:
            by_question[answer.question_id] = answer
        return by_question


def is_eligible(response: Response, eligible_statuses) -> bool:
    """True if the response's status is one the analytics may read."""
    return response.status.value in eligible_statuses
