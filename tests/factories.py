"""Builders for forms, questions and responses used across the test suite."""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from survey_analytics.forms.models import (
    Answer,
    Form,
    FormStatus,
    Option,
    Question,
    QuestionType,
    Response,
    ResponseStatus,
)

BASE_TIME = datetime(2024, 3, 1, 9, 30, 0)


def alternating_returns(spread: float, mean: float = 0.0) -> List[float]:
    """12 monthly returns with the given mean and population std dev == spread."""
    return [mean + spread, mean - spread] * 6


def make_trader_payload(
    name: str = "Trader",
    spread: float = 5.0,
    mean: float = 0.0,
    capital: float = 10,
    returns: Optional[List[Any]] = None,
    **extra,
) -> Dict[str, Any]:
    payload = {
        "traderName": name,
        "monthlyReturns": returns if returns is not None else alternating_returns(spread, mean),
        "capital": capital,
    }
    payload.update(extra)
    return payload


def make_choice_question(
    qid: str = "q_choice",
    values: List[str] = ("A", "B"),
    order_index: int = 0,
    multiple: bool = False,
    text: str = "Pick one",
) -> Question:
    return Question(
        id=qid,
        type=QuestionType.MULTIPLE_CHOICE if multiple else QuestionType.SINGLE_CHOICE,
        text=text,
        order_index=order_index,
        options=[
            Option(id=f"{qid}_opt_{i}", text=value, value=value, order_index=i)
            for i, value in enumerate(values)
        ],
    )


def make_question(qid: str, qtype: QuestionType, order_index: int = 0, text: str = "") -> Question:
    return Question(id=qid, type=qtype, text=text or qid, order_index=order_index)


def make_trader_question(
    qid: str,
    spread: float = 5.0,
    order_index: int = 0,
    legacy: bool = False,
    **payload_kwargs,
) -> Question:
    """Trader-rating question; legacy=True stores it as a 1..10 single choice."""
    payload = make_trader_payload(name=f"Trader {qid}", spread=spread, **payload_kwargs)
    options = []
    if legacy:
        options = [Option(id=f"{qid}_{i}", text=str(i), value=str(i), order_index=i) for i in range(1, 11)]
    return Question(
        id=qid,
        type=QuestionType.SINGLE_CHOICE if legacy else QuestionType.TRADER_RATING,
        text=f"Rate trader {qid}",
        order_index=order_index,
        options=options,
        config={"traderPerformance": payload},
    )


def make_form(
    questions: List[Question],
    form_id: str = "form_1",
    title: str = "Trader Survey",
    status: FormStatus = FormStatus.PUBLISHED,
) -> Form:
    return Form(id=form_id, title=title, status=status, questions=questions)


def make_response(
    response_id: str,
    answers: Dict[str, Any],
    form_id: str = "form_1",
    respondent_id: Optional[str] = None,
    status: ResponseStatus = ResponseStatus.SUBMITTED,
    minutes: int = 0,
) -> Response:
    return Response(
        id=response_id,
        form_id=form_id,
        respondent_id=respondent_id or f"user_{response_id}",
        respondent_name=f"User {response_id}",
        status=status,
        started_at=BASE_TIME,
        submitted_at=BASE_TIME + timedelta(minutes=minutes) if status == ResponseStatus.SUBMITTED else None,
        answers=[
            Answer(id=f"{response_id}_{qid}", response_id=response_id, question_id=qid, value=value)
            for qid, value in answers.items()
        ],
    )


def make_trader_form(spreads=(2.0, 4.0, 6.0), form_id: str = "form_1", **kwargs) -> Form:
    """Form with one trader question per spread: t1, t2, ..."""
    questions = [
        make_trader_question(f"t{i + 1}", spread=spread, order_index=i)
        for i, spread in enumerate(spreads)
    ]
    return make_form(questions, form_id=form_id, **kwargs)
