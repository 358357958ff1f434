"""
Survey Data Access

The analytics engine consumes forms and responses through this interface:

    get_form(form_id)                -> Optional[Form]
    get_responses(form_id, statuses) -> List[Response]
    get_response(response_id)        -> Optional[Response]
    list_published_form_ids()        -> List[str]

PostgresFormRepository reads the platform schema directly (read-only).
InMemoryFormRepository backs tests and local development, optionally
seeded from a JSON file.

Each Postgres call opens and closes its own connection so batch workers
running in threads never share one.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from survey_analytics import config
from survey_analytics.shared.errors import DataSourceUnavailable

from .models import Answer, Form, FormStatus, Option, Question, Response, ResponseStatus

logger = logging.getLogger(__name__)

DEFAULT_STATUSES = (ResponseStatus.SUBMITTED.value,)


class FormRepository(ABC):
    """Read-only data source for analytics."""

    @abstractmethod
    def get_form(self, form_id: str) -> Optional[Form]:
        ...

    @abstractmethod
    def get_responses(
        self, form_id: str, statuses: Iterable[str] = DEFAULT_STATUSES
    ) -> List[Response]:
        """Responses of a form whose status is one of `statuses`."""
        ...

    @abstractmethod
    def get_response(self, response_id: str) -> Optional[Response]:
        ...

    @abstractmethod
    def list_published_form_ids(self) -> List[str]:
        ...


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryFormRepository(FormRepository):
    """Dict-backed repository."""

    def __init__(self, forms: Iterable[Form] = (), responses: Iterable[Response] = ()):
        self._forms: Dict[str, Form] = {f.id: f for f in forms}
        self._responses: Dict[str, Response] = {r.id: r for r in responses}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryFormRepository":
        """Build from {"forms": [...], "responses": [...]}."""
        forms = [Form(**f) for f in data.get("forms", [])]
        responses = [Response(**r) for r in data.get("responses", [])]
        return cls(forms=forms, responses=responses)

    @classmethod
    def from_file(cls, path: str) -> "InMemoryFormRepository":
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
        repo = cls.from_dict(data)
        logger.info(
            f"Loaded survey data from {path}: "
            f"{len(repo._forms)} forms, {len(repo._responses)} responses"
        )
        return repo

    def add_form(self, form: Form) -> None:
        self._forms[form.id] = form

    def add_response(self, response: Response) -> None:
        self._responses[response.id] = response

    def get_form(self, form_id: str) -> Optional[Form]:
        return self._forms.get(form_id)

    def get_responses(
        self, form_id: str, statuses: Iterable[str] = DEFAULT_STATUSES
    ) -> List[Response]:
        wanted = set(statuses)
        return [
            r for r in self._responses.values()
            if r.form_id == form_id and r.status.value in wanted
        ]

    def get_response(self, response_id: str) -> Optional[Response]:
        return self._responses.get(response_id)

    def list_published_form_ids(self) -> List[str]:
        return sorted(f.id for f in self._forms.values() if f.status == FormStatus.PUBLISHED)


# =============================================================================
# POSTGRES
# =============================================================================

class PostgresFormRepository(FormRepository):
    """Reads forms/questions/options/responses/answers/users tables."""

    def __init__(self, database_url: Optional[str] = None):
        self._database_url = database_url or config.DATABASE_URL

    def _get_conn(self):
        try:
            return psycopg2.connect(self._database_url, cursor_factory=RealDictCursor)
        except Exception as e:
            logger.error(f"Database connection error: {e}")
            raise DataSourceUnavailable("Database connection failed")

    def get_form(self, form_id: str) -> Optional[Form]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("""
                SELECT id::text AS id, title, description, status
                FROM forms
                WHERE id::text = %s
            """, (form_id,))
            form_row = cur.fetchone()
            if not form_row:
                cur.close()
                return None

            cur.execute("""
                SELECT id::text AS id, form_id::text AS form_id, type, text,
                       config, order_index, required
                FROM questions
                WHERE form_id::text = %s
                ORDER BY order_index, created_at
            """, (form_id,))
            question_rows = cur.fetchall()

            question_ids = [row["id"] for row in question_rows]
            options_by_question: Dict[str, List[Option]] = {qid: [] for qid in question_ids}
            if question_ids:
                cur.execute("""
                    SELECT id::text AS id, question_id::text AS question_id,
                           text, value, order_index
                    FROM options
                    WHERE question_id::text = ANY(%s)
                    ORDER BY order_index
                """, (question_ids,))
                for row in cur.fetchall():
                    options_by_question[row["question_id"]].append(Option(
                        id=row["id"],
                        text=row["text"] or "",
                        value=row["value"],
                        order_index=row["order_index"] or 0,
                    ))
            cur.close()

            questions = [
                Question(
                    id=row["id"],
                    form_id=row["form_id"],
                    type=row["type"],
                    text=row["text"] or "",
                    config=row["config"],
                    order_index=row["order_index"] or 0,
                    required=bool(row["required"]),
                    options=options_by_question.get(row["id"], []),
                )
                for row in question_rows
            ]
            return Form(
                id=form_row["id"],
                title=form_row["title"] or "",
                description=form_row["description"],
                status=form_row["status"],
                questions=questions,
            )
        finally:
            conn.close()

    def _load_responses(self, where_sql: str, params: tuple) -> List[Response]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(f"""
                SELECT r.id::text AS id, r.form_id::text AS form_id,
                       r.user_id::text AS respondent_id, u.name AS respondent_name,
                       r.status, r.started_at, r.submitted_at
                FROM responses r
                LEFT JOIN users u ON u.id = r.user_id
                WHERE {where_sql}
                ORDER BY r.submitted_at NULLS LAST, r.id
            """, params)
            response_rows = cur.fetchall()

            response_ids = [row["id"] for row in response_rows]
            answers_by_response: Dict[str, List[Answer]] = {rid: [] for rid in response_ids}
            if response_ids:
                cur.execute("""
                    SELECT id::text AS id, response_id::text AS response_id,
                           question_id::text AS question_id, value
                    FROM answers
                    WHERE response_id::text = ANY(%s)
                    ORDER BY created_at, id
                """, (response_ids,))
                for row in cur.fetchall():
                    answers_by_response[row["response_id"]].append(Answer(**dict(row)))
            cur.close()

            return [
                Response(**dict(row), answers=answers_by_response.get(row["id"], []))
                for row in response_rows
            ]
        finally:
            conn.close()

    def get_responses(
        self, form_id: str, statuses: Iterable[str] = DEFAULT_STATUSES
    ) -> List[Response]:
        return self._load_responses(
            "r.form_id::text = %s AND r.status = ANY(%s)",
            (form_id, list(statuses)),
        )

    def get_response(self, response_id: str) -> Optional[Response]:
        responses = self._load_responses("r.id::text = %s", (response_id,))
        return responses[0] if responses else None

    def list_published_form_ids(self) -> List[str]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("""
                SELECT id::text AS id
                FROM forms
                WHERE status = %s
                ORDER BY id
            """, (FormStatus.PUBLISHED.value,))
            ids = [row["id"] for row in cur.fetchall()]
            cur.close()
            return ids
        finally:
            conn.close()


def get_repository() -> FormRepository:
    """Postgres when DATABASE_URL is configured, otherwise in-memory."""
    if config.DATABASE_URL:
        return PostgresFormRepository(config.DATABASE_URL)
    if config.SURVEY_DATA_FILE:
        return InMemoryFormRepository.from_file(config.SURVEY_DATA_FILE)
    logger.warning("DATABASE_URL not configured; using empty in-memory survey repository")
    return InMemoryFormRepository()
