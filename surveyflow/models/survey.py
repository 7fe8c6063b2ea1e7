from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Iterable, List, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

QuestionType = Literal["text", "single", "multiple"]
SurveyStatus = Literal["draft", "active", "closed"]

QUESTION_TYPE_LABELS = {
    "text": "Text Response",
    "single": "Single Choice",
    "multiple": "Multiple Choice",
}


def new_id() -> str:
    """Return a fresh opaque identifier."""

    return uuid.uuid4().hex[:12]


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class SurveyQuestion(BaseModel):
    """A single survey item.

    Choice questions (``single`` and ``multiple``) carry at least one option;
    text questions never do. Options are trimmed and blank entries dropped,
    so the authoring form can hand over its raw input.
    """

    id: str = Field(default_factory=new_id)
    type: QuestionType = "text"
    prompt: str
    options: List[str] = Field(default_factory=list)

    @field_validator("prompt")
    @classmethod
    def _require_prompt(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("question prompt cannot be empty")
        return cleaned

    @field_validator("options", mode="before")
    @classmethod
    def _clean_options(cls, value: Iterable[Union[str, int]] | None) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            raise TypeError("options must be provided as a sequence, not a single string")
        cleaned = (str(option).strip() for option in value)
        return [option for option in cleaned if option]

    @model_validator(mode="after")
    def _check_options(self) -> "SurveyQuestion":
        if self.type == "text":
            self.options = []
            return self

        if not self.options:
            raise ValueError(f"choice question '{self.prompt}' must define at least one option")
        if len(set(self.options)) != len(self.options):
            raise ValueError(f"choice question '{self.prompt}' has duplicate options")

        return self

    model_config = {"extra": "forbid"}

    @property
    def is_choice(self) -> bool:
        """Return True for single and multiple choice questions."""

        return self.type != "text"


class SurveyDraft(BaseModel):
    """Authoring input for a new survey template."""

    title: str
    description: str = ""
    questions: List[SurveyQuestion]

    @field_validator("title")
    @classmethod
    def _require_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("survey title cannot be empty")
        return cleaned

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _check_questions(self) -> "SurveyDraft":
        if not self.questions:
            raise ValueError("survey must contain at least one question")

        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"question id '{question.id}' is used more than once")
            seen.add(question.id)

        return self

    model_config = {"extra": "forbid"}


class Survey(SurveyDraft):
    """A stored survey template together with its bookkeeping fields."""

    id: str = Field(default_factory=new_id)
    response_count: int = Field(default=0, ge=0)
    status: SurveyStatus = "draft"
    created_at: date = Field(default_factory=_utc_today)
    last_modified: date = Field(default_factory=_utc_today)

    def question(self, question_id: str) -> SurveyQuestion | None:
        """Return the question with the given id, if any."""

        for question in self.questions:
            if question.id == question_id:
                return question
        return None


__all__ = [
    "QUESTION_TYPE_LABELS",
    "QuestionType",
    "Survey",
    "SurveyDraft",
    "SurveyQuestion",
    "SurveyStatus",
    "new_id",
]
