from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from surveyflow.models.survey import new_id

Answer = Union[str, List[str]]
LinkStatus = Literal["active", "inactive"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SurveyResponse(BaseModel):
    """One visitor's answers to a survey. Never mutated once stored."""

    id: str = Field(default_factory=new_id)
    survey_id: str
    fingerprint: str
    submitted_at: datetime = Field(default_factory=utc_now)
    answers: Dict[str, Answer] = Field(default_factory=dict)

    @field_validator("submitted_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    model_config = {"extra": "forbid", "frozen": True}

    def answer_for(self, question_id: str) -> Answer | None:
        """Return the answer to a question, or ``None`` when it was left empty."""

        value = self.answers.get(question_id)
        if isinstance(value, list):
            return value or None
        if isinstance(value, str):
            return value if value.strip() else None
        return None


class GeneratedLink(BaseModel):
    """A shareable reference to a survey with its intended validity window."""

    id: str = Field(default_factory=new_id)
    survey_id: str
    survey_title: str
    link: str
    valid_from: date
    valid_to: date
    created_at: datetime = Field(default_factory=utc_now)
    status: LinkStatus = "active"

    @model_validator(mode="after")
    def _check_window(self) -> "GeneratedLink":
        if self.valid_to < self.valid_from:
            raise ValueError("end date must not be before the start date")
        return self

    model_config = {"extra": "forbid"}

    def covers(self, day: date) -> bool:
        """Return True when ``day`` falls inside the validity window."""

        return self.valid_from <= day <= self.valid_to


class User(BaseModel):
    """The operator signed into the admin portal."""

    id: str
    name: str
    email: str
    picture: Optional[str] = None

    model_config = {"extra": "forbid"}


__all__ = [
    "Answer",
    "GeneratedLink",
    "LinkStatus",
    "SurveyResponse",
    "User",
    "utc_now",
]
