from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field


class TextAnalytics(BaseModel):
    """Raw answer text for a free-text question, in response order."""

    kind: Literal["text"] = Field(default="text", frozen=True)
    values: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class ChartEntry(BaseModel):
    """How many respondents picked one option and their share in percent."""

    option: str
    count: int
    percentage: float

    model_config = {"extra": "forbid"}


class ChartAnalytics(BaseModel):
    """Option counts for a choice question, in first-seen order."""

    kind: Literal["chart"] = Field(default="chart", frozen=True)
    entries: List[ChartEntry] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def total_selections(self) -> int:
        return sum(entry.count for entry in self.entries)


QuestionAnalytics = Annotated[
    Union[TextAnalytics, ChartAnalytics],
    Field(discriminator="kind"),
]


class DayFrequency(BaseModel):
    """Number of responses submitted on one UTC calendar day."""

    day: date
    count: int

    model_config = {"extra": "forbid"}


class AnalyticsSummary(BaseModel):
    """Headline numbers for the analytics overview."""

    total_responses: int
    total_questions: int
    active_days: int
    average_daily_responses: int
    first_response_at: datetime | None = None
    last_response_at: datetime | None = None

    model_config = {"extra": "forbid"}


__all__ = [
    "AnalyticsSummary",
    "ChartAnalytics",
    "ChartEntry",
    "DayFrequency",
    "QuestionAnalytics",
    "TextAnalytics",
]
