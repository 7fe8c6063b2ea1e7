from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.models.analysis import ChartAnalytics, QuestionAnalytics
from surveyflow.models.survey import SurveyQuestion


class ChartType(str, Enum):
    """Supported chart shapes for survey visualisations."""

    BAR = "bar"
    PIE = "pie"
    LINE = "line"


@dataclass(frozen=True)
class ChartData:
    """Structured payload describing a chart for the UI layer."""

    chart_type: ChartType
    labels: Tuple[str, ...]
    values: Tuple[float, ...]
    title: str
    question_id: str | None = None
    question_text: str | None = None
    description: str | None = None
    metadata: dict[str, int | float | str] = field(default_factory=dict)

    def to_series(self) -> List[Tuple[str, float]]:
        """Return data as a list of (label, value) tuples."""

        return list(zip(self.labels, self.values))

    def as_dict(self) -> dict[str, float]:
        """Return data as a simple label -> value mapping."""

        return {label: value for label, value in zip(self.labels, self.values)}

    @property
    def is_empty(self) -> bool:
        return not self.labels


class SurveyChartBuilder:
    """Prepare chart-ready data derived from survey responses."""

    def __init__(self, data_provider: SurveyDataProvider) -> None:
        if data_provider is None:
            raise ValueError("data_provider must be provided")

        self._provider = data_provider

    def response_timeline(self, survey_id: str) -> ChartData:
        """Return responses per day as a line chart."""

        timeline = self._provider.get_timeline(survey_id)
        return ChartData(
            chart_type=ChartType.LINE,
            labels=tuple(point.day.isoformat() for point in timeline),
            values=tuple(float(point.count) for point in timeline),
            title="Response Frequency Over Time",
            description="Responses received per day (UTC).",
            metadata={"days": len(timeline), "responses": sum(point.count for point in timeline)},
        )

    def question_chart(
        self,
        survey_id: str,
        question_id: str,
        *,
        chart_type: ChartType | str | None = None,
    ) -> ChartData:
        """Return chart data for a single choice question."""

        question, analytics = self._provider.get_question_analytics(survey_id, question_id)
        resolved_type = self._resolve_chart_type(chart_type, question)
        return self._build_choice_chart(question, analytics, resolved_type)

    def all_question_charts(
        self,
        survey_id: str,
        *,
        chart_type: ChartType | str | None = None,
    ) -> List[ChartData]:
        """Return chart data for every choice question of the survey."""

        survey = self._provider.get_survey(survey_id)
        return [
            self.question_chart(survey_id, question.id, chart_type=chart_type)
            for question in survey.questions
            if question.is_choice
        ]

    def _resolve_chart_type(
        self,
        chart_type: ChartType | str | None,
        question: SurveyQuestion,
    ) -> ChartType:
        if not question.is_choice:
            raise ValueError("Charts are only available for choice questions.")

        if chart_type is None:
            return ChartType.PIE if question.type == "single" else ChartType.BAR

        if isinstance(chart_type, str):
            try:
                resolved = ChartType(chart_type)
            except ValueError as exc:
                raise ValueError(f"Unknown chart type: {chart_type}") from exc
        else:
            resolved = chart_type

        if resolved == ChartType.LINE:
            raise ValueError("Line charts are only used for the response timeline.")
        if resolved == ChartType.PIE and question.type == "multiple":
            # Shares of respondents overlap for multiple choice, so slices would not add up.
            raise ValueError("Pie charts are only supported for single choice questions.")

        return resolved

    def _build_choice_chart(
        self,
        question: SurveyQuestion,
        analytics: QuestionAnalytics,
        chart_type: ChartType,
    ) -> ChartData:
        if not isinstance(analytics, ChartAnalytics):
            raise ValueError("Choice distribution requested for a text question.")

        return ChartData(
            chart_type=chart_type,
            labels=tuple(entry.option for entry in analytics.entries),
            values=tuple(float(entry.count) for entry in analytics.entries),
            title=question.prompt,
            question_id=question.id,
            question_text=question.prompt,
            description="Number of respondents who picked each option.",
            metadata={
                "answer_type": question.type,
                "selections": analytics.total_selections,
                **{f"pct:{entry.option}": entry.percentage for entry in analytics.entries},
            },
        )


__all__ = [
    "ChartData",
    "ChartType",
    "SurveyChartBuilder",
]
