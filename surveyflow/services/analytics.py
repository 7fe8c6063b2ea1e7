"""Read-only projections over a survey's responses.

Everything here is a pure function of its arguments: nothing is cached or
persisted, and identical input always yields identical output.
"""

from __future__ import annotations

import csv
import io
from collections import Counter
from datetime import timezone
from typing import Dict, List, Sequence

from surveyflow.models.analysis import (
    AnalyticsSummary,
    ChartAnalytics,
    ChartEntry,
    DayFrequency,
    QuestionAnalytics,
    TextAnalytics,
)
from surveyflow.models.response import SurveyResponse
from surveyflow.models.survey import Survey, SurveyQuestion

NOT_AVAILABLE = "N/A"
MULTI_VALUE_SEPARATOR = "; "


def tally(question: SurveyQuestion, responses: Sequence[SurveyResponse]) -> QuestionAnalytics:
    """Aggregate the answers given to one question.

    Text questions return the raw answers. Choice questions return one entry per
    option that was picked at least once, in the order options were first seen.
    Percentages are shares of respondents who answered the question, so for
    multiple choice they may add up to more than 100.
    """

    if question.type == "text":
        values: List[str] = []
        for response in responses:
            answer = response.answer_for(question.id)
            if answer is None:
                continue
            values.append(answer if isinstance(answer, str) else MULTI_VALUE_SEPARATOR.join(answer))
        return TextAnalytics(values=values)

    counts: Dict[str, int] = {}
    answered = 0
    for response in responses:
        answer = response.answer_for(question.id)
        if answer is None:
            continue
        answered += 1
        selections = [answer] if isinstance(answer, str) else list(dict.fromkeys(answer))
        for option in selections:
            counts[option] = counts.get(option, 0) + 1

    if answered == 0:
        return ChartAnalytics(entries=[])

    entries = [
        ChartEntry(option=option, count=count, percentage=round(100 * count / answered, 1))
        for option, count in counts.items()
    ]
    return ChartAnalytics(entries=entries)


def frequency_by_day(responses: Sequence[SurveyResponse]) -> List[DayFrequency]:
    """Count responses per UTC calendar day, oldest first. Empty days are omitted."""

    per_day = Counter(response.submitted_at.astimezone(timezone.utc).date() for response in responses)
    return [DayFrequency(day=day, count=per_day[day]) for day in sorted(per_day)]


def summarize(survey: Survey, responses: Sequence[SurveyResponse]) -> AnalyticsSummary:
    """Return the headline numbers shown above the charts."""

    active_days = len(frequency_by_day(responses))
    timestamps = [response.submitted_at for response in responses]
    return AnalyticsSummary(
        total_responses=len(responses),
        total_questions=len(survey.questions),
        active_days=active_days,
        average_daily_responses=round(len(responses) / max(1, active_days)),
        first_response_at=min(timestamps) if timestamps else None,
        last_response_at=max(timestamps) if timestamps else None,
    )


def build_report(survey: Survey, responses: Sequence[SurveyResponse]) -> str:
    """Render the plain-text report offered for download."""

    summary = summarize(survey, responses)
    start = _format_day(summary.first_response_at)
    end = _format_day(summary.last_response_at)

    lines = [
        f"Survey Report: {survey.title}",
        "",
        f"Total Responses: {summary.total_responses}",
        f"Date Range: {start} - {end}",
    ]

    for position, question in enumerate(survey.questions, start=1):
        lines.append("")
        lines.append(f"Question {position}: {question.prompt}")
        lines.append(f"Type: {question.type}")

        analytics = tally(question, responses)
        if isinstance(analytics, TextAnalytics):
            lines.append(f"Text responses: {len(analytics.values)}")
            continue

        if analytics.entries:
            for entry in analytics.entries:
                lines.append(f"{entry.option}: {entry.count} ({entry.percentage:.1f}%)")
        else:
            for option in question.options:
                lines.append(f"{option}: 0 (0.0%)")

    return "\n".join(lines) + "\n"


def export_csv(survey: Survey, responses: Sequence[SurveyResponse]) -> str:
    """Return every response as CSV, one column per question prompt."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Response ID", "Submitted At", "Fingerprint", *(q.prompt for q in survey.questions)])

    for response in responses:
        row = [response.id, response.submitted_at.isoformat(), response.fingerprint]
        for question in survey.questions:
            answer = response.answer_for(question.id)
            if answer is None:
                row.append("")
            elif isinstance(answer, str):
                row.append(answer)
            else:
                row.append(MULTI_VALUE_SEPARATOR.join(answer))
        writer.writerow(row)

    return buffer.getvalue()


def _format_day(moment) -> str:
    if moment is None:
        return NOT_AVAILABLE
    return moment.astimezone(timezone.utc).date().isoformat()


__all__ = [
    "build_report",
    "export_csv",
    "frequency_by_day",
    "summarize",
    "tally",
]
