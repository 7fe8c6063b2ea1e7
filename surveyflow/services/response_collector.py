from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List

from surveyflow.core.errors import (
    DuplicateSubmission,
    IncompleteSubmission,
    SurveyClosedError,
    ValidationError,
)
from surveyflow.models.response import Answer, SurveyResponse, utc_now
from surveyflow.models.survey import Survey, SurveyQuestion, new_id
from surveyflow.services.locks import survey_lock
from surveyflow.services.storage import StoragePort, responses_key
from surveyflow.services.template_store import SurveyTemplateStore

logger = logging.getLogger(__name__)


class ResponseCollector:
    """Accept at most one response per survey and fingerprint."""

    def __init__(self, storage: StoragePort, templates: SurveyTemplateStore) -> None:
        if storage is None:
            raise ValueError("storage must be provided")
        if templates is None:
            raise ValueError("templates must be provided")

        self._storage = storage
        self._templates = templates

    def submit(self, survey_id: str, fingerprint: str, answers: Mapping[str, Any]) -> SurveyResponse:
        """Store a complete set of answers and bump the survey's response count.

        Raises :class:`NotFoundError` for unknown surveys, :class:`SurveyClosedError`
        once the survey is closed, :class:`IncompleteSubmission` when a question is
        left empty and :class:`DuplicateSubmission` when ``fingerprint`` already
        answered. Nothing is written when any of these is raised.
        """

        fingerprint = (fingerprint or "").strip()
        if not fingerprint:
            raise ValueError("fingerprint must be a non-empty string")

        survey = self._templates.get(survey_id)
        _ensure_open(survey)

        normalized = _normalize_answers(survey, answers or {})

        # Deletes take the same lock, so the survey is re-read before anything is written.
        with survey_lock(survey_id):
            _ensure_open(self._templates.get(survey_id))

            stored = self._load_raw(survey_id)
            if any(raw.get("fingerprint") == fingerprint for raw in stored):
                logger.warning("Rejected duplicate submission for survey %s", survey_id)
                raise DuplicateSubmission(survey_id)

            response = SurveyResponse(
                id=new_id(),
                survey_id=survey_id,
                fingerprint=fingerprint,
                submitted_at=utc_now(),
                answers=normalized,
            )
            stored.append(response.model_dump(mode="json"))
            self._storage.set(responses_key(survey_id), stored)
            self._templates.increment_response_count(survey_id)

        logger.info("Accepted response %s for survey %s", response.id, survey_id)
        return response

    def responses(self, survey_id: str) -> List[SurveyResponse]:
        """Return the stored responses of a survey in submission order."""

        return [SurveyResponse.model_validate(raw) for raw in self._load_raw(survey_id)]

    def has_responded(self, survey_id: str, fingerprint: str) -> bool:
        return any(raw.get("fingerprint") == fingerprint for raw in self._load_raw(survey_id))

    def _load_raw(self, survey_id: str) -> List[Dict[str, Any]]:
        return list(self._storage.get(responses_key(survey_id)) or [])


def _ensure_open(survey: Survey) -> None:
    if survey.status == "closed":
        raise SurveyClosedError(f"Survey '{survey.title}' is closed and no longer accepts responses.")


def _normalize_answers(survey: Survey, answers: Mapping[str, Any]) -> Dict[str, Answer]:
    normalized: Dict[str, Answer] = {}
    missing: List[str] = []
    problems: List[str] = []

    for question in survey.questions:
        raw = answers.get(question.id)
        if question.type == "multiple":
            selections = _clean_selections(raw)
            if not selections:
                missing.append(question.id)
                continue
            unknown = [value for value in selections if value not in question.options]
            if unknown:
                problems.append(_unknown_option_message(question, unknown))
                continue
            # Selections are a set; store them in the question's option order.
            normalized[question.id] = [option for option in question.options if option in selections]
            continue

        if raw is None:
            missing.append(question.id)
            continue
        if not isinstance(raw, str):
            problems.append(f"'{question.prompt}' expects a single answer")
            continue
        text = raw.strip()
        if not text:
            missing.append(question.id)
            continue
        if question.type == "single" and text not in question.options:
            problems.append(_unknown_option_message(question, [text]))
            continue
        normalized[question.id] = text

    if missing:
        raise IncompleteSubmission(missing)
    if problems:
        raise ValidationError("Invalid answers: " + "; ".join(problems), problems=problems)

    return normalized


def _clean_selections(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    elif not isinstance(raw, Iterable):
        raw = [raw]

    selections: List[str] = []
    for value in raw:
        text = str(value).strip()
        if text and text not in selections:
            selections.append(text)
    return selections


def _unknown_option_message(question: SurveyQuestion, values: List[str]) -> str:
    joined = ", ".join(values)
    return f"'{question.prompt}' has no option {joined}"


__all__ = ["ResponseCollector"]
