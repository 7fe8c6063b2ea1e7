from __future__ import annotations

import logging
import threading
from typing import Any, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from surveyflow.core.errors import NotFoundError, ValidationError
from surveyflow.models.response import utc_now
from surveyflow.models.survey import Survey, SurveyDraft, SurveyStatus, new_id
from surveyflow.services.locks import forget_survey_lock, survey_lock
from surveyflow.services.storage import SURVEYS_KEY, StoragePort, responses_key

logger = logging.getLogger(__name__)


class SurveyTemplateStore:
    """CRUD over survey templates kept under a single storage key."""

    def __init__(self, storage: StoragePort) -> None:
        if storage is None:
            raise ValueError("storage must be provided")

        self._storage = storage
        # Every mutation rewrites the whole list, so read-modify-write cycles are serialized.
        self._lock = threading.RLock()

    def create(self, draft: SurveyDraft | Mapping[str, Any]) -> Survey:
        """Validate ``draft`` and store it as a new survey in draft status."""

        if not isinstance(draft, SurveyDraft):
            try:
                draft = SurveyDraft.model_validate(draft)
            except PydanticValidationError as exc:
                raise ValidationError.from_pydantic(exc, prefix="Invalid survey") from exc

        today = utc_now().date()
        try:
            survey = Survey(
                **draft.model_dump(),
                id=new_id(),
                response_count=0,
                status="draft",
                created_at=today,
                last_modified=today,
            )
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, prefix="Invalid survey") from exc

        with self._lock:
            surveys = self._load_all_unlocked()
            surveys.append(survey)
            self._save_all_unlocked(surveys)

        logger.info("Created survey %s with %d questions", survey.id, len(survey.questions))
        return survey

    def list(self) -> List[Survey]:
        """Return every stored survey in insertion order."""

        with self._lock:
            return self._load_all_unlocked()

    def get(self, survey_id: str) -> Survey:
        """Return a single survey or raise :class:`NotFoundError`."""

        for survey in self.list():
            if survey.id == survey_id:
                return survey
        raise NotFoundError(f"Survey not found: {survey_id}")

    def exists(self, survey_id: str) -> bool:
        return any(survey.id == survey_id for survey in self.list())

    def delete(self, survey_id: str) -> None:
        """Remove a survey and its responses. Unknown ids are ignored."""

        # Submissions hold the survey lock across their existence check and write.
        with survey_lock(survey_id):
            with self._lock:
                surveys = self._load_all_unlocked()
                remaining = [survey for survey in surveys if survey.id != survey_id]
                if len(remaining) != len(surveys):
                    self._save_all_unlocked(remaining)
                    logger.info("Deleted survey %s", survey_id)
                self._storage.remove(responses_key(survey_id))
        forget_survey_lock(survey_id)

    def increment_response_count(self, survey_id: str) -> None:
        """Add one to the survey's response counter."""

        def _bump(survey: Survey) -> None:
            survey.response_count += 1

        self._update(survey_id, _bump)

    def set_status(self, survey_id: str, status: SurveyStatus) -> Survey:
        """Publish, close or reopen a survey."""

        if status not in ("draft", "active", "closed"):
            raise ValidationError(f"Unknown survey status: {status}")

        def _apply(survey: Survey) -> None:
            survey.status = status

        updated = self._update(survey_id, _apply)
        logger.info("Survey %s is now %s", survey_id, status)
        return updated

    def _update(self, survey_id: str, mutate) -> Survey:
        with self._lock:
            surveys = self._load_all_unlocked()
            for survey in surveys:
                if survey.id == survey_id:
                    mutate(survey)
                    survey.last_modified = utc_now().date()
                    self._save_all_unlocked(surveys)
                    return survey
        raise NotFoundError(f"Survey not found: {survey_id}")

    def _load_all_unlocked(self) -> List[Survey]:
        raw_surveys = self._storage.get(SURVEYS_KEY) or []
        return [Survey.model_validate(raw) for raw in raw_surveys]

    def _save_all_unlocked(self, surveys: List[Survey]) -> None:
        self._storage.set(SURVEYS_KEY, [survey.model_dump(mode="json") for survey in surveys])


__all__ = ["SurveyTemplateStore"]
