from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Tuple

from surveyflow.core.config import settings
from surveyflow.core.errors import NotFoundError
from surveyflow.models.analysis import AnalyticsSummary, DayFrequency, QuestionAnalytics
from surveyflow.models.response import SurveyResponse
from surveyflow.models.survey import Survey, SurveyQuestion
from surveyflow.services import analytics
from surveyflow.services.fingerprint import derive_fingerprint
from surveyflow.services.link_generator import LinkGenerator
from surveyflow.services.response_collector import ResponseCollector
from surveyflow.services.storage import StoragePort, get_storage
from surveyflow.services.template_store import SurveyTemplateStore


class SurveyDataProvider:
    """Expose survey data through an interchangeable API layer.

    The Streamlit views talk to this class only; it wires the template store,
    the response collector and the analytics functions over one storage port.
    """

    def __init__(
        self,
        *,
        storage: StoragePort | None = None,
        base_url: str | None = None,
    ) -> None:
        self._storage = storage or get_storage()
        self.templates = SurveyTemplateStore(self._storage)
        self.collector = ResponseCollector(self._storage, self.templates)
        self.links = LinkGenerator(self._storage, self.templates, base_url=base_url or settings.base_url)

    @property
    def storage(self) -> StoragePort:
        return self._storage

    def get_survey(self, survey_id: str) -> Survey:
        return self.templates.get(survey_id)

    def get_responses(self, survey_id: str) -> List[SurveyResponse]:
        return self.collector.responses(survey_id)

    def submit_response(
        self,
        survey_id: str,
        client_signature: str,
        answers: Mapping[str, Any],
        *,
        now: datetime | None = None,
    ) -> SurveyResponse:
        """Submit answers on behalf of an anonymous visitor identified by ``client_signature``."""

        fingerprint = derive_fingerprint(client_signature, now)
        return self.collector.submit(survey_id, fingerprint, answers)

    def has_responded(self, survey_id: str, client_signature: str, *, now: datetime | None = None) -> bool:
        return self.collector.has_responded(survey_id, derive_fingerprint(client_signature, now))

    def get_question_analytics(self, survey_id: str, question_id: str) -> Tuple[SurveyQuestion, QuestionAnalytics]:
        survey = self.get_survey(survey_id)
        question = survey.question(question_id)
        if question is None:
            raise NotFoundError(f"Question {question_id} not found in survey {survey_id}")
        return question, analytics.tally(question, self.get_responses(survey_id))

    def get_summary(self, survey_id: str) -> AnalyticsSummary:
        return analytics.summarize(self.get_survey(survey_id), self.get_responses(survey_id))

    def get_timeline(self, survey_id: str) -> List[DayFrequency]:
        return analytics.frequency_by_day(self.get_responses(survey_id))

    def get_report(self, survey_id: str) -> str:
        return analytics.build_report(self.get_survey(survey_id), self.get_responses(survey_id))

    def get_csv(self, survey_id: str) -> str:
        return analytics.export_csv(self.get_survey(survey_id), self.get_responses(survey_id))
