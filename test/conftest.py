from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault(
    "SURVEYFLOW_STORAGE_PATH",
    str(Path(tempfile.gettempdir()) / "surveyflow-tests" / "surveyflow.json"),
)
os.environ.setdefault("SURVEYFLOW_BASE_URL", "http://surveys.test")

from surveyflow.API.survey_data_provider import SurveyDataProvider  # noqa: E402
from surveyflow.models.survey import Survey  # noqa: E402
from surveyflow.services.response_collector import ResponseCollector  # noqa: E402
from surveyflow.services.storage import InMemoryStorage  # noqa: E402
from surveyflow.services.template_store import SurveyTemplateStore  # noqa: E402


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def templates(storage: InMemoryStorage) -> SurveyTemplateStore:
    return SurveyTemplateStore(storage)


@pytest.fixture
def collector(storage: InMemoryStorage, templates: SurveyTemplateStore) -> ResponseCollector:
    return ResponseCollector(storage, templates)


@pytest.fixture
def provider(storage: InMemoryStorage) -> SurveyDataProvider:
    return SurveyDataProvider(storage=storage, base_url="http://surveys.test")


@pytest.fixture
def survey(templates: SurveyTemplateStore) -> Survey:
    return templates.create(
        {
            "title": "Customer Satisfaction Survey",
            "description": "Measure customer satisfaction with our services",
            "questions": [
                {"id": "q_rating", "type": "single", "prompt": "How was your visit?", "options": ["Good", "Okay", "Bad"]},
                {
                    "id": "q_topics",
                    "type": "multiple",
                    "prompt": "What did you like?",
                    "options": ["Staff", "Price", "Speed"],
                },
                {"id": "q_comment", "type": "text", "prompt": "Anything else?"},
            ],
        }
    )


@pytest.fixture
def complete_answers() -> dict[str, object]:
    return {"q_rating": "Good", "q_topics": ["Staff", "Speed"], "q_comment": "Friendly people"}
