from __future__ import annotations

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.core.config import settings
from surveyflow.models.survey import Survey
from surveyflow.services.storage import JsonFileStorage

_TIMEOUT = 30
_QUESTIONS = [
    {"id": "q_rating", "type": "single", "prompt": "How was your visit?", "options": ["Good", "Okay", "Bad"]},
    {"id": "q_topics", "type": "multiple", "prompt": "What did you like?", "options": ["Staff", "Price", "Speed"]},
    {"id": "q_comment", "type": "text", "prompt": "Anything else?"},
]


def _dashboard_page(storage_path: str) -> None:
    from pathlib import Path

    from surveyflow.API.survey_data_provider import SurveyDataProvider
    from surveyflow.services.storage import JsonFileStorage
    from surveyflow.UI import components, state

    state.ensure_defaults()
    components.render_dashboard(SurveyDataProvider(storage=JsonFileStorage(Path(storage_path))))


def _creator_page(storage_path: str) -> None:
    from pathlib import Path

    from surveyflow.API.survey_data_provider import SurveyDataProvider
    from surveyflow.services.storage import JsonFileStorage
    from surveyflow.UI import components, state

    state.ensure_defaults()
    components.render_creator(SurveyDataProvider(storage=JsonFileStorage(Path(storage_path))))


def _analytics_page(storage_path: str) -> None:
    from pathlib import Path

    from surveyflow.API.survey_data_provider import SurveyDataProvider
    from surveyflow.services.storage import JsonFileStorage
    from surveyflow.UI import analysis, state

    state.ensure_defaults()
    analysis.render_analytics(SurveyDataProvider(storage=JsonFileStorage(Path(storage_path))))


def _portal() -> None:
    from surveyflow.UI import run_app

    run_app()


@pytest.fixture
def storage_path(tmp_path: Path) -> str:
    return str(tmp_path / "surveyflow.json")


@pytest.fixture
def file_provider(storage_path: str) -> SurveyDataProvider:
    return SurveyDataProvider(storage=JsonFileStorage(Path(storage_path)), base_url="http://surveys.test")


def _create_survey(provider: SurveyDataProvider) -> Survey:
    return provider.templates.create({"title": "Customer Satisfaction Survey", "questions": _QUESTIONS})


def _button(app: AppTest, label: str):
    return next(button for button in app.button if button.label == label)


def test_dashboard_lists_surveys(file_provider, storage_path) -> None:
    survey = _create_survey(file_provider)
    file_provider.templates.set_status(survey.id, "active")

    app = AppTest.from_function(_dashboard_page, args=(storage_path,), default_timeout=_TIMEOUT).run()

    assert not app.exception
    assert [metric.value for metric in app.metric] == ["1", "1", "0"]
    assert "Close survey" in [button.label for button in app.button]

    app.button(key=f"view_{survey.id}").click().run()

    assert app.session_state["current_view"] == "analytics"
    assert app.session_state["selected_survey_id"] == survey.id


def test_dashboard_without_surveys(storage_path) -> None:
    app = AppTest.from_function(_dashboard_page, args=(storage_path,), default_timeout=_TIMEOUT).run()

    assert not app.exception
    assert app.info[0].value.startswith("No surveys yet")


def test_creator_saves_a_template(file_provider, storage_path) -> None:
    app = AppTest.from_function(_creator_page, args=(storage_path,), default_timeout=_TIMEOUT).run()
    assert not app.exception

    app.text_input(key="creator_prompt").input("What should we change?")
    _button(app, "Add Question").click().run()
    assert not app.exception
    assert len(app.session_state["draft_questions"]) == 1

    app.text_input(key="creator_title").input("Employee Feedback Form")
    _button(app, "Save Survey Template").click().run()

    assert not app.exception
    [saved] = file_provider.templates.list()
    assert saved.title == "Employee Feedback Form"
    assert [question.prompt for question in saved.questions] == ["What should we change?"]
    assert app.session_state["draft_questions"] == []


def test_creator_reports_missing_title(file_provider, storage_path) -> None:
    app = AppTest.from_function(_creator_page, args=(storage_path,), default_timeout=_TIMEOUT).run()

    app.text_input(key="creator_prompt").input("What should we change?")
    _button(app, "Add Question").click().run()
    _button(app, "Save Survey Template").click().run()

    assert not app.exception
    assert app.error
    assert file_provider.templates.list() == []


def test_analytics_without_responses(file_provider, storage_path) -> None:
    survey = _create_survey(file_provider)

    app = AppTest.from_function(_analytics_page, args=(storage_path,), default_timeout=_TIMEOUT)
    app.session_state["selected_survey_id"] = survey.id
    app.run()

    assert not app.exception
    assert app.header[0].value == "Customer Satisfaction Survey"
    assert len(app.get("plotly_chart")) == 0


def test_analytics_with_responses_renders_every_chart(file_provider, storage_path, complete_answers) -> None:
    survey = _create_survey(file_provider)
    file_provider.submit_response(survey.id, "Mozilla/5.0 (Macintosh)", complete_answers)
    file_provider.submit_response(
        survey.id, "Mozilla/5.0 (Windows)", {"q_rating": "Bad", "q_topics": ["Price"], "q_comment": "Slow"}
    )

    app = AppTest.from_function(_analytics_page, args=(storage_path,), default_timeout=_TIMEOUT)
    app.session_state["selected_survey_id"] = survey.id
    app.run()

    assert not app.exception
    assert app.metric[0].value == "2"
    # Timeline on the overview and reports tabs plus one chart per choice question.
    assert len(app.get("plotly_chart")) == 4


def test_analytics_for_deleted_survey(storage_path) -> None:
    app = AppTest.from_function(_analytics_page, args=(storage_path,), default_timeout=_TIMEOUT)
    app.session_state["selected_survey_id"] = "missing"
    app.run()

    assert not app.exception
    assert app.error[0].value == "This survey no longer exists."


def test_portal_asks_operator_to_sign_in() -> None:
    app = AppTest.from_function(_portal, default_timeout=_TIMEOUT).run()

    assert not app.exception
    assert "Sign in" in [button.label for button in app.button]


def test_public_form_accepts_a_response() -> None:
    provider = SurveyDataProvider(storage=JsonFileStorage(settings.storage_path))
    survey = _create_survey(provider)

    app = AppTest.from_function(_portal, default_timeout=_TIMEOUT)
    app.query_params["survey"] = survey.id
    app.run()

    assert not app.exception
    assert app.title[0].value == "Customer Satisfaction Survey"

    app.radio(key="public_answer_q_rating").set_value("Good")
    app.multiselect(key="public_answer_q_topics").set_value(["Staff", "Speed"])
    app.text_area(key="public_answer_q_comment").input("Friendly people")
    _button(app, "Submit Survey").click().run()

    assert not app.exception
    assert app.success[0].value == "Thank You!"
    [response] = provider.get_responses(survey.id)
    assert response.answers["q_topics"] == ["Staff", "Speed"]


def test_public_form_rejects_incomplete_answers() -> None:
    provider = SurveyDataProvider(storage=JsonFileStorage(settings.storage_path))
    survey = _create_survey(provider)

    app = AppTest.from_function(_portal, default_timeout=_TIMEOUT)
    app.query_params["survey"] = survey.id
    app.run()
    app.radio(key="public_answer_q_rating").set_value("Good")
    _button(app, "Submit Survey").click().run()

    assert not app.exception
    assert app.error[0].value == "Please answer all questions before submitting."
    assert provider.get_responses(survey.id) == []


def test_public_form_for_unknown_survey() -> None:
    app = AppTest.from_function(_portal, default_timeout=_TIMEOUT)
    app.query_params["survey"] = "missing"
    app.run()

    assert not app.exception
    assert app.error[0].value == "Survey Not Found"
