from __future__ import annotations

import threading

import pytest

from surveyflow.core.errors import (
    DuplicateSubmission,
    IncompleteSubmission,
    NotFoundError,
    SurveyClosedError,
    ValidationError,
)
from surveyflow.services import response_collector
from surveyflow.services.locks import tracked_surveys
from surveyflow.services.storage import responses_key


def test_submit_stores_response_and_bumps_count(collector, templates, survey, complete_answers) -> None:
    response = collector.submit(survey.id, "f1", complete_answers)

    assert response.survey_id == survey.id
    assert response.fingerprint == "f1"
    assert response.answers == {"q_rating": "Good", "q_topics": ["Staff", "Speed"], "q_comment": "Friendly people"}
    assert response.submitted_at.tzinfo is not None
    assert collector.responses(survey.id) == [response]
    assert templates.get(survey.id).response_count == 1


def test_duplicate_fingerprint_is_rejected(collector, templates, survey, complete_answers) -> None:
    collector.submit(survey.id, "f1", complete_answers)

    with pytest.raises(DuplicateSubmission):
        collector.submit(survey.id, "f1", complete_answers)

    collector.submit(survey.id, "f2", complete_answers)

    assert [response.fingerprint for response in collector.responses(survey.id)] == ["f1", "f2"]
    assert templates.get(survey.id).response_count == 2


def test_same_fingerprint_may_answer_different_surveys(collector, templates, survey, complete_answers) -> None:
    other = templates.create({"title": "Other", "questions": [{"type": "text", "prompt": "Hi?"}]})

    collector.submit(survey.id, "f1", complete_answers)
    collector.submit(other.id, "f1", {other.questions[0].id: "Hello"})

    assert collector.has_responded(survey.id, "f1")
    assert collector.has_responded(other.id, "f1")
    assert not collector.has_responded(other.id, "f2")


def test_missing_answers_raise_incomplete_without_saving(collector, templates, survey, storage) -> None:
    with pytest.raises(IncompleteSubmission) as exc_info:
        collector.submit(survey.id, "f1", {"q_rating": "Good", "q_topics": [], "q_comment": "   "})

    assert exc_info.value.missing == ("q_topics", "q_comment")
    assert storage.get(responses_key(survey.id)) is None
    assert templates.get(survey.id).response_count == 0


def test_unknown_option_is_a_validation_error(collector, survey, complete_answers) -> None:
    answers = dict(complete_answers, q_rating="Excellent")

    with pytest.raises(ValidationError):
        collector.submit(survey.id, "f1", answers)

    assert collector.responses(survey.id) == []


def test_single_choice_rejects_multiple_values(collector, survey, complete_answers) -> None:
    answers = dict(complete_answers, q_rating=["Good", "Bad"])

    with pytest.raises(ValidationError):
        collector.submit(survey.id, "f1", answers)


def test_multiple_choice_selections_are_deduplicated_in_option_order(collector, survey, complete_answers) -> None:
    answers = dict(complete_answers, q_topics={"Speed", "Staff"})

    response = collector.submit(survey.id, "f1", answers)

    assert response.answers["q_topics"] == ["Staff", "Speed"]


def test_answers_for_unknown_questions_are_ignored(collector, survey, complete_answers) -> None:
    response = collector.submit(survey.id, "f1", dict(complete_answers, q_extra="noise"))

    assert "q_extra" not in response.answers


def test_unknown_survey_raises_not_found(collector, complete_answers) -> None:
    with pytest.raises(NotFoundError):
        collector.submit("missing", "f1", complete_answers)


def test_closed_survey_rejects_submissions(collector, templates, survey, complete_answers) -> None:
    templates.set_status(survey.id, "closed")

    with pytest.raises(SurveyClosedError):
        collector.submit(survey.id, "f1", complete_answers)


def test_blank_fingerprint_is_rejected(collector, survey, complete_answers) -> None:
    with pytest.raises(ValueError):
        collector.submit(survey.id, "  ", complete_answers)


def test_concurrent_duplicate_submissions_store_one_response(collector, templates, survey, complete_answers) -> None:
    attempts = 8
    barrier = threading.Barrier(attempts)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def _submit() -> None:
        barrier.wait()
        try:
            collector.submit(survey.id, "same-browser", complete_answers)
            outcome = "ok"
        except DuplicateSubmission:
            outcome = "duplicate"
        with outcomes_lock:
            outcomes.append(outcome)

    workers = [threading.Thread(target=_submit) for _ in range(attempts)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("duplicate") == attempts - 1
    assert len(collector.responses(survey.id)) == 1
    assert templates.get(survey.id).response_count == 1


def test_survey_deleted_during_submit_leaves_no_responses(
    collector, templates, survey, storage, complete_answers, monkeypatch
) -> None:
    normalize = response_collector._normalize_answers

    def delete_then_normalize(current, answers):
        templates.delete(current.id)
        return normalize(current, answers)

    monkeypatch.setattr(response_collector, "_normalize_answers", delete_then_normalize)

    with pytest.raises(NotFoundError):
        collector.submit(survey.id, "f1", complete_answers)

    assert storage.get(responses_key(survey.id)) is None
    assert templates.list() == []


def test_survey_closed_during_submit_is_rejected(collector, templates, survey, storage, complete_answers, monkeypatch) -> None:
    normalize = response_collector._normalize_answers

    def close_then_normalize(current, answers):
        templates.set_status(current.id, "closed")
        return normalize(current, answers)

    monkeypatch.setattr(response_collector, "_normalize_answers", close_then_normalize)

    with pytest.raises(SurveyClosedError):
        collector.submit(survey.id, "f1", complete_answers)

    assert storage.get(responses_key(survey.id)) is None
    assert templates.get(survey.id).response_count == 0


def test_deleting_a_survey_drops_its_submit_lock(collector, templates, survey, complete_answers) -> None:
    collector.submit(survey.id, "f1", complete_answers)
    assert survey.id in tracked_surveys()

    templates.delete(survey.id)

    assert survey.id not in tracked_surveys()
