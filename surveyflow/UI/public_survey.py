from __future__ import annotations

import math
from typing import Any, Dict

import streamlit as st

from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.core.errors import (
    DuplicateSubmission,
    IncompleteSubmission,
    NotFoundError,
    SurveyFlowError,
)
from surveyflow.models.survey import Survey, SurveyQuestion

from . import state
from .components import client_signature

_FORM_KEY = "public_survey_form"


def render_public_survey(provider: SurveyDataProvider, survey_id: str) -> None:
    """Render the anonymous response form for one survey."""

    try:
        survey = provider.get_survey(survey_id)
    except NotFoundError:
        st.error("Survey Not Found")
        st.write("The survey you're looking for doesn't exist or has been removed.")
        return

    if state.has_submitted(survey_id):
        st.success("Thank You!")
        st.write("Your response has been submitted successfully.")
        return

    if provider.has_responded(survey_id, client_signature()):
        st.warning("Already Responded")
        st.write("You have already submitted a response to this survey. Thank you for your participation!")
        return

    if survey.status == "closed":
        st.info("This survey is closed and no longer accepts responses.")
        return

    st.title(survey.title)
    if survey.description:
        st.write(survey.description)
    st.caption(
        f"{len(survey.questions)} questions · Estimated time: {math.ceil(len(survey.questions) * 1.5)} minutes"
    )

    with st.form(_FORM_KEY):
        answers = {question.id: _render_answer_widget(question) for question in survey.questions}
        submitted = st.form_submit_button("Submit Survey", type="primary")

    if submitted:
        _submit(provider, survey, answers)


def _render_answer_widget(question: SurveyQuestion) -> Any:
    label = question.prompt
    key = f"public_answer_{question.id}"
    if question.type == "text":
        return st.text_area(label, key=key, placeholder="Enter your response...")
    if question.type == "single":
        return st.radio(label, options=question.options, index=None, key=key)
    return st.multiselect(label, options=question.options, key=key)


def _submit(provider: SurveyDataProvider, survey: Survey, answers: Dict[str, Any]) -> None:
    try:
        provider.submit_response(survey.id, client_signature(), answers)
    except IncompleteSubmission:
        st.error("Please answer all questions before submitting.")
        return
    except DuplicateSubmission as exc:
        st.warning(str(exc))
        return
    except SurveyFlowError as exc:
        st.error(str(exc))
        return

    state.mark_submitted(survey.id)
    st.rerun()
