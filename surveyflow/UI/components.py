from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable

import streamlit as st

from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.core.config import settings
from surveyflow.core.errors import SurveyFlowError
from surveyflow.models.response import User
from surveyflow.models.survey import QUESTION_TYPE_LABELS, Survey, new_id
from surveyflow.services.auth import SessionStore, StubAuthenticator

from . import state

logger = logging.getLogger(__name__)

_STATUS_BADGES = {"draft": "📝 draft", "active": "🟢 active", "closed": "🔒 closed"}


@st.cache_resource
def get_provider() -> SurveyDataProvider:
    """Return the shared data provider backed by the configured storage file."""

    return SurveyDataProvider()


def get_session() -> SessionStore:
    return SessionStore(state.SessionStateStorage())


def client_signature() -> str:
    """Return the browser signature used to derive the response fingerprint."""

    headers = st.context.headers
    return headers.get("User-Agent") or "unknown-client"


def render_login() -> None:
    """Display the sign-in card shown before the admin portal."""

    st.title("SurveyFlow")
    st.caption("Admin Portal")
    st.write("Create, distribute and analyse surveys.")

    if st.button("Sign in", type="primary", use_container_width=True):
        user = get_session().login(StubAuthenticator(settings.admin))
        st.toast(f"Welcome, {user.name}")
        st.rerun()


def render_header(user: User) -> None:
    title_col, user_col = st.columns([3, 1])
    with title_col:
        st.title("SurveyFlow")
    with user_col:
        st.caption(f"{user.name}\n\n{user.email}")
        if st.button("Sign out"):
            get_session().logout()
            st.rerun()


def render_dashboard(provider: SurveyDataProvider) -> None:
    """List survey templates with their headline numbers and actions."""

    surveys = provider.templates.list()

    total_col, active_col, responses_col = st.columns(3)
    total_col.metric("Total Surveys", len(surveys))
    active_col.metric("Active Surveys", sum(1 for survey in surveys if survey.status == "active"))
    responses_col.metric("Total Responses", sum(survey.response_count for survey in surveys))

    create_col, links_col = st.columns(2)
    with create_col:
        st.button("Create New Survey", type="primary", on_click=state.set_view, args=("create",))
    with links_col:
        st.button("Generate Survey Link", on_click=state.set_view, args=("generate",))

    st.subheader("Survey Templates")
    if not surveys:
        st.info("No surveys yet. Create your first survey template to get started.")
        return

    for survey in surveys:
        _render_survey_card(provider, survey)


def _render_survey_card(provider: SurveyDataProvider, survey: Survey) -> None:
    with st.container(border=True):
        heading_col, status_col = st.columns([4, 1])
        with heading_col:
            st.markdown(f"**{survey.title}**")
            if survey.description:
                st.caption(survey.description)
        with status_col:
            st.write(_STATUS_BADGES.get(survey.status, survey.status))

        st.caption(
            f"{len(survey.questions)} questions · {survey.response_count} responses · "
            f"created {survey.created_at.isoformat()} · modified {survey.last_modified.isoformat()}"
        )
        st.code(provider.links.public_url(survey.id), language=None)

        view_col, status_action_col, delete_col = st.columns(3)
        with view_col:
            st.button("View analytics", key=f"view_{survey.id}", on_click=state.open_analytics, args=(survey.id,))
        with status_action_col:
            if survey.status == "active":
                label, target = "Close survey", "closed"
            else:
                label, target = "Publish", "active"
            if st.button(label, key=f"status_{survey.id}"):
                _run_action(lambda: provider.templates.set_status(survey.id, target))
                st.rerun()
        with delete_col:
            if st.button("Delete", key=f"delete_{survey.id}"):
                provider.templates.delete(survey.id)
                st.toast("Survey and all associated data have been permanently deleted.")
                st.rerun()


def render_creator(provider: SurveyDataProvider) -> None:
    """Survey template authoring form."""

    st.button("Back to Dashboard", on_click=_leave_creator)
    st.header("Create New Survey")

    title = st.text_input("Survey Title", key="creator_title", placeholder="Enter survey title...")
    description = st.text_area("Description", key="creator_description", placeholder="Describe your survey...")

    st.subheader("Add Question")
    question_type = st.selectbox(
        "Question Type",
        options=list(QUESTION_TYPE_LABELS),
        format_func=QUESTION_TYPE_LABELS.get,
        key="creator_question_type",
    )
    prompt = st.text_input("Question", key="creator_prompt", placeholder="Enter your question...")

    options: list[str] = []
    if question_type != "text":
        for index in range(state.get_option_count()):
            options.append(st.text_input(f"Option {index + 1}", key=f"creator_option_{index}"))
        add_col, remove_col = st.columns(2)
        with add_col:
            st.button("Add Option", on_click=lambda: state.set_option_count(state.get_option_count() + 1))
        with remove_col:
            st.button(
                "Remove Option",
                disabled=state.get_option_count() <= 1,
                on_click=lambda: state.set_option_count(state.get_option_count() - 1),
            )

    if st.button("Add Question"):
        if not prompt.strip():
            st.warning("Enter the question text first.")
        else:
            state.add_draft_question({"id": new_id(), "type": question_type, "prompt": prompt, "options": options})
            st.rerun()

    questions = state.get_draft_questions()
    st.subheader(f"Questions ({len(questions)})")
    for position, question in enumerate(questions, start=1):
        text_col, remove_col = st.columns([5, 1])
        with text_col:
            st.markdown(f"**{position}. {question['prompt']}**")
            st.caption(QUESTION_TYPE_LABELS[question["type"]])
            cleaned_options = [option for option in question["options"] if option.strip()]
            if question["type"] != "text" and cleaned_options:
                st.write(", ".join(cleaned_options))
        with remove_col:
            st.button("Remove", key=f"creator_remove_{question['id']}", on_click=state.remove_draft_question, args=(question["id"],))

    if st.button("Save Survey Template", type="primary"):
        draft = {"title": title, "description": description, "questions": questions}
        survey = _run_action(lambda: provider.templates.create(draft))
        if survey is not None:
            state.reset_creator()
            state.set_view("dashboard")
            st.toast("Your survey template has been created successfully.")
            st.rerun()


def _leave_creator() -> None:
    state.reset_creator()
    state.set_view("dashboard")


def render_link_generator(provider: SurveyDataProvider) -> None:
    """Create shareable links with a start and end date."""

    st.button("Back to Dashboard", on_click=state.set_view, args=("dashboard",))
    st.header("Create Survey Link")

    surveys = provider.templates.list()
    if not surveys:
        st.info("Create a survey template before generating links.")
        return

    titles = {survey.id: survey.title for survey in surveys}
    survey_id = st.selectbox("Select Survey Template", options=list(titles), format_func=titles.get)
    start_col, end_col = st.columns(2)
    valid_from = start_col.date_input("Start Date", value=date.today())
    valid_to = end_col.date_input("End Date", value=date.today() + timedelta(days=30))

    if st.button("Generate Survey Link", type="primary"):
        link = _run_action(lambda: provider.links.generate(survey_id, valid_from, valid_to))
        if link is not None:
            st.success("Survey link has been created successfully.")

    st.subheader("Generated Links")
    links = provider.links.list()
    if not links:
        st.info("No survey links generated yet.")
        return

    for link in reversed(links):
        with st.container(border=True):
            st.markdown(f"**{link.survey_title}** · {link.status}")
            st.caption(f"Active: {link.valid_from.isoformat()} to {link.valid_to.isoformat()}")
            st.code(link.link, language=None)
            if link.status == "active" and st.button("Deactivate", key=f"deactivate_{link.id}"):
                _run_action(lambda link_id=link.id: provider.links.deactivate(link_id))
                st.rerun()


def _run_action(action: Callable[[], object]):
    """Run a service call and surface domain errors as messages."""

    try:
        return action()
    except SurveyFlowError as exc:
        logger.info("Action rejected: %s", exc)
        st.error(str(exc))
        return None
