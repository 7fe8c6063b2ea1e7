from __future__ import annotations

from typing import Any, Dict, List, Optional

import streamlit as st

VIEW_KEY = "current_view"
SELECTED_SURVEY_KEY = "selected_survey_id"
DRAFT_QUESTIONS_KEY = "draft_questions"
DRAFT_OPTION_COUNT_KEY = "draft_option_count"
SUBMITTED_KEY = "submitted_survey_ids"

VIEWS = ("dashboard", "create", "generate", "analytics")


def ensure_defaults() -> None:
    """Ensure the expected session state keys exist with sensible defaults."""

    st.session_state.setdefault(VIEW_KEY, "dashboard")
    st.session_state.setdefault(SELECTED_SURVEY_KEY, None)
    st.session_state.setdefault(DRAFT_QUESTIONS_KEY, [])
    st.session_state.setdefault(DRAFT_OPTION_COUNT_KEY, 1)
    st.session_state.setdefault(SUBMITTED_KEY, [])


def get_view() -> str:
    """Return the admin view currently on screen."""

    view = st.session_state.get(VIEW_KEY, "dashboard")
    return view if view in VIEWS else "dashboard"


def set_view(view: str) -> None:
    """Switch the admin portal to another view."""

    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")
    st.session_state[VIEW_KEY] = view


def get_selected_survey() -> Optional[str]:
    return st.session_state.get(SELECTED_SURVEY_KEY)


def open_analytics(survey_id: str) -> None:
    """Select a survey and show its analytics."""

    st.session_state[SELECTED_SURVEY_KEY] = survey_id
    set_view("analytics")


def get_draft_questions() -> List[Dict[str, Any]]:
    """Return questions added in the survey creator but not yet saved."""

    return st.session_state[DRAFT_QUESTIONS_KEY]


def add_draft_question(question: Dict[str, Any]) -> None:
    st.session_state[DRAFT_QUESTIONS_KEY].append(question)


def remove_draft_question(question_id: str) -> None:
    st.session_state[DRAFT_QUESTIONS_KEY] = [
        question for question in get_draft_questions() if question["id"] != question_id
    ]


def get_option_count() -> int:
    return int(st.session_state[DRAFT_OPTION_COUNT_KEY])


def set_option_count(value: int) -> None:
    st.session_state[DRAFT_OPTION_COUNT_KEY] = max(1, value)


def reset_creator() -> None:
    """Forget the creator form, including widget values."""

    st.session_state[DRAFT_QUESTIONS_KEY] = []
    st.session_state[DRAFT_OPTION_COUNT_KEY] = 1
    for key in [name for name in st.session_state.keys() if str(name).startswith("creator_")]:
        del st.session_state[key]


class SessionStateStorage:
    """Storage port over ``st.session_state`` so sign-in stays per browser session."""

    _PREFIX = "storage_"

    def get(self, key: str) -> Optional[Any]:
        return st.session_state.get(f"{self._PREFIX}{key}")

    def set(self, key: str, value: Any) -> None:
        st.session_state[f"{self._PREFIX}{key}"] = value

    def remove(self, key: str) -> None:
        st.session_state.pop(f"{self._PREFIX}{key}", None)


def mark_submitted(survey_id: str) -> None:
    """Remember that this browser session just answered a survey."""

    submitted = st.session_state[SUBMITTED_KEY]
    if survey_id not in submitted:
        submitted.append(survey_id)


def has_submitted(survey_id: str) -> bool:
    return survey_id in st.session_state[SUBMITTED_KEY]
