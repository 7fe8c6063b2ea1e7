from __future__ import annotations

import streamlit as st

from surveyflow.UI import analysis, components, public_survey, state


def run_app() -> None:
    """Entry point for the Streamlit-based survey portal.

    A ``survey`` query parameter opens the public response form; everything
    else goes through the admin portal behind the sign-in screen.
    """

    st.set_page_config(page_title="SurveyFlow", page_icon="📝", layout="wide")
    state.ensure_defaults()
    provider = components.get_provider()

    survey_id = st.query_params.get("survey")
    if survey_id:
        public_survey.render_public_survey(provider, survey_id)
        return

    user = components.get_session().current_user()
    if user is None:
        components.render_login()
        return

    components.render_header(user)

    view = state.get_view()
    if view == "create":
        components.render_creator(provider)
    elif view == "generate":
        components.render_link_generator(provider)
    elif view == "analytics":
        analysis.render_analytics(provider)
    else:
        components.render_dashboard(provider)
