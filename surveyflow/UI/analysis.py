from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st

from surveyflow.API.survey_data_provider import SurveyDataProvider
from surveyflow.core.errors import NotFoundError
from surveyflow.models.analysis import TextAnalytics
from surveyflow.models.response import SurveyResponse
from surveyflow.models.survey import QUESTION_TYPE_LABELS, Survey
from surveyflow.services import analytics
from surveyflow.services.charts import ChartData, ChartType, SurveyChartBuilder

from . import state

_COLORS = ["#3B82F6", "#8B5CF6", "#10B981", "#F59E0B", "#EF4444", "#6366F1"]
_MAX_TEXT_SAMPLES = 5


def render_analytics(provider: SurveyDataProvider) -> None:
    """Render overview, responses and report tabs for the selected survey."""

    st.button("Back to Dashboard", on_click=state.set_view, args=("dashboard",))

    survey_id = state.get_selected_survey()
    if survey_id is None:
        st.info("Select a survey on the dashboard to see its analytics.")
        return

    try:
        survey = provider.get_survey(survey_id)
    except NotFoundError:
        st.error("This survey no longer exists.")
        return

    responses = provider.get_responses(survey_id)
    summary = analytics.summarize(survey, responses)

    st.header(survey.title)
    if survey.description:
        st.caption(survey.description)

    total_col, questions_col, daily_col = st.columns(3)
    total_col.metric("Total Responses", summary.total_responses)
    questions_col.metric("Questions", summary.total_questions)
    daily_col.metric("Avg. Daily Responses", summary.average_daily_responses)

    overview_tab, responses_tab, reports_tab = st.tabs(["Overview", "Responses", "Reports"])
    builder = SurveyChartBuilder(provider)
    with overview_tab:
        _render_overview(builder, survey, responses)
    with responses_tab:
        _render_responses(survey, responses)
    with reports_tab:
        _render_reports(builder, survey, responses)


def _render_overview(builder: SurveyChartBuilder, survey: Survey, responses: list[SurveyResponse]) -> None:
    if not responses:
        st.info("No responses have been recorded for this survey yet.")
        return

    _plot(builder.response_timeline(survey.id), key=f"timeline_overview_{survey.id}")

    st.subheader("Question Analysis")
    for position, question in enumerate(survey.questions, start=1):
        st.markdown(f"**Question {position}: {question.prompt}**")
        st.caption(QUESTION_TYPE_LABELS[question.type])

        if not question.is_choice:
            result = analytics.tally(question, responses)
            if isinstance(result, TextAnalytics):
                st.write(f"{len(result.values)} text responses")
                for value in result.values[:_MAX_TEXT_SAMPLES]:
                    st.markdown(f"> {value}")
            continue

        chart = builder.question_chart(survey.id, question.id)
        if chart.is_empty:
            st.write("No answers yet.")
            continue
        _plot(chart, key=f"question_{question.id}")
        st.table(
            [
                {"Option": label, "Count": int(value), "Share": f"{chart.metadata.get(f'pct:{label}', 0.0)}%"}
                for label, value in chart.to_series()
            ]
        )


def _render_responses(survey: Survey, responses: list[SurveyResponse]) -> None:
    if not responses:
        st.info("No responses have been recorded for this survey yet.")
        return

    for response in reversed(responses):
        label = f"Response {response.id} · {response.submitted_at.strftime('%Y-%m-%d %H:%M')} UTC"
        with st.expander(label):
            for question in survey.questions:
                answer = response.answer_for(question.id)
                if isinstance(answer, list):
                    answer = analytics.MULTI_VALUE_SEPARATOR.join(answer)
                st.markdown(f"**{question.prompt}**")
                st.write(answer or "No answer")


def _render_reports(builder: SurveyChartBuilder, survey: Survey, responses: list[SurveyResponse]) -> None:
    report_col, csv_col = st.columns(2)
    with report_col:
        st.download_button(
            label="Download Full Report",
            data=analytics.build_report(survey, responses),
            file_name=f"{survey.title}_report.txt",
            mime="text/plain",
            use_container_width=True,
        )
    with csv_col:
        st.download_button(
            label="Export Responses (CSV)",
            data=analytics.export_csv(survey, responses),
            file_name=f"{survey.title}_responses.csv",
            mime="text/csv",
            use_container_width=True,
        )

    if responses:
        st.subheader("Response Timeline")
        _plot(builder.response_timeline(survey.id), key=f"timeline_reports_{survey.id}")


def _plot(chart: ChartData, *, key: str) -> None:
    if chart.chart_type == ChartType.PIE:
        figure = go.Figure(
            data=go.Pie(labels=list(chart.labels), values=list(chart.values), marker={"colors": _COLORS})
        )
    elif chart.chart_type == ChartType.LINE:
        figure = go.Figure(
            data=go.Scatter(x=list(chart.labels), y=list(chart.values), mode="lines+markers", line={"color": _COLORS[0]})
        )
    else:
        figure = go.Figure(data=go.Bar(x=list(chart.labels), y=list(chart.values), marker_color=_COLORS[1]))

    figure.update_layout(title=chart.title, height=300, margin={"t": 40, "b": 20, "l": 20, "r": 20})
    st.plotly_chart(figure, use_container_width=True, key=key)
