"""Chart series derived from an assembled report."""

from __future__ import annotations

from legal_savings.schemas import ChartSeries, Report

TOPIC_CHART_TITLE = "Distribution of Legal Topics"
TIME_CHART_TITLE = "Time Comparison: AI vs Traditional"
FAQ_CHART_TITLE = "Distribution of Question Types"
TIME_CHART_LABELS = ["traditional", "ai"]


def build_chart_series(report: Report) -> list[ChartSeries]:
    """Return the topic pie, the traditional-vs-AI bar and the FAQ pie, in that order."""

    summary = report.time_savings_summary
    return [
        ChartSeries(
            kind="pie",
            labels=[cluster.name for cluster in report.topic_clusters],
            values=[cluster.frequency for cluster in report.topic_clusters],
            title=TOPIC_CHART_TITLE,
        ),
        ChartSeries(
            kind="bar",
            labels=list(TIME_CHART_LABELS),
            values=[summary.total_traditional_time, summary.total_ai_time],
            title=TIME_CHART_TITLE,
        ),
        ChartSeries(
            kind="pie",
            labels=[cluster.theme for cluster in report.faq_clusters],
            values=[cluster.count for cluster in report.faq_clusters],
            title=FAQ_CHART_TITLE,
        ),
    ]
