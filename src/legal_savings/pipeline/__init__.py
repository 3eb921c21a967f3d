"""Pipeline stage implementations."""

from legal_savings.pipeline.charts import build_chart_series
from legal_savings.pipeline.clustering import ClusteringFormatError, cluster_faqs, cluster_topics
from legal_savings.pipeline.duration import estimate_chat_duration
from legal_savings.pipeline.record_analysis import (
    AnalysisBatchResult,
    RecordAnalysis,
    RecordAnalysisError,
    analyze_and_update_records,
    analyze_record,
    analyze_records,
    extract_conversation_facets,
)
from legal_savings.pipeline.report import (
    MissingTimeSavingsError,
    assemble_report,
    build_render_payload,
    generate_report,
)
from legal_savings.pipeline.time_savings import complexity_multiplier, compute_time_savings

__all__ = [
    "AnalysisBatchResult",
    "ClusteringFormatError",
    "MissingTimeSavingsError",
    "RecordAnalysis",
    "RecordAnalysisError",
    "analyze_and_update_records",
    "analyze_record",
    "analyze_records",
    "assemble_report",
    "build_chart_series",
    "build_render_payload",
    "cluster_faqs",
    "cluster_topics",
    "complexity_multiplier",
    "compute_time_savings",
    "estimate_chat_duration",
    "extract_conversation_facets",
    "generate_report",
]
