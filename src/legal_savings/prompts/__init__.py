"""Prompt builders for the legal time-savings pipeline."""

from legal_savings.prompts.analysis_prompts import (
    RECORD_ANALYSIS_SYSTEM_PROMPT,
    build_record_analysis_user_prompt,
)
from legal_savings.prompts.cluster_prompts import (
    FAQ_CLUSTER_SYSTEM_PROMPT,
    TOPIC_CLUSTER_SYSTEM_PROMPT,
    build_faq_cluster_user_prompt,
    build_topic_cluster_user_prompt,
)

__all__ = [
    "FAQ_CLUSTER_SYSTEM_PROMPT",
    "RECORD_ANALYSIS_SYSTEM_PROMPT",
    "TOPIC_CLUSTER_SYSTEM_PROMPT",
    "build_faq_cluster_user_prompt",
    "build_record_analysis_user_prompt",
    "build_topic_cluster_user_prompt",
]
