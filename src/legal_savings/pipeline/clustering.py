"""Group raw topics and questions into named clusters via the text-generation collaborator."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from legal_savings.models import CollaboratorTimeoutError, TextGenerationClient, parse_json_object
from legal_savings.prompts import (
    FAQ_CLUSTER_SYSTEM_PROMPT,
    TOPIC_CLUSTER_SYSTEM_PROMPT,
    build_faq_cluster_user_prompt,
    build_topic_cluster_user_prompt,
)
from legal_savings.schemas import FaqCluster, TopicCluster

logger = logging.getLogger(__name__)


class ClusteringFormatError(ValueError):
    """Raised when the collaborator's clustering response does not have the expected shape."""


class _TopicClusterResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    topics: list[TopicCluster] = Field(min_length=1)


class _FaqClusterResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    faqs: list[FaqCluster] = Field(min_length=1)


def _request_clusters(
    *,
    label: str,
    system_prompt: str,
    user_prompt: str,
    text_client: TextGenerationClient,
    timeout: float | None,
) -> str:
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]
    try:
        return text_client.generate(messages, timeout=timeout)
    except CollaboratorTimeoutError:
        raise
    except TimeoutError as exc:
        raise CollaboratorTimeoutError(
            f"{label} clustering timed out (timeout={timeout}s)."
        ) from exc


def _parse_response(label: str, text: str, response_model: type[BaseModel]) -> BaseModel:
    try:
        payload = parse_json_object(text)
        return response_model.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        raise ClusteringFormatError(f"{label} clustering response was malformed: {exc}") from exc


def cluster_topics(
    topics: list[str],
    text_client: TextGenerationClient,
    *,
    timeout: float | None = None,
) -> list[TopicCluster]:
    """Group topic strings into 3-5 named categories with frequencies."""

    if not topics:
        return []

    text = _request_clusters(
        label="Topic",
        system_prompt=TOPIC_CLUSTER_SYSTEM_PROMPT,
        user_prompt=build_topic_cluster_user_prompt(topics),
        text_client=text_client,
        timeout=timeout,
    )
    parsed = _parse_response("Topic", text, _TopicClusterResponse)
    clusters = list(parsed.topics)
    logger.info(
        "Topic clustering: %d input topics, %d clusters, frequency sum %d.",
        len(topics),
        len(clusters),
        sum(cluster.frequency for cluster in clusters),
    )
    known = set(topics)
    for cluster in clusters:
        unknown = [example for example in cluster.example_instances if example not in known]
        if unknown:
            logger.info(
                "Topic cluster %r cites %d example(s) not among the input topics: %s",
                cluster.name,
                len(unknown),
                unknown,
            )
    return clusters


def cluster_faqs(
    questions: list[str],
    text_client: TextGenerationClient,
    *,
    timeout: float | None = None,
) -> list[FaqCluster]:
    """Group user questions into FAQ themes with a representative question each."""

    if not questions:
        return []

    text = _request_clusters(
        label="FAQ",
        system_prompt=FAQ_CLUSTER_SYSTEM_PROMPT,
        user_prompt=build_faq_cluster_user_prompt(questions),
        text_client=text_client,
        timeout=timeout,
    )
    parsed = _parse_response("FAQ", text, _FaqClusterResponse)
    clusters = list(parsed.faqs)
    logger.info(
        "FAQ clustering: %d input questions, %d clusters, count sum %d.",
        len(questions),
        len(clusters),
        sum(cluster.count for cluster in clusters),
    )
    return clusters
