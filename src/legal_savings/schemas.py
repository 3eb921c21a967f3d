"""Core data schemas for the legal time-savings pipeline.

Attributes are snake_case in Python; serialized names are camelCase, which is the shape the
conversation store and the report renderer both read.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Category = Literal["commercial_contracts", "privacy"]
CATEGORIES: tuple[str, ...] = ("commercial_contracts", "privacy")

Complexity = Literal["low", "medium", "high"]
TurnRole = Literal["user", "assistant"]
TurnKind = Literal["question", "answer", "follow-up"]
ChartKind = Literal["pie", "bar"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            unique.append(cleaned)
    return unique


class ConversationTurn(_CamelModel):
    """A single turn in a legal consultation."""

    role: TurnRole
    text: str
    timestamp: datetime
    kind: TurnKind


class ConversationContext(_CamelModel):
    """Who asked, at what level, under which law."""

    user_role: str
    expertise_level: str
    jurisdiction: str
    scenario: str | None = None


class DerivedMetadata(_CamelModel):
    """Analysis outputs stored back onto a conversation record."""

    created_at: datetime
    chat_duration_minutes: int = Field(ge=0)
    complexity: Complexity
    topics: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)

    @field_validator("topics", "questions")
    @classmethod
    def _unique_strings(cls, values: list[str]) -> list[str]:
        return _dedupe(values)


class TimeFactors(_CamelModel):
    """Traditional-method minutes, split by activity."""

    legal_research: int = Field(ge=0)
    document_review: int = Field(ge=0)
    preparation: int = Field(ge=0)
    follow_up: int = Field(ge=0)

    def total(self) -> int:
        return self.legal_research + self.document_review + self.preparation + self.follow_up


class TimeSavingsBreakdown(_CamelModel):
    """Modeled traditional duration and the minutes saved against the AI session."""

    traditional_duration_minutes: int
    time_saved_minutes: int
    factors: TimeFactors

    @model_validator(mode="after")
    def _factors_reconcile(self) -> TimeSavingsBreakdown:
        if self.factors.total() != self.traditional_duration_minutes:
            raise ValueError(
                f"Factor minutes sum to {self.factors.total()}, "
                f"expected traditionalDurationMinutes={self.traditional_duration_minutes}."
            )
        return self


class ConversationRecord(_CamelModel):
    """One stored legal Q&A session."""

    id: str = Field(min_length=1)
    category: Category
    context: ConversationContext
    turns: list[ConversationTurn]
    derived_metadata: DerivedMetadata | None = None
    time_savings: TimeSavingsBreakdown | None = None


class TopicCluster(_CamelModel):
    """A named group of related legal topics."""

    name: str = Field(min_length=1)
    themes: list[str] = Field(min_length=2, max_length=3)
    frequency: int = Field(ge=1)
    example_instances: list[str] = Field(default_factory=list)


class FaqCluster(_CamelModel):
    """A thematic group of similar user questions."""

    theme: str = Field(min_length=1)
    representative_question: str = Field(min_length=1)
    count: int = Field(ge=1)
    similar_questions: list[str] = Field(min_length=2, max_length=3)


class TimeSavingsSummary(_CamelModel):
    total_time_saved: int = 0
    average_time_saved_per_conversation: float = 0.0
    total_traditional_time: int = 0
    total_ai_time: int = 0


class PerConversationSavings(_CamelModel):
    id: str
    chat_duration: int
    traditional_duration: int
    time_saved: int
    factors: TimeFactors


class ChartSeries(_CamelModel):
    """Labels and values for one chart, in display order."""

    kind: ChartKind
    labels: list[str]
    values: list[float]
    title: str

    @model_validator(mode="after")
    def _same_length(self) -> ChartSeries:
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"Chart '{self.title}' has {len(self.labels)} labels but {len(self.values)} values."
            )
        return self


class Report(_CamelModel):
    """Aggregate report for one category, handed to the renderer and then discarded."""

    category: Category
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    topic_clusters: list[TopicCluster] = Field(default_factory=list)
    faq_clusters: list[FaqCluster] = Field(default_factory=list)
    time_savings_summary: TimeSavingsSummary = Field(default_factory=TimeSavingsSummary)
    per_conversation: list[PerConversationSavings] = Field(default_factory=list)
    chart_series: list[ChartSeries] = Field(default_factory=list)
