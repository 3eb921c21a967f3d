"""Model the traditional-research time a consultation replaced."""

from __future__ import annotations

import math
from collections.abc import Sequence
from fractions import Fraction

from legal_savings.schemas import Complexity, TimeFactors, TimeSavingsBreakdown

BASE_FACTOR_MINUTES: dict[str, int] = {
    "legal_research": 30,
    "document_review": 20,
    "preparation": 15,
    "follow_up": 10,
}
# Kept as exact fractions so factors that land on .5 round the same way every time.
TOPIC_WEIGHT = Fraction(1, 5)
FAQ_WEIGHT = Fraction(1, 10)
COMPLEXITY_SCALE: dict[str, Fraction] = {
    "low": Fraction(1),
    "medium": Fraction(6, 5),
    "high": Fraction(3, 2),
}


def round_half_up(value: float | Fraction) -> int:
    """Round to the nearest integer, with .5 going up."""

    return math.floor(value + Fraction(1, 2))


def complexity_multiplier(topic_count: int, faq_count: int, complexity: Complexity) -> Fraction:
    """Scale applied to every base factor.

    Each topic beyond the first adds 0.2 and each question beyond the first adds 0.1;
    the result is then scaled by the declared complexity tier.
    """

    if complexity not in COMPLEXITY_SCALE:
        raise ValueError(f"Unknown complexity {complexity!r}.")
    multiplier = Fraction(1)
    multiplier += TOPIC_WEIGHT * (topic_count - 1)
    multiplier += FAQ_WEIGHT * (faq_count - 1)
    return multiplier * COMPLEXITY_SCALE[complexity]


def compute_time_savings(
    chat_duration_minutes: int,
    topics: Sequence[str],
    faqs: Sequence[str],
    complexity: Complexity,
) -> TimeSavingsBreakdown:
    """Return the traditional-method breakdown and minutes saved.

    Factors are rounded one by one and then summed, so the factors always add up to the
    traditional duration. Time saved is not clamped and goes negative when the AI session
    ran longer than the modeled traditional work.
    """

    multiplier = complexity_multiplier(len(topics), len(faqs), complexity)
    factors = TimeFactors(
        **{
            name: round_half_up(base_minutes * multiplier)
            for name, base_minutes in BASE_FACTOR_MINUTES.items()
        }
    )
    traditional = factors.total()
    return TimeSavingsBreakdown(
        traditional_duration_minutes=traditional,
        time_saved_minutes=traditional - chat_duration_minutes,
        factors=factors,
    )
