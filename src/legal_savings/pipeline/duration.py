"""Estimate how long a human spent in an AI consultation."""

from __future__ import annotations

import math
from collections.abc import Iterable

from legal_savings.schemas import ConversationTurn

WORDS_PER_MINUTE = 200
COMPREHENSION_MULTIPLIER = 1.5
RESPONSE_FORMULATION_MINUTES = 2
HUMAN_ROLE = "user"


def count_words(text: str) -> int:
    return len(text.split())


def turn_minutes(turn: ConversationTurn) -> float:
    """Reading time for one turn, plus composition time when the human wrote it."""

    reading = (count_words(turn.text) / WORDS_PER_MINUTE) * COMPREHENSION_MULTIPLIER
    if turn.role == HUMAN_ROLE:
        return reading + RESPONSE_FORMULATION_MINUTES
    return reading


def estimate_chat_duration(turns: Iterable[ConversationTurn]) -> int:
    """Return whole minutes for the session, rounded up so it is never under-reported."""

    total = 0.0
    for turn in turns:
        total += turn_minutes(turn)
    return max(0, math.ceil(total))
