"""Prompts for per-conversation analysis."""

from __future__ import annotations

from legal_savings.schemas import ConversationRecord

RECORD_ANALYSIS_SYSTEM_PROMPT = """You are a legal consultation analyst.
Read one consultation between a legal professional and an AI legal assistant.

Return strict JSON with exactly these keys and no other text:
{
  "topics": ["<short legal topic discussed>"],
  "questions": ["<question the user asked, rephrased as a standalone FAQ>"],
  "complexity": "<one of: low, medium, high>"
}

Requirements:
- List 1-5 distinct topics, most central first.
- List every distinct question the user asked, without duplicates.
- Rate complexity by the legal depth required, not by conversation length.
- Do not include names of people or organizations.
"""


def build_record_analysis_user_prompt(record: ConversationRecord) -> str:
    """Render the consultation transcript with its context."""

    context = record.context
    lines = [
        f"{index}. {turn.role.upper()} ({turn.kind}): {turn.text}"
        for index, turn in enumerate(record.turns, start=1)
    ]
    transcript = "\n".join(lines)
    return (
        "Analyze this legal consultation.\n"
        f"category: {record.category}\n"
        f"user_role: {context.user_role}\n"
        f"expertise_level: {context.expertise_level}\n"
        f"jurisdiction: {context.jurisdiction}\n"
        "Transcript:\n"
        f"{transcript}\n"
    )
