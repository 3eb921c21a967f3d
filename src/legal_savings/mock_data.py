"""Generate synthetic legal consultation records for development and testing."""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta

from legal_savings.schemas import (
    CATEGORIES,
    Category,
    ConversationContext,
    ConversationRecord,
    ConversationTurn,
)


def _scenario(
    *,
    scenario: str,
    question: str,
    answer: str,
    follow_up: str,
    follow_up_answer: str,
) -> dict:
    return {
        "scenario": scenario,
        "question": question,
        "answer": answer,
        "follow_up": follow_up,
        "follow_up_answer": follow_up_answer,
    }


_SCENARIOS: dict[str, list[dict]] = {
    "commercial_contracts": [
        _scenario(
            scenario="software_license_review",
            question=(
                "What are the key clauses to check in software licensing agreement {variant}?"
            ),
            answer=(
                "Review the license grant, usage restrictions, warranties, limitation of "
                "liability, indemnification and termination rights."
            ),
            follow_up="How should the limitation of liability cap be negotiated?",
            follow_up_answer=(
                "Tie the cap to fees paid over a defined period and carve out breaches of "
                "confidentiality and indemnified claims."
            ),
        ),
        _scenario(
            scenario="vendor_termination",
            question="Can we terminate vendor agreement {variant} for convenience mid-term?",
            answer=(
                "Only if the agreement grants a convenience termination right; otherwise "
                "termination generally requires a material breach and notice."
            ),
            follow_up="What notice period is typical for termination for convenience?",
            follow_up_answer="Thirty to ninety days is common, often with a wind-down fee.",
        ),
        _scenario(
            scenario="ucc_goods_sale",
            question="Does the UCC govern purchase order {variant} for custom hardware?",
            answer=(
                "Article 2 applies to sales of goods; for mixed contracts courts apply the "
                "predominant purpose test."
            ),
            follow_up="How does the battle of the forms affect our terms?",
            follow_up_answer=(
                "Under section 2-207 additional terms may become part of the contract between "
                "merchants unless they materially alter it or are objected to."
            ),
        ),
    ],
    "privacy": [
        _scenario(
            scenario="ccpa_applicability",
            question="Does the CCPA apply to our analytics product {variant}?",
            answer=(
                "It applies if the business meets a revenue, data volume or data sale threshold "
                "and collects personal information of California residents."
            ),
            follow_up="Do we need a do-not-sell link on the website?",
            follow_up_answer=(
                "Yes, if you sell or share personal information you must offer an opt-out "
                "link and honor global privacy control signals."
            ),
        ),
        _scenario(
            scenario="gdpr_breach_notice",
            question="What are the GDPR breach notification deadlines for incident {variant}?",
            answer=(
                "Notify the supervisory authority within 72 hours of becoming aware, unless "
                "the breach is unlikely to result in a risk to individuals."
            ),
            follow_up="When must affected individuals be notified directly?",
            follow_up_answer=(
                "Without undue delay when the breach is likely to result in a high risk to "
                "their rights and freedoms."
            ),
        ),
        _scenario(
            scenario="hipaa_vendor",
            question="Do we need a business associate agreement with cloud vendor {variant}?",
            answer=(
                "If the vendor creates, receives, maintains or transmits protected health "
                "information on your behalf, a business associate agreement is required."
            ),
            follow_up="What must the business associate agreement contain?",
            follow_up_answer=(
                "Permitted uses, safeguards, breach reporting, subcontractor obligations and "
                "return or destruction of data at termination."
            ),
        ),
    ],
}

_CONTEXTS: list[dict] = [
    {
        "user_role": "in-house counsel",
        "expertise_level": "intermediate",
        "jurisdiction": "California",
    },
    {"user_role": "paralegal", "expertise_level": "beginner", "jurisdiction": "New York"},
    {"user_role": "general counsel", "expertise_level": "expert", "jurisdiction": "Delaware"},
]


def _build_turns(template: dict, *, variant: int, start: datetime, rng: random.Random) -> list:
    turns = [
        ConversationTurn(
            role="user",
            text=template["question"].format(variant=variant),
            timestamp=start,
            kind="question",
        ),
        ConversationTurn(
            role="assistant",
            text=template["answer"],
            timestamp=start + timedelta(minutes=1),
            kind="answer",
        ),
    ]
    if rng.random() < 0.7:
        turns.append(
            ConversationTurn(
                role="user",
                text=template["follow_up"],
                timestamp=start + timedelta(minutes=3),
                kind="follow-up",
            )
        )
        turns.append(
            ConversationTurn(
                role="assistant",
                text=template["follow_up_answer"],
                timestamp=start + timedelta(minutes=4),
                kind="answer",
            )
        )
    return turns


def generate_mock_records(
    category: Category,
    count: int = 12,
    seed: int = 7,
) -> list[ConversationRecord]:
    """Generate a deterministic list of unanalyzed records for one category."""

    if category not in CATEGORIES:
        raise ValueError(f"Unknown category {category!r}.")
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}.")

    rng = random.Random(seed)
    scenarios = _SCENARIOS[category]
    start = datetime(2025, 1, 10, 9, 0, tzinfo=UTC)
    records: list[ConversationRecord] = []
    for index in range(count):
        template = scenarios[index % len(scenarios)]
        context = _CONTEXTS[rng.randrange(len(_CONTEXTS))]
        records.append(
            ConversationRecord(
                id=f"{category}-{seed}-{index + 1:04d}",
                category=category,
                context=ConversationContext(scenario=template["scenario"], **context),
                turns=_build_turns(
                    template,
                    variant=index + 1,
                    start=start + timedelta(hours=index * 3),
                    rng=rng,
                ),
            )
        )
    return records
