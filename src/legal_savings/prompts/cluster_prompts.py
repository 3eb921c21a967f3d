"""Prompts for grouping topics and questions into report clusters."""

from __future__ import annotations

TOPIC_CLUSTER_SYSTEM_PROMPT = """You are a legal analytics assistant.
You receive a list of legal topics discussed in consultations with an AI legal assistant.

Group them into 3-5 main categories. For each category provide:
1. name: a broad legal area or concept
2. themes: 2-3 high-level legal concepts or principles
3. frequency: how many of the listed topics belong to this category
4. exampleInstances: specific topics copied from the list that illustrate the category

Return strict JSON with exactly this shape and no other text:
{
  "topics": [
    {
      "name": "<broad legal area>",
      "themes": ["<concept>", "<concept>"],
      "frequency": <integer >= 1>,
      "exampleInstances": ["<topic copied from the list>"]
    }
  ]
}
"""

FAQ_CLUSTER_SYSTEM_PROMPT = """You are a legal analytics assistant.
You receive questions that legal professionals asked an AI legal assistant.

Group them into thematic groupings. For each group:
1. theme: a core legal concept valuable to legal teams
2. representativeQuestion: one question specific enough to show expertise and general
   enough to be relevant to many legal teams
3. count: only exact matches or very close variations
4. similarQuestions: 2-3 similar questions showing the range of applications

Return strict JSON with exactly this shape and no other text:
{
  "faqs": [
    {
      "theme": "<core legal concept>",
      "representativeQuestion": "<question>",
      "count": <integer >= 1>,
      "similarQuestions": ["<question>", "<question>"]
    }
  ]
}
"""


def _bullet_list(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_topic_cluster_user_prompt(topics: list[str]) -> str:
    """Build user prompt listing every topic to be grouped."""

    return (
        "Group these legal topics into 3-5 categories.\n"
        f"topic_count: {len(topics)}\n"
        "Topics:\n"
        f"{_bullet_list(topics)}\n"
    )


def build_faq_cluster_user_prompt(questions: list[str]) -> str:
    """Build user prompt listing every question to be grouped."""

    return (
        "Group these legal questions into thematic FAQ groupings.\n"
        f"question_count: {len(questions)}\n"
        "Questions:\n"
        f"{_bullet_list(questions)}\n"
    )
