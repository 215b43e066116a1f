"""Advisor and learning-content agents."""

from finwise.agents.advisor import (
    APOLOGY_PREFIX,
    AdviceGenerator,
    advisory_notes,
    analyze_transactions,
    build_prompt,
)
from finwise.agents.content import (
    FALLBACK_QUIZ,
    FALLBACK_QUOTES,
    ContentParseError,
    LearningContentLoader,
    QuizSession,
    fallback_blogs,
    parse_content,
    score_message,
)

__all__ = [
    "APOLOGY_PREFIX",
    "AdviceGenerator",
    "advisory_notes",
    "analyze_transactions",
    "build_prompt",
    "FALLBACK_QUIZ",
    "FALLBACK_QUOTES",
    "ContentParseError",
    "LearningContentLoader",
    "QuizSession",
    "fallback_blogs",
    "parse_content",
    "score_message",
]
