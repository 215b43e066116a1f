"""
Learning Content Models

Schemas for the generated learn-page content: quiz questions,
quotes and blog links.

DESIGN DECISION: Generated content is validated against these schemas
immediately after decoding. The loader returns a tagged ContentResult
that says whether the items are generated or the built-in fallback,
so callers never have to re-check array shapes themselves.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentKind(str, Enum):
    """The three content sets on the learn page."""
    QUIZ = "quiz"
    QUOTES = "quotes"
    BLOGS = "blogs"

    @property
    def expected_count(self) -> int:
        """Exact number of items a valid set must contain."""
        return 10 if self is ContentKind.QUIZ else 3


class ContentSource(str, Enum):
    """Where a content set came from."""
    GENERATED = "generated"
    FALLBACK = "fallback"


class QuizQuestion(BaseModel):
    """A multiple-choice question with exactly four options."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0, le=3)
    explanation: Optional[str] = None


class Quote(BaseModel):
    """An attributed finance quote."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)


class BlogLink(BaseModel):
    """A link to a finance article."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    url: str = Field(..., pattern=r"^https?://")
    source: str = Field(..., min_length=1)
    date: str = Field(default="")


ContentItem = Union[QuizQuestion, Quote, BlogLink]


class ContentResult(BaseModel):
    """
    Tagged outcome of loading one content set.

    source == GENERATED: items passed schema and length validation.
    source == FALLBACK: items are the built-in dataset and
    fallback_reason says why.
    """

    kind: ContentKind
    source: ContentSource
    items: list[ContentItem]
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source is ContentSource.FALLBACK


class LearningContent(BaseModel):
    """Everything the learn page shows."""

    quiz: ContentResult
    quotes: ContentResult
    blogs: ContentResult
