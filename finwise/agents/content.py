"""
Learning Content Loader

Fetches the learn page's three content sets (quiz, quotes, blogs)
concurrently from a text generator.

Each response is:
1. Decoded: the JSON array between the first "[" and the last "]"
2. Validated: strict schema per item, exact item count per set
3. Tagged: GENERATED on success, FALLBACK (with a reason) otherwise

The fallback datasets are returned verbatim whenever generation,
decoding or validation fails.
"""

import asyncio
import json
from datetime import date
from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from finwise.audit import AuditLogger
from finwise.models.content import (
    BlogLink,
    ContentItem,
    ContentKind,
    ContentResult,
    ContentSource,
    LearningContent,
    QuizQuestion,
    Quote,
)
from finwise.services.llm import TextGenerationError, TextGenerator


logger = structlog.get_logger(__name__)


PROMPTS = {
    ContentKind.QUIZ: (
        "Generate 10 financial literacy quiz questions.\n"
        "Format as JSON array with:\n"
        "- question: string\n"
        "- options: array of 4 strings\n"
        "- correctAnswer: number (0-3)\n"
        "- explanation: string\n\n"
        "Focus on practical personal finance topics."
    ),
    ContentKind.QUOTES: (
        "Generate 3 inspiring financial quotes with authors.\n"
        "Format as JSON array with:\n"
        "- text: string (the quote)\n"
        "- author: string (full name)\n\n"
        "Use verified quotes from well-known financial experts."
    ),
    ContentKind.BLOGS: (
        "Generate 3 financial blog post ideas.\n"
        "Format as JSON array with:\n"
        "- title: string\n"
        "- url: string (use major financial sites)\n"
        "- source: string (publication name)\n"
        "- date: string (current date)\n\n"
        "Focus on current financial trends."
    ),
}

_ADAPTERS = {
    ContentKind.QUIZ: TypeAdapter(list[QuizQuestion]),
    ContentKind.QUOTES: TypeAdapter(list[Quote]),
    ContentKind.BLOGS: TypeAdapter(list[BlogLink]),
}


FALLBACK_QUIZ = (
    QuizQuestion(
        question="What is the 50/30/20 budgeting rule?",
        options=[
            "50% savings, 30% needs, 20% wants",
            "50% needs, 30% wants, 20% savings",
            "50% wants, 30% savings, 20% needs",
            "50% needs, 30% savings, 20% wants",
        ],
        correct_answer=1,
        explanation="The 50/30/20 rule suggests spending 50% on needs, 30% on wants, "
                    "and 20% on savings and debt repayment.",
    ),
    QuizQuestion(
        question="What is dollar-cost averaging?",
        options=[
            "Buying stocks at their lowest price",
            "Investing a fixed amount regularly regardless of price",
            "Selling stocks at their highest price",
            "Converting foreign currency to dollars",
        ],
        correct_answer=1,
        explanation="Dollar-cost averaging is investing a fixed amount at regular intervals, "
                    "regardless of market conditions.",
    ),
    QuizQuestion(
        question="Which account typically offers the highest interest rate?",
        options=[
            "Checking account",
            "Basic savings account",
            "High-yield savings account",
            "Money market account",
        ],
        correct_answer=2,
        explanation="High-yield savings accounts typically offer higher interest rates "
                    "than traditional savings or checking accounts.",
    ),
    QuizQuestion(
        question="What is the primary purpose of an emergency fund?",
        options=[
            "To invest in stocks",
            "To cover unexpected expenses",
            "To save for retirement",
            "To pay regular bills",
        ],
        correct_answer=1,
        explanation="An emergency fund is primarily used to cover unexpected expenses or income loss.",
    ),
    QuizQuestion(
        question="What is a credit utilization ratio?",
        options=[
            "Your total debt divided by your income",
            "Your credit card balance divided by your credit limit",
            "Your monthly payments divided by your total debt",
            "Your credit score divided by 850",
        ],
        correct_answer=1,
        explanation="Credit utilization is the amount of credit you're using divided by "
                    "your total credit limit.",
    ),
    QuizQuestion(
        question="Which investment typically has the lowest risk?",
        options=[
            "Cryptocurrency",
            "Individual stocks",
            "Government bonds",
            "Real estate",
        ],
        correct_answer=2,
        explanation="Government bonds, especially from stable countries, are considered "
                    "one of the lowest-risk investments.",
    ),
    QuizQuestion(
        question="What is the main advantage of a Roth IRA?",
        options=[
            "Immediate tax deduction",
            "Tax-free withdrawals in retirement",
            "Employer matching contributions",
            "No contribution limits",
        ],
        correct_answer=1,
        explanation="Roth IRA contributions grow tax-free and can be withdrawn tax-free in retirement.",
    ),
    QuizQuestion(
        question="What is a good credit score range?",
        options=["300-500", "500-600", "600-700", "700-850"],
        correct_answer=3,
        explanation="A credit score between 700-850 is considered good to excellent.",
    ),
    QuizQuestion(
        question="What is the Rule of 72?",
        options=[
            "A tax regulation",
            "A formula to estimate investment doubling time",
            "A retirement planning rule",
            "A credit score calculation",
        ],
        correct_answer=1,
        explanation="The Rule of 72 helps estimate how long it will take for an investment "
                    "to double at a given interest rate.",
    ),
    QuizQuestion(
        question="What is the first step in creating a budget?",
        options=[
            "Cut all expenses",
            "Track current spending",
            "Set savings goals",
            "Open a new bank account",
        ],
        correct_answer=1,
        explanation="Tracking your current spending is essential to understand your "
                    "financial habits before creating a budget.",
    ),
)

FALLBACK_QUOTES = (
    Quote(text="The best investment you can make is in yourself.", author="Warren Buffett"),
    Quote(text="Don't work for money; make money work for you.", author="Robert Kiyosaki"),
    Quote(
        text="Financial freedom is available to those who learn about it and work for it.",
        author="Robert Kiyosaki",
    ),
)


def format_display_date(day: date) -> str:
    """'Oct 19, 2026' style."""
    return f"{day:%b} {day.day}, {day.year}"


def fallback_blogs(today: Optional[date] = None) -> list[BlogLink]:
    """Built-in blog links, dated today."""
    stamp = format_display_date(today or date.today())
    return [
        BlogLink(
            title="The Future of Digital Banking: What to Expect in 2025",
            url="https://www.forbes.com/money",
            source="Forbes",
            date=stamp,
        ),
        BlogLink(
            title="Sustainable Investing: A Guide for Beginners",
            url="https://www.bloomberg.com/markets",
            source="Bloomberg",
            date=stamp,
        ),
        BlogLink(
            title="AI in Personal Finance: How Machine Learning is Changing Money Management",
            url="https://www.reuters.com/markets",
            source="Reuters",
            date=stamp,
        ),
    ]


def fallback_items(kind: ContentKind) -> list[ContentItem]:
    if kind is ContentKind.QUIZ:
        return list(FALLBACK_QUIZ)
    if kind is ContentKind.QUOTES:
        return list(FALLBACK_QUOTES)
    return fallback_blogs()


class ContentParseError(ValueError):
    """Generated text could not be decoded into a valid content set."""
    pass


def parse_content(raw: str, kind: ContentKind) -> list[ContentItem]:
    """
    Decode and validate one generated content set.

    Raises:
        ContentParseError: No JSON array, invalid JSON, schema mismatch,
            or the wrong number of items
    """
    start, end = raw.find("["), raw.rfind("]")
    if start == -1 or end <= start:
        raise ContentParseError("response contains no JSON array")

    try:
        decoded = json.loads(raw[start:end + 1])
    except ValueError as e:
        raise ContentParseError(f"invalid JSON: {e}") from e

    try:
        items = _ADAPTERS[kind].validate_python(decoded)
    except ValidationError as e:
        raise ContentParseError(f"schema mismatch: {e.error_count()} error(s)") from e

    if len(items) != kind.expected_count:
        raise ContentParseError(
            f"expected {kind.expected_count} items, got {len(items)}"
        )
    return items


class LearningContentLoader:
    """Loads quiz, quotes and blogs, degrading to the built-in datasets."""

    def __init__(
        self,
        text_generator: Optional[TextGenerator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._generator = text_generator
        self._audit_logger = audit_logger

    async def load(self, kind: ContentKind) -> ContentResult:
        reason = None
        if self._generator is None:
            reason = "text generator not configured"
        else:
            try:
                raw = await self._generator.generate(PROMPTS[kind])
                items = parse_content(raw, kind)
            except TextGenerationError as e:
                reason = f"generation failed: {e}"
            except ContentParseError as e:
                reason = str(e)

        if reason is None:
            result = ContentResult(kind=kind, source=ContentSource.GENERATED, items=items)
        else:
            logger.warning("content_fallback_used", kind=kind.value, reason=reason)
            result = ContentResult(
                kind=kind,
                source=ContentSource.FALLBACK,
                items=fallback_items(kind),
                fallback_reason=reason,
            )

        if self._audit_logger:
            await self._audit_logger.log_content_loaded(
                kind=kind.value,
                source=result.source.value,
                reason=result.fallback_reason,
            )
        return result

    async def load_quiz(self) -> ContentResult:
        return await self.load(ContentKind.QUIZ)

    async def load_quotes(self) -> ContentResult:
        return await self.load(ContentKind.QUOTES)

    async def load_blogs(self) -> ContentResult:
        return await self.load(ContentKind.BLOGS)

    async def load_all(self) -> LearningContent:
        quiz, quotes, blogs = await asyncio.gather(
            self.load_quiz(),
            self.load_quotes(),
            self.load_blogs(),
        )
        return LearningContent(quiz=quiz, quotes=quotes, blogs=blogs)


class QuizSession:
    """
    Walks through a quiz one question at a time.

    Each question accepts exactly one answer; answering moves on to the
    next question.
    """

    def __init__(self, questions: list[QuizQuestion]):
        self._questions = list(questions)
        self._answers: list[int] = []

    @property
    def questions(self) -> list[QuizQuestion]:
        return list(self._questions)

    @property
    def answers(self) -> list[int]:
        return list(self._answers)

    @property
    def current_index(self) -> int:
        return len(self._answers)

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if self.is_finished:
            return None
        return self._questions[self.current_index]

    @property
    def is_finished(self) -> bool:
        return len(self._answers) >= len(self._questions)

    def answer(self, choice: int) -> Optional[bool]:
        """
        Record an answer for the current question.

        Returns whether it was correct, or None if the quiz is over or
        the choice is not one of the options.
        """
        question = self.current_question
        if question is None or not 0 <= choice < len(question.options):
            return None
        self._answers.append(choice)
        return choice == question.correct_answer

    @property
    def score(self) -> int:
        return sum(
            1 for question, choice in zip(self._questions, self._answers)
            if choice == question.correct_answer
        )

    @property
    def percentage(self) -> float:
        if not self._questions:
            return 0.0
        return self.score / len(self._questions) * 100

    def restart(self) -> None:
        self._answers = []


def score_message(percentage: float) -> str:
    if percentage >= 90:
        return "Outstanding! You're a financial expert! 🏆"
    if percentage >= 70:
        return "Great job! You have solid financial knowledge! 🌟"
    if percentage >= 50:
        return "Good effort! Keep learning! 📚"
    return "Keep studying! Financial literacy is a journey! 💪"
