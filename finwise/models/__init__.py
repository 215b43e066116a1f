"""
Data Models Package

This package contains all Pydantic models used in FinWise.
All data flowing through the system must conform to these schemas.
"""

from finwise.models.finance import (
    EmergencyFund,
    Expense,
    ExpenseCategory,
    Investment,
    InvestmentType,
    SavingsFrequency,
    SavingsGoal,
    utc_now,
)
from finwise.models.profile import AuthSession, AuthUser, UserProfile
from finwise.models.advisor import (
    AccountBalance,
    BankTransaction,
    ChatMessage,
    ChatSender,
)
from finwise.models.content import (
    BlogLink,
    ContentKind,
    ContentResult,
    ContentSource,
    LearningContent,
    QuizQuestion,
    Quote,
)
from finwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance records
    "EmergencyFund",
    "Expense",
    "ExpenseCategory",
    "Investment",
    "InvestmentType",
    "SavingsFrequency",
    "SavingsGoal",
    "utc_now",
    # Identity
    "AuthSession",
    "AuthUser",
    "UserProfile",
    # Advisor
    "AccountBalance",
    "BankTransaction",
    "ChatMessage",
    "ChatSender",
    # Learning content
    "BlogLink",
    "ContentKind",
    "ContentResult",
    "ContentSource",
    "LearningContent",
    "QuizQuestion",
    "Quote",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
