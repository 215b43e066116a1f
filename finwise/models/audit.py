"""
Audit Models for FinWise

Significant actions are recorded as audit events:
1. Who signed up, in and out, and when
2. Which profile source a sign-in resolved to
3. When the advisor or learn page degraded to a fallback
4. Which external service failed

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finwise.models.finance import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_SIGNED_UP = "user_signed_up"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    AUTH_FAILED = "auth_failed"

    # Profile
    PROFILE_FALLBACK_USED = "profile_fallback_used"
    CURRENCY_CHANGED = "currency_changed"

    # Advisor
    ADVICE_GENERATED = "advice_generated"
    ADVICE_FALLBACK_USED = "advice_fallback_used"

    # Learning content
    CONTENT_GENERATED = "content_generated"
    CONTENT_FALLBACK_USED = "content_fallback_used"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which user / session is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="uid of the user the event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one chat turn)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_in(uid, profile_source="cache")
        event = AuditEventBuilder.advice_fallback_used(error, correlation_id)
    """

    @staticmethod
    def user_signed_up(user_id: str, email: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            user_id=user_id,
            description="New account created",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_in(user_id: str, profile_source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            user_id=user_id,
            description=f"User signed in (profile from {profile_source})",
            details={"profile_source": profile_source},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            user_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(operation: str, code: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"{operation.capitalize()} failed: {code}",
            error_message=message,
            details={"operation": operation, "code": code},
            is_user_action=True,
        )

    @staticmethod
    def profile_fallback_used(user_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="Using minimal profile derived from display name",
            details={"reason": reason},
        )

    @staticmethod
    def currency_changed(user_id: str, old: str, new: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CHANGED,
            user_id=user_id,
            description=f"Currency changed: {old} -> {new}",
            details={"old_currency": old, "new_currency": new},
            is_user_action=True,
        )

    @staticmethod
    def advice_generated(
        query_length: int,
        context_lines: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_GENERATED,
            correlation_id=correlation_id,
            description="Advice generated with financial context",
            details={
                "query_length": query_length,
                "context_lines": context_lines,
            },
        )

    @staticmethod
    def advice_fallback_used(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Advice generated without financial context",
            error_message=error_message,
        )

    @staticmethod
    def content_loaded(kind: str, source: str, reason: Optional[str]) -> AuditEvent:
        if source == "fallback":
            return AuditEvent(
                event_type=AuditEventType.CONTENT_FALLBACK_USED,
                severity=AuditSeverity.WARNING,
                description=f"Fallback {kind} content served",
                details={"kind": kind, "reason": reason},
            )
        return AuditEvent(
            event_type=AuditEventType.CONTENT_GENERATED,
            description=f"Generated {kind} content served",
            details={"kind": kind},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
