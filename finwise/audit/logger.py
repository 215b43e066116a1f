"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of sign-ins and profile resolution
2. Visibility into when the app degraded to a fallback
3. Debugging capability for external service failures

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finwise.models.audit import AuditEvent, AuditEventBuilder
from finwise.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finwise.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_signed_up(self, user_id: str, email: Optional[str]) -> None:
        await self.log(AuditEventBuilder.user_signed_up(user_id=user_id, email=email))

    async def log_signed_in(self, user_id: str, profile_source: str) -> None:
        await self.log(
            AuditEventBuilder.user_signed_in(user_id=user_id, profile_source=profile_source)
        )

    async def log_signed_out(self, user_id: Optional[str]) -> None:
        await self.log(AuditEventBuilder.user_signed_out(user_id=user_id))

    async def log_auth_failed(self, operation: str, code: str, message: str) -> None:
        await self.log(
            AuditEventBuilder.auth_failed(operation=operation, code=code, message=message)
        )

    async def log_profile_fallback(self, user_id: str, reason: str) -> None:
        await self.log(AuditEventBuilder.profile_fallback_used(user_id=user_id, reason=reason))

    async def log_currency_changed(self, user_id: str, old: str, new: str) -> None:
        await self.log(AuditEventBuilder.currency_changed(user_id=user_id, old=old, new=new))

    async def log_advice_generated(
        self,
        query_length: int,
        context_lines: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.advice_generated(
                query_length=query_length,
                context_lines=context_lines,
                correlation_id=correlation_id,
            )
        )

    async def log_advice_fallback(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.advice_fallback_used(
                error_message=error_message,
                correlation_id=correlation_id,
            )
        )

    async def log_content_loaded(
        self,
        kind: str,
        source: str,
        reason: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.content_loaded(kind=kind, source=source, reason=reason))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one chat turn).
    """
    return uuid4()
