from datetime import datetime

from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    @property
    def message(self) -> str:
        return self.detail


class NotFoundError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(404, message, error_code)


class PermissionDeniedError(AppException):
    def __init__(self, message: str = "Permission denied"):
        super().__init__(403, message, ErrorCode.PERMISSION_DENIED)


class InvalidAssigneeError(AppException):
    def __init__(self, message: str):
        super().__init__(400, message, ErrorCode.INVALID_ASSIGNEE)


class EscalationNotEligibleError(AppException):
    def __init__(self, days_remaining: int, eligible_at: datetime):
        self.days_remaining = days_remaining
        self.eligible_at = eligible_at
        super().__init__(
            409,
            (
                f"Escalation not allowed yet. Please wait {days_remaining} more day(s). "
                f"Escalation will be available on {eligible_at:%Y-%m-%d}"
            ),
            ErrorCode.ESCALATION_NOT_ELIGIBLE,
            details={
                "days_remaining": days_remaining,
                "eligible_at": eligible_at.isoformat(),
            },
        )


class StorageError(Exception):
    """Persistence failure while escalating a single sweep candidate."""


class NotificationError(Exception):
    """Email or real-time delivery failed."""
