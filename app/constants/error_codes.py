from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_INACTIVE = "USER_INACTIVE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_ASSIGNEE = "INVALID_ASSIGNEE"

    # ---------------- COMPLAINTS ----------------
    COMPLAINT_NOT_FOUND = "COMPLAINT_NOT_FOUND"
    ESCALATION_NOT_ELIGIBLE = "ESCALATION_NOT_ELIGIBLE"
