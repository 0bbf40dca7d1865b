import enum


class ComplaintStatus(str, enum.Enum):
    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    IN_PROGRESS = "IN_PROGRESS"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class ComplaintPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ComplaintCategory(str, enum.Enum):
    SERVICE = "SERVICE"
    BILLING = "BILLING"
    TECHNICAL = "TECHNICAL"
    STAFF = "STAFF"
    FACILITY = "FACILITY"
    OTHER = "OTHER"


class SubmissionType(str, enum.Enum):
    PUBLIC = "PUBLIC"
    ANONYMOUS = "ANONYMOUS"


# Statuses that stamp resolved_at on first entry
TERMINAL_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})

# Statuses the auto-escalation sweep never touches
SWEEP_EXCLUDED_STATUSES = frozenset(
    {ComplaintStatus.ESCALATED, ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED}
)

OPEN_STATUSES = frozenset(
    {
        ComplaintStatus.NEW,
        ComplaintStatus.UNDER_REVIEW,
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.ESCALATED,
    }
)
