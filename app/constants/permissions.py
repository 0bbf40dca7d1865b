from enum import Enum

from app.models.enums.user_role import UserRole


class Capability(str, Enum):
    SUBMIT_COMPLAINT = "SUBMIT_COMPLAINT"
    VIEW_OWN_COMPLAINTS = "VIEW_OWN_COMPLAINTS"
    VIEW_ALL_COMPLAINTS = "VIEW_ALL_COMPLAINTS"
    UPDATE_STATUS = "UPDATE_STATUS"
    ASSIGN = "ASSIGN"
    ESCALATE = "ESCALATE"
    ADD_NOTE = "ADD_NOTE"
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    RUN_ESCALATION_SWEEP = "RUN_ESCALATION_SWEEP"


_STAFF_VIEW = {
    Capability.SUBMIT_COMPLAINT,
    Capability.VIEW_ALL_COMPLAINTS,
    Capability.UPDATE_STATUS,
}

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.MANAGER: frozenset(
        _STAFF_VIEW | {Capability.ESCALATE, Capability.VIEW_DASHBOARD}
    ),
    UserRole.SUPERVISOR: frozenset(
        _STAFF_VIEW | {Capability.ESCALATE, Capability.VIEW_DASHBOARD}
    ),
    UserRole.EMPLOYEE: frozenset(_STAFF_VIEW | {Capability.ESCALATE}),
    UserRole.USER: frozenset(
        {Capability.SUBMIT_COMPLAINT, Capability.VIEW_OWN_COMPLAINTS}
    ),
}

# Roles a complaint may be assigned or escalated to
ASSIGNABLE_ROLES = frozenset(
    {UserRole.ADMIN, UserRole.MANAGER, UserRole.SUPERVISOR, UserRole.EMPLOYEE}
)


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def is_privileged(role: UserRole) -> bool:
    """Staff roles that may see internal notes and anonymous ticket codes."""
    return has_capability(role, Capability.VIEW_ALL_COMPLAINTS)
