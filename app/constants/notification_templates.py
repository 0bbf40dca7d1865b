from enum import Enum


class NotificationKind(str, Enum):
    STATUS_UPDATE = "STATUS_UPDATE"
    ASSIGNMENT = "ASSIGNMENT"
    ESCALATION = "ESCALATION"
    AUTO_ESCALATION_SUBMITTER = "AUTO_ESCALATION_SUBMITTER"
    AUTO_ESCALATION_AUTHORITY = "AUTO_ESCALATION_AUTHORITY"
    NOTE_ADDED = "NOTE_ADDED"


_SIGNATURE = "\n\nBest regards,\nComplaint Portal Team"

# (subject, body) pairs rendered with str.format
EMAIL_TEMPLATES = {
    # ---------------- STATUS ----------------
    NotificationKind.STATUS_UPDATE: (
        "Complaint Status Update - {code}",
        "Dear {recipient_name},\n\n"
        "Your complaint has been updated:\n\n"
        "Complaint ID: {code}\n"
        "Subject: {subject}\n"
        "Previous Status: {old_status}\n"
        "New Status: {new_status}\n"
        "Updated By: {actor_name}\n"
        "Updated At: {timestamp}\n\n"
        "You can track your complaint status at: {tracking_url}" + _SIGNATURE,
    ),

    # ---------------- ASSIGNMENT ----------------
    NotificationKind.ASSIGNMENT: (
        "New Complaint Assignment - {code}",
        "Dear {recipient_name},\n\n"
        "A complaint has been assigned to you:\n\n"
        "Complaint ID: {code}\n"
        "Subject: {subject}\n"
        "Category: {category}\n"
        "Priority: {priority}\n"
        "Status: {status}\n"
        "Assigned At: {timestamp}\n\n"
        "Please review and take appropriate action.\n"
        "You can access the complaint at: {tracking_url}" + _SIGNATURE,
    ),

    # ---------------- ESCALATION ----------------
    NotificationKind.ESCALATION: (
        "Complaint Escalated - {code}",
        "Dear {recipient_name},\n\n"
        "Your complaint has been escalated:\n\n"
        "Complaint ID: {code}\n"
        "Subject: {subject}\n"
        "Escalation Reason: {reason}\n"
        "Escalated At: {timestamp}\n\n"
        "Your complaint is now being reviewed by higher authorities.\n"
        "You can track the progress at: {tracking_url}" + _SIGNATURE,
    ),
    NotificationKind.AUTO_ESCALATION_SUBMITTER: (
        "Your Complaint Has Been Escalated - {code}",
        "Dear {recipient_name},\n\n"
        "Your complaint has been automatically escalated to senior management "
        "for priority attention.\n\n"
        "Complaint Details:\n"
        "ID: {code}\n"
        "Subject: {subject}\n"
        "Category: {category}\n"
        "Priority: {priority}\n"
        "Submitted: {created_on}\n"
        "Reason for Escalation: {reason}\n\n"
        "We apologize for any delay and appreciate your patience.\n"
        "You can track your complaint status at: {tracking_url}" + _SIGNATURE,
    ),
    NotificationKind.AUTO_ESCALATION_AUTHORITY: (
        "URGENT: Complaint Auto-Escalated - {code}",
        "Dear {recipient_name},\n\n"
        "A complaint has been automatically escalated to your attention due to "
        "extended resolution time.\n\n"
        "Complaint Details:\n"
        "ID: {code}\n"
        "Subject: {subject}\n"
        "Category: {category}\n"
        "Priority: {priority}\n"
        "Submitted: {created_on}\n"
        "Current Status: ESCALATED\n"
        "Reason: {reason}\n\n"
        "Complainant: {complainant}\n\n"
        "Description:\n{description}\n\n"
        "Direct link: {tracking_url}" + _SIGNATURE,
    ),

    # ---------------- NOTES ----------------
    NotificationKind.NOTE_ADDED: (
        "New Update on Your Complaint - {code}",
        "Dear {recipient_name},\n\n"
        "A new update has been posted on your complaint {code} ({subject}):\n\n"
        "{note}\n\n"
        "You can track your complaint status at: {tracking_url}" + _SIGNATURE,
    ),
}
