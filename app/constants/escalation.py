from datetime import timedelta

# A complaint becomes eligible for escalation this long after creation
ESCALATION_WINDOW = timedelta(days=7)

SECONDS_PER_DAY = 24 * 60 * 60

AUTO_ESCALATION_REASON = "Automatic escalation after 7 days without resolution"

SUBMITTED_COMMENT = "Complaint submitted successfully"

TICKET_SEQUENCE_NAME = "complaint_code"
