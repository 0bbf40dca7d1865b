# Users
from app.models.users.user_models import User

# Complaints
from app.models.complaints.complaint_models import Complaint, ComplaintUpdate, ComplaintAttachment
from app.models.complaints.sequence_models import SequenceCounter
