from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import AUTO_ESCALATION_INTERVAL_MINUTES
from app.core.db import AsyncSessionLocal
from app.services.complaints.auto_escalation_service import auto_escalate_complaints

scheduler = AsyncIOScheduler()


# One sweep at a time; missed runs collapse into a single run
@scheduler.scheduled_job(
    "interval",
    minutes=AUTO_ESCALATION_INTERVAL_MINUTES,
    id="auto_escalate_complaints",
    coalesce=True,
    max_instances=1,
)
async def auto_escalation_job():
    await auto_escalate_complaints(AsyncSessionLocal)
