from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.exceptions import NotFoundError
from app.models.complaints.complaint_models import Complaint
from app.models.users.user_models import User


async def get_complaint_by_code(
    db: AsyncSession,
    code: str,
    *,
    for_update: bool = False,
) -> Complaint:
    stmt = select(Complaint).where(Complaint.code == code)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    result = await db.execute(stmt)
    complaint = result.scalar_one_or_none()
    if not complaint:
        raise NotFoundError("Complaint not found", ErrorCode.COMPLAINT_NOT_FOUND)
    return complaint


async def find_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user_or_404(db: AsyncSession, user_id: int, label: str = "User") -> User:
    user = await find_user(db, user_id)
    if not user:
        raise NotFoundError(f"{label} not found", ErrorCode.USER_NOT_FOUND)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def count_complaints(db: AsyncSession) -> int:
    return await db.scalar(select(func.count(Complaint.id))) or 0
