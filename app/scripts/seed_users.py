"""
Seed the admin account and the senior authority that receives auto-escalated
complaints. Existing users (matched by email) are left untouched.

    python -m app.scripts.seed_users
"""

import asyncio
import os

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.db import AsyncSessionLocal
from app.core.logging import setup_logging
from app.core.security import hash_password
from app.models.enums.user_role import UserRole
from app.models.users.user_models import User
from app.services.complaints.complaint_queries import get_user_by_email
from app.utils.logger import get_logger

logger = get_logger("scripts.seed")

SEED_USERS = [
    {
        "username": "admin",
        "email": os.getenv("ADMIN_EMAIL", "admin@complaintportal.org"),
        "full_name": "System Administrator",
        "password": os.getenv("ADMIN_PASSWORD", "admin123"),
        "role": UserRole.ADMIN,
    },
    {
        "username": "senior.authority",
        "email": os.getenv("SENIOR_AUTHORITY_EMAIL", "senior@complaintportal.org"),
        "full_name": "Senior Authority",
        "password": os.getenv("SENIOR_AUTHORITY_PASSWORD", "senior123"),
        "role": UserRole.MANAGER,
    },
]


async def ensure_user(db: AsyncSession, entry: dict) -> tuple[User, bool]:
    user = await get_user_by_email(db, entry["email"])
    if user is not None:
        return user, False

    user = User(
        username=entry["username"],
        email=entry["email"],
        full_name=entry["full_name"],
        password_hash=hash_password(entry["password"]),
        role=entry["role"],
        is_active=True,
    )
    db.add(user)
    await db.flush()
    return user, True


async def seed_users(session_factory: async_sessionmaker = AsyncSessionLocal) -> list[User]:
    async with session_factory() as db:
        users = []
        for entry in SEED_USERS:
            user, created = await ensure_user(db, entry)
            logger.info(
                "%s %s (%s) id=%s",
                "Created" if created else "Found", user.email, user.role.value, user.id,
            )
            users.append(user)
        await db.commit()
    return users


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_users())
