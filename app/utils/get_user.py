from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.db import get_db
from app.core.exceptions import AppException
from app.core.security import decode_access_token
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


def _bearer_token(authorization: str) -> str:
    if not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise AppException(401, "Invalid authorization header", ErrorCode.UNAUTHORIZED)
    return authorization.split("Bearer ")[1].strip()


async def user_from_token(db: AsyncSession, token: str) -> User:
    payload = decode_access_token(token)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AppException(401, "Invalid token subject", ErrorCode.UNAUTHORIZED)

    user = await db.get(User, user_id)

    if not user:
        logger.warning("Token user not found", extra={"user_id": user_id})
        raise AppException(401, "User not found", ErrorCode.UNAUTHORIZED)

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise AppException(403, "User account is inactive", ErrorCode.USER_INACTIVE)

    if user.token_version != payload.get("token_version"):
        logger.warning("Token version mismatch", extra={"user_id": user.id})
        raise AppException(401, "Session expired", ErrorCode.UNAUTHORIZED)

    return user


async def get_current_user(
    request: Request,
    authorization: str = Header(...),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await user_from_token(db, _bearer_token(authorization))
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Anonymous submissions come in without a token."""
    if not authorization:
        return None
    return await get_current_user(request, authorization, db)
