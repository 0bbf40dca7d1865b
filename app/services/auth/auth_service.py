from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.config import ACCESS_TOKEN_EXPIRE_MINUTES
from app.core.exceptions import AppException
from app.core.security import create_access_token, verify_password
from app.services.complaints.complaint_queries import get_user_by_email
from app.utils.logger import get_logger

logger = get_logger("auth.service")


# =====================================================
# LOGIN
# =====================================================
async def login_user(db: AsyncSession, email: str, password: str) -> dict:
    logger.info("Authenticating user", extra={"email": email})

    user = await get_user_by_email(db, email)

    if not user or not verify_password(password, user.password_hash):
        logger.warning("Invalid credentials", extra={"email": email})
        raise AppException(401, "Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning("Inactive user login blocked", extra={"email": email})
        raise AppException(403, "User account is inactive", ErrorCode.USER_INACTIVE)

    access_token = create_access_token(
        user_id=user.id,
        role=user.role.value,
        token_version=user.token_version,
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    logger.info("Login successful", extra={"user_id": user.id})

    return {
        "auth": {
            "access_token": access_token,
            "token_type": "bearer",
        },
        "user": {
            "id": user.id,
            "username": user.username,
            "role": user.role,
        },
    }
