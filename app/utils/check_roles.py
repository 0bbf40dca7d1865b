from fastapi import Depends

from app.constants.permissions import Capability, has_capability
from app.core.exceptions import PermissionDeniedError
from app.models.users.user_models import User
from app.utils.get_user import get_current_user
from app.utils.logger import get_logger

logger = get_logger("auth.roles")


def require_capability(capability: Capability):
    async def capability_checker(user: User = Depends(get_current_user)) -> User:
        if not has_capability(user.role, capability):
            logger.warning(
                "Capability %s denied", capability.value, extra={"user_id": user.id}
            )
            raise PermissionDeniedError()
        return user
    return capability_checker
