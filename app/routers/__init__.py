# app/routers/__init__.py

from .auth.auth_router import router as auth_router

from .complaints.complaint_router import router as complaint_router
from .admin.admin_router import router as admin_router
from .realtime.realtime_router import router as realtime_router


__all__ = [
"auth_router",

"complaint_router",
"admin_router",
"realtime_router",
]
