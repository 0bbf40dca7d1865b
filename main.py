# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import (
    auth_router,
    complaint_router,
    admin_router,
    realtime_router,
)

from app.core.config import (
    APP_ENV,
    APP_VERSION,
    CORS_ORIGINS,
    ENABLE_SCHEDULER,
    AUTO_ESCALATION_INTERVAL_MINUTES,
)
from app.core.db import init_models
from app.core.scheduler import scheduler
from app.core.logging import setup_logging
from app.core.error_handlers import register_exception_handlers
from app.middleware.request_logging import request_logging_middleware

APP_NAME = "Complaint Portal API"

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application")

    if APP_ENV == "development":
        await init_models()
        logger.info("Database models initialized (development)")
    else:
        logger.info("%s mode: init_models() skipped", APP_ENV)

    if APP_ENV == "production" and not ENABLE_SCHEDULER:
        logger.info("Auto-escalation scheduler disabled (production)")
    else:
        scheduler.start()
        logger.info(
            "Auto-escalation scheduler started, every %d minute(s)",
            AUTO_ESCALATION_INTERVAL_MINUTES,
        )

    yield

    logger.info("Shutting down application")
    if scheduler.running:
        scheduler.shutdown()

# ------------------------------------------------------------------------------
# APP INIT
# ------------------------------------------------------------------------------
app = FastAPI(
    title=APP_NAME,
    description="Complaint submission, triage and escalation API",
    version=APP_VERSION,
    docs_url="/docs" if APP_ENV != "production" else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ------------------------------------------------------------------------------
# EXCEPTION HANDLERS
# ------------------------------------------------------------------------------
register_exception_handlers(app)

# ------------------------------------------------------------------------------
# MIDDLEWARE
# ------------------------------------------------------------------------------
app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# HEALTH CHECK
# ------------------------------------------------------------------------------
@app.get("/", tags=["Health"])
async def health_check():
    return {
        "status": "ok",
        "service": "complaint-portal-api",
        "environment": APP_ENV,
        "version": APP_VERSION,
    }

# ------------------------------------------------------------------------------
# ROUTERS
# ------------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(complaint_router)
app.include_router(admin_router)
app.include_router(realtime_router)
