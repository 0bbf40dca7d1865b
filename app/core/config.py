# app/core/config.py

import os
from dotenv import load_dotenv
from app.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()
]

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./complaints.db")

# ---- Pool tuning ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = _env_bool("DB_ECHO_POOL", "false")
DB_SSL_VERIFY = _env_bool("DB_SSL_VERIFY", "true")

# =====================================================
# JWT / AUTH
# =====================================================
JWT_ACCESS_SECRET_KEY = os.getenv("JWT_ACCESS_SECRET_KEY")
if not JWT_ACCESS_SECRET_KEY:
    raise ValueError("JWT_ACCESS_SECRET_KEY must be set")

JWT_ALGORITHM = "HS256"

ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
)

# =====================================================
# AUTO-ESCALATION
# =====================================================
# The senior authority is resolved by id first, then by email
_senior_id = os.getenv("SENIOR_AUTHORITY_USER_ID")
SENIOR_AUTHORITY_USER_ID = int(_senior_id) if _senior_id else None
SENIOR_AUTHORITY_EMAIL = os.getenv("SENIOR_AUTHORITY_EMAIL") or None

if SENIOR_AUTHORITY_USER_ID is None and SENIOR_AUTHORITY_EMAIL is None:
    logger.warning(
        "No senior authority configured; auto-escalation will skip every candidate"
    )

AUTO_ESCALATION_INTERVAL_MINUTES = int(
    os.getenv("AUTO_ESCALATION_INTERVAL_MINUTES", 60)
)
if AUTO_ESCALATION_INTERVAL_MINUTES < 1:
    raise ValueError("AUTO_ESCALATION_INTERVAL_MINUTES must be >= 1")

ENABLE_SCHEDULER = _env_bool("ENABLE_SCHEDULER", "false")

# =====================================================
# EMAIL
# =====================================================
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", "true")
MAIL_FROM = os.getenv("MAIL_FROM", SMTP_USERNAME or "noreply@complaintportal.org")

# Log outgoing mail instead of talking to SMTP
EMAIL_TEST_MODE = _env_bool("EMAIL_TEST_MODE", "false" if IS_PRODUCTION else "true")
