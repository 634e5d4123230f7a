# ============================================================
# config.py — Service settings
# ------------------------------------------------------------
# All knobs come from the environment (or a local .env file).
# Defaults are meant for a local run against SQLite.
# ============================================================
import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./beds.db")
    # How long a check-in/check-out waits on a row lock before giving up
    LOCK_TIMEOUT_MS = int(os.getenv("LOCK_TIMEOUT_MS", "5000"))

    # Auth
    JWT_SECRET = os.getenv("JWT_SECRET") or "default-secret-key"
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))

    # Default staff account created on first start
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # HTTP
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
