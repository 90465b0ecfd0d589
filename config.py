import os
import logging
import ssl

from dotenv import load_dotenv

# Load .env from the project root before reading anything
load_dotenv()

config_logger = logging.getLogger(__name__)


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        config_logger.warning(f"Configuration: {name}={raw!r} is not an integer, using {default}")
        return default


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        config_logger.warning(f"Configuration: {name}={raw!r} is not a number, using {default}")
        return default


class Config:
    """Base configuration class."""

    # Flask configuration
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-please-change")
    TESTING = os.environ.get("TESTING", "false").lower() == "true"

    # Model configuration
    GEMINI_API_KEY = (os.environ.get("GEMINI_API_KEY") or "").strip() or None
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-pro")
    GEMINI_TEMPERATURE = _env_float("GEMINI_TEMPERATURE", 0.7)
    COMPLETION_TIMEOUT = _env_float("COMPLETION_TIMEOUT", 60.0)

    # Generation behaviour
    GENERATION_STRATEGY = os.environ.get("GENERATION_STRATEGY", "per_platform")
    BRAND_LINE = os.environ.get("BRAND_LINE", "")

    # HTTP front
    FRONTEND_ORIGIN = os.environ.get("FRONTEND_ORIGIN", "").strip()
    PREVIEW_USER = os.environ.get("PREVIEW_USER") or None
    PREVIEW_PASSWORD = os.environ.get("PREVIEW_PASSWORD") or None
    PORT = _env_int("PORT", 3000)

    # Usage gate (0 disables it)
    DAILY_USAGE_LIMIT = max(0, _env_int("DAILY_USAGE_LIMIT", 0))
    USAGE_STORE = os.environ.get("USAGE_STORE", "memory").strip().lower()

    # Redis, only used when USAGE_STORE=redis
    REDIS_URL_DEFAULT = "redis://localhost:6379/0"
    REDIS_URL = os.environ.get("REDIS_URL", REDIS_URL_DEFAULT)
    REDIS_CONNECTION_KWARGS = {"decode_responses": True}
    if REDIS_URL and REDIS_URL.startswith("rediss://"):
        # Managed Redis providers commonly use self-signed certificates
        REDIS_CONNECTION_KWARGS["ssl_cert_reqs"] = ssl.CERT_NONE


if not Config.GEMINI_API_KEY:
    config_logger.warning(
        "Configuration: GEMINI_API_KEY is not set; generation requests will fail with 500."
    )
if Config.DAILY_USAGE_LIMIT:
    config_logger.info(
        f"Configuration: daily usage limit {Config.DAILY_USAGE_LIMIT} per caller ({Config.USAGE_STORE} store)."
    )
