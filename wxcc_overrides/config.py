import os
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Server
HOST = os.getenv("HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces by default
PORT = int(os.getenv("PORT", "3000"))
ENVIRONMENT = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
SERVICE_NAME = "wxcc-overrides-api"
SERVICE_VERSION = "1.0.0"

# WxCC API Configuration
WXCC_API_BASE_URL = os.getenv("WXCC_API_BASE_URL", "https://api.wxcc-eu2.cisco.com")
WXCC_ACCESS_TOKEN = os.getenv("WXCC_ACCESS_TOKEN", "")
WXCC_ORG_ID = os.getenv("WXCC_ORG_ID", "")
WXCC_API_TIMEOUT = int(os.getenv("WXCC_API_TIMEOUT", "30000"))  # milliseconds

# Values the vendor requires on a full container PUT but may omit on GET
WXCC_DEFAULT_TIMEZONE = os.getenv("WXCC_DEFAULT_TIMEZONE", "UTC")
WXCC_DEFAULT_CONTAINER_VERSION = int(os.getenv("WXCC_DEFAULT_CONTAINER_VERSION", "0"))

# Serve an in-memory demo container set instead of calling WxCC
WXCC_MOCK_MODE = os.getenv("WXCC_MOCK_MODE", "false").lower() == "true"

# Read-path retry (writes are never retried)
API_RETRY_ATTEMPTS = int(os.getenv("API_RETRY_ATTEMPTS", "3"))
API_RETRY_DELAY = int(os.getenv("API_RETRY_DELAY", "1000"))  # milliseconds

# Rate limiting for /api routes
RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "900000"))  # 15 minutes, milliseconds
RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "100"))
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json or text

# Local lookup table for override name -> agent name mappings
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./wxcc_mappings.db")

# CORS / security headers
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Static browser console
PUBLIC_DIR = os.getenv("PUBLIC_DIR", str(Path(__file__).resolve().parent.parent / "public"))


def validate_config() -> None:
    """Fail fast when the WxCC connection settings are missing"""
    if WXCC_MOCK_MODE:
        return
    if not WXCC_ACCESS_TOKEN:
        raise ConfigurationError("WXCC_ACCESS_TOKEN environment variable is required")
    if not WXCC_API_BASE_URL:
        raise ConfigurationError("WXCC_API_BASE_URL environment variable is required")
