"""Configuration management for the Cobalt hub service."""

import os
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
# This ensures dotenv works regardless of where the script is run from
project_root = Path(__file__).parent.parent.parent
env_file = project_root / ".env"

# override=False means existing environment variables take precedence
load_dotenv(dotenv_path=env_file, override=False)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Application configuration loaded from the environment."""
    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = _env_bool("DEBUG")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
    MAX_REQUEST_BYTES: int = int(os.getenv("MAX_REQUEST_BYTES", str(1024 * 1024)))

    # Cobalt connector (outbound transport)
    COBALT_API_BASE_URL: str = os.getenv("COBALT_API_BASE_URL", "http://localhost:3000")
    DELIVERY_TIMEOUT_SECONDS: float = float(os.getenv("DELIVERY_TIMEOUT_SECONDS", "10"))
    DELIVERY_MAX_RETRIES: int = int(os.getenv("DELIVERY_MAX_RETRIES", "0"))

    # Batch processing
    CONTINUE_ON_FAIL: bool = _env_bool("CONTINUE_ON_FAIL")
    CONTENT_POLICY: str = os.getenv("CONTENT_POLICY", "lenient")

    # Name of the upstream trigger node consulted for the session id
    TRIGGER_NODE_NAME: str = os.getenv("TRIGGER_NODE_NAME", "Cobalt Trigger")

    # CORS (comma separated)
    CORS_ORIGINS: Optional[str] = os.getenv("CORS_ORIGINS")


config = Config()
