"""Configuration module for the LitPlatform API.

This module provides centralized configuration management, including directory
paths, API server settings, authentication parameters, and mail delivery.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

# Any SQLAlchemy URL. Defaults to a SQLite file in the data directory.
DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/litplatform.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "5000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

# bcrypt cost factor
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

MIN_PASSWORD_LENGTH: int = 8

# Session cookie and lifetime
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "litplatform_sid")
SESSION_COOKIE_SECURE: bool = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
SESSION_TTL_HOURS: int = int(os.getenv("SESSION_TTL_HOURS", str(24 * 7)))

# Password reset tokens
PASSWORD_RESET_TTL_HOURS: int = int(os.getenv("PASSWORD_RESET_TTL_HOURS", "24"))
PASSWORD_RESET_TOKEN_BYTES: int = 32

# Admin token for administrative account deletion (X-Admin-Token header)
ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

# --- Code Generation Configuration ---

# Length of student linking codes and class join codes
CODE_LENGTH: int = 6

# Consecutive collisions tolerated before the code grows by one character
CODE_MAX_ATTEMPTS: int = int(os.getenv("CODE_MAX_ATTEMPTS", "10"))

# Insert attempts when the unique index rejects a freshly generated code
CODE_INSERT_ATTEMPTS: int = 5

# --- Mail Configuration ---

MAIL_ENABLED: bool = os.getenv("MAIL_ENABLED", "false").lower() == "true"
MAIL_FROM: Optional[str] = os.getenv("MAIL_FROM", "noreply@litplatform.app")
SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME: Optional[str] = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
SMTP_TIMEOUT_SECONDS: int = int(os.getenv("SMTP_TIMEOUT_SECONDS", "20"))

# Base URL of the web client, used to build password reset links
PUBLIC_APP_BASE_URL: str = os.getenv("PUBLIC_APP_BASE_URL", "http://localhost:5000")
