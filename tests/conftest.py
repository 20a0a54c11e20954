"""
Test environment for the hotspot admin API.

Settings are read once at import time (app.core.config.settings), so the
environment must be set before any app module is imported. Cheap bcrypt rounds
keep login-heavy tests fast.
"""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdef")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUDIT_LOG_ENABLED", "true")
os.environ.setdefault("REFRESH_TOKEN_ROTATION", "true")
