"""Password hashing, strength scoring and random password generation."""

import re
import secrets
import string
from dataclasses import dataclass, field

import bcrypt

from app.core.config import settings

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Strength scoring: a password is strong at score >= 4 with no feedback items.
STRONG_SCORE = 4
_SPECIAL_CHARS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
_COMMON_PATTERNS = (
    re.compile(r"123456"),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"admin", re.IGNORECASE),
    re.compile(r"qwerty", re.IGNORECASE),
    re.compile(r"(.)\1{2,}"),
)


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@dataclass
class PasswordStrength:
    """Result of check_password_strength; score ranges 0-6."""

    is_strong: bool
    score: int
    feedback: list[str] = field(default_factory=list)


def check_password_strength(password: str) -> PasswordStrength:
    """Score a password on length, character variety and common patterns."""
    feedback: list[str] = []
    score = 0

    if len(password) < PASSWORD_MIN_LEN:
        feedback.append(f"Password must be at least {PASSWORD_MIN_LEN} characters long")
    else:
        score += 1
        if len(password) >= 12:
            score += 1

    if not re.search(r"[a-z]", password):
        feedback.append("Password should contain lowercase letters")
    else:
        score += 1
    if not re.search(r"[A-Z]", password):
        feedback.append("Password should contain uppercase letters")
    else:
        score += 1
    if not re.search(r"[0-9]", password):
        feedback.append("Password should contain numbers")
    else:
        score += 1
    if not any(ch in _SPECIAL_CHARS for ch in password):
        feedback.append("Password should contain special characters")
    else:
        score += 1

    if any(p.search(password) for p in _COMMON_PATTERNS):
        feedback.append("Password contains common patterns and may be easily guessed")
        score = max(0, score - 1)

    is_strong = score >= STRONG_SCORE and not feedback
    if is_strong:
        feedback.append("Password strength is good")
    return PasswordStrength(is_strong=is_strong, score=score, feedback=feedback)


def generate_random_password(length: int = 12) -> str:
    """Random password with at least one lowercase, uppercase, digit and symbol."""
    if length < 4:
        raise ValueError("length must be at least 4")
    symbols = "!@#$%^&*"
    charset = string.ascii_letters + string.digits + symbols
    chars = [
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.digits),
        secrets.choice(symbols),
    ]
    chars.extend(secrets.choice(charset) for _ in range(length - 4))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
