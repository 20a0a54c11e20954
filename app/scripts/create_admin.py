"""
Create an administrator account (e.g. the first super admin). Run from project root:
  python -m app.scripts.create_admin USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_admin root_admin ops@example.com 'Str0ng!Passw0rd' super_admin
"""
import argparse
import logging
import re
import sys

from app.auth.roles import Role
from app.core.database import SessionLocal
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
    check_password_strength,
)
from app.services.credential_store import CredentialStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a hotspot admin account (no registration UI).")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars, letters, digits, _)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.ADMIN.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN) or not re.match(USERNAME_PATTERN, username):
        print("Invalid username.", file=sys.stderr)
        return 1
    email = args.email.strip()
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    strength = check_password_strength(args.password)
    if len(args.password) > PASSWORD_MAX_LEN or not strength.is_strong:
        print("Password does not meet security requirements:", file=sys.stderr)
        for line in strength.feedback:
            print(f"  - {line}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        if store.get_by_username(username) is not None:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        if store.get_by_email(email) is not None:
            print(f"Email '{email}' is already in use.", file=sys.stderr)
            return 1
        user = store.create(username, email, args.password, Role(args.role))
        logger.info("Created admin id=%s username=%s role=%s", user.id, user.username, user.role)
        print(f"Created admin '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
