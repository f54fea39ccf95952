"""
Create a local user (e.g. the first administrator). Run from project root:
  python -m nita.scripts.create_user USERNAME PASSWORD [--name NAME] [--email EMAIL] [--role ROLE]
Example:
  python -m nita.scripts.create_user admin your-secure-password --role admin
"""
import argparse
import sys

from nita.core.database import SessionLocal
from nita.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
)
from nita.models import IdentitySource, Role, User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a local NITA user.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--name", help="Display name (defaults to the username)")
    parser.add_argument("--email", help="Email address")
    parser.add_argument(
        "--role",
        action="append",
        default=[],
        help="Role to attach; created if missing. Repeatable.",
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            name=(args.name or username).strip(),
            email=args.email,
            password_hash=hash_password(args.password),
            source=IdentitySource.LOCAL.value,
        )
        for role_name in {r.strip().lower() for r in args.role if r.strip()}:
            role = db.query(Role).filter(Role.name == role_name).first()
            if role is None:
                role = Role(name=role_name)
                db.add(role)
            user.roles.append(role)
        db.add(user)
        db.commit()
        roles = ", ".join(r.name for r in user.roles) or "none"
        print(f"Created user '{username}' with roles: {roles}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
