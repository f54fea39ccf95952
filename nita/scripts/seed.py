"""
Seed the core roles, sample services and a local administrator. Idempotent.

  python -m nita.scripts.seed [--admin-password PASSWORD]
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from nita.core.database import SessionLocal
from nita.core.log import configure_logging
from nita.core.security import hash_password
from nita.models import ADMIN_ROLE, IdentitySource, Role, Service, User

configure_logging(logging.INFO)
logger = logging.getLogger(__name__)

CORE_ROLES = (ADMIN_ROLE, "staff", "guest")

DEFAULT_SERVICES = (
    {
        "name": "GitLab Internal",
        "slug": "gitlab",
        "url": "https://gitlab.ncra.tifr.res.in",
        "category": "Development",
        "icon": "code",
    },
    {
        "name": "NCRA Wiki",
        "slug": "wiki",
        "url": "https://wiki.ncra.tifr.res.in",
        "category": "Documentation",
        "icon": "book",
    },
    {
        "name": "VPN Access",
        "slug": "vpn",
        "url": "https://vpn.ncra.tifr.res.in",
        "category": "Infrastructure",
        "icon": "shield",
    },
)


def seed(db: Session, admin_password: str) -> None:
    """Create whatever is missing; existing rows are left as they are."""
    roles = {}
    for name in CORE_ROLES:
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            role = Role(name=name)
            db.add(role)
            logger.info("Created role %s", name)
        roles[name] = role

    admin_role = roles[ADMIN_ROLE]
    for values in DEFAULT_SERVICES:
        service = db.query(Service).filter(Service.slug == values["slug"]).first()
        if service is None:
            service = Service(**values, is_maintenance=False)
            db.add(service)
            logger.info("Created service %s", values["slug"])
        if service not in admin_role.services:
            admin_role.services.append(service)

    admin = db.query(User).filter(User.username == "admin").first()
    if admin is None:
        admin = User(
            username="admin",
            name="System Administrator",
            email="admin@ncra.tifr.res.in",
            password_hash=hash_password(admin_password),
            source=IdentitySource.LOCAL.value,
        )
        db.add(admin)
        logger.info("Created local administrator 'admin'")
    if admin_role not in admin.roles:
        admin.roles.append(admin_role)
    db.commit()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed NITA roles, services and admin user.")
    parser.add_argument("--admin-password", default="password123")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        seed(db, args.admin_password)
        logger.info("NITA system seeded")
        return 0
    except Exception as e:
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
