"""Seed and create_user command-line scripts."""

import unittest
from unittest.mock import patch

from support import ApiTestCase, TestingSession

from nita.core.security import verify_password
from nita.models import Role, Service, User
from nita.scripts import create_user
from nita.scripts.seed import seed


class TestSeed(ApiTestCase):
    def test_seed_is_idempotent(self):
        seed(self.db, "password123")
        seed(self.db, "password123")

        self.assertEqual(
            sorted(r.name for r in self.db.query(Role).all()), ["admin", "guest", "staff"]
        )
        self.assertEqual(self.db.query(Service).count(), 3)
        admin = self.db.query(User).filter(User.username == "admin").one()
        self.assertEqual([r.name for r in admin.roles], ["admin"])
        self.assertTrue(verify_password("password123", admin.password_hash))

    def test_seeded_admin_can_log_in(self):
        seed(self.db, "s3cret-pass")
        response = self.client.post(
            self.url("/login"),
            json={"username": "admin", "password": "s3cret-pass", "type": "0"},
        )
        self.assertEqual(response.status_code, 200)
        services = self.client.get(
            self.url("/services"),
            headers={"Authorization": f"Bearer {response.json()['token']}"},
        )
        self.assertEqual(len(services.json()), 3)


@patch("nita.scripts.create_user.SessionLocal", TestingSession)
class TestCreateUser(ApiTestCase):
    def test_creates_user_and_missing_roles(self):
        code = create_user.main(["ops", "long-enough", "--role", "Admin", "--role", "staff"])

        self.assertEqual(code, 0)
        self.db.expire_all()
        ops = self.db.query(User).filter(User.username == "ops").one()
        self.assertEqual(sorted(r.name for r in ops.roles), ["admin", "staff"])
        self.assertEqual(ops.source, 0)

    def test_rejects_short_password(self):
        self.assertEqual(create_user.main(["ops", "short"]), 1)
        self.assertEqual(self.db.query(User).count(), 0)

    def test_rejects_existing_username(self):
        self.make_user("ops")
        self.assertEqual(create_user.main(["ops", "long-enough"]), 1)


if __name__ == "__main__":
    unittest.main()
