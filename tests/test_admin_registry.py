"""Admin role and service management routes."""

import json
import unittest

from support import ApiTestCase

from nita.models import Role, Service, role_service, role_user


class TestAdminRoles(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()
        self.admin_role = self.db.query(Role).filter(Role.name == "admin").one()

    def test_create_role_normalizes_name(self):
        response = self.client.post(
            self.url("/admin/roles"), headers=self.headers, json={"name": "  Staff "}
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["name"], "staff")
        self.assertEqual(response.json()["services"], [])

    def test_duplicate_role_name_conflicts(self):
        self.make_role("staff")
        response = self.client.post(
            self.url("/admin/roles"), headers=self.headers, json={"name": "STAFF"}
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.json()["message"], "The role name 'staff' has already been taken."
        )
        self.assertEqual(self.db.query(Role).filter(Role.name == "staff").count(), 1)

    def test_rename_role(self):
        staff = self.make_role("staff")
        response = self.client.patch(
            self.url(f"/admin/roles/{staff.id}"), headers=self.headers, json={"name": "crew"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "crew")

    def test_admin_role_cannot_be_renamed(self):
        response = self.client.patch(
            self.url(f"/admin/roles/{self.admin_role.id}"),
            headers=self.headers,
            json={"name": "superuser"},
        )
        self.assertEqual(response.status_code, 403)
        self.db.expire_all()
        self.assertEqual(self.db.get(Role, self.admin_role.id).name, "admin")

    def test_no_role_can_be_renamed_to_admin(self):
        staff = self.make_role("staff")
        response = self.client.patch(
            self.url(f"/admin/roles/{staff.id}"), headers=self.headers, json={"name": "Admin"}
        )
        self.assertEqual(response.status_code, 403)

    def test_admin_role_cannot_be_deleted(self):
        response = self.client.delete(
            self.url(f"/admin/roles/{self.admin_role.id}"), headers=self.headers
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json()["message"],
            "The admin role is a protected system role and cannot be deleted.",
        )
        self.assertIsNotNone(self.db.get(Role, self.admin_role.id))

    def test_delete_role_removes_its_links(self):
        staff = self.make_role("staff")
        self.make_service("gitlab", roles=(staff,))
        self.make_user("alice", roles=(staff,))
        staff_id = staff.id

        response = self.client.delete(self.url(f"/admin/roles/{staff_id}"), headers=self.headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Role deleted")
        self.db.expire_all()
        self.assertIsNone(self.db.get(Role, staff_id))
        links = self.db.execute(
            role_service.select().where(role_service.c.role_id == staff_id)
        ).all()
        self.assertEqual(links, [])
        members = self.db.execute(role_user.select().where(role_user.c.role_id == staff_id)).all()
        self.assertEqual(members, [])

    def test_unknown_role_is_not_found(self):
        response = self.client.delete(self.url("/admin/roles/9999"), headers=self.headers)
        self.assertEqual(response.status_code, 404)


class TestAdminServices(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()

    def create(self, **overrides):
        payload = {
            "name": "GitLab Internal",
            "slug": "gitlab",
            "url": "https://gitlab.ncra.tifr.res.in",
            "category": "Development",
            "icon": "code",
        }
        payload.update(overrides)
        return self.client.post(self.url("/admin/services"), headers=self.headers, json=payload)

    def test_create_service(self):
        response = self.create()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["slug"], "gitlab")
        self.assertFalse(body["is_maintenance"])
        self.assertEqual(body["roles"], [])

    def test_duplicate_slug_conflicts_and_keeps_the_original(self):
        self.create()
        response = self.create(name="Other", url="https://other.example.org")

        self.assertEqual(response.status_code, 409)
        self.assertIn("slug", response.json()["errors"])
        self.db.expire_all()
        services = self.db.query(Service).all()
        self.assertEqual(len(services), 1)
        self.assertEqual(services[0].name, "GitLab Internal")
        self.assertEqual(services[0].url, "https://gitlab.ncra.tifr.res.in")

    def test_duplicate_name_conflicts(self):
        self.create()
        response = self.create(slug="gitlab2")
        self.assertEqual(response.status_code, 409)
        self.assertIn("name", response.json()["errors"])

    def test_invalid_url_and_slug_are_rejected(self):
        response = self.create(url="gitlab.local", slug="bad slug")
        self.assertEqual(response.status_code, 422)
        errors = response.json()["errors"]
        self.assertIn("url", errors)
        self.assertIn("slug", errors)

    def test_patch_changes_only_sent_fields(self):
        service_id = self.create().json()["id"]
        response = self.client.patch(
            self.url(f"/admin/services/{service_id}"),
            headers=self.headers,
            json={"icon": "git-branch"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["icon"], "git-branch")
        self.assertEqual(response.json()["category"], "Development")

    def test_put_replaces_every_field(self):
        service_id = self.create().json()["id"]
        response = self.client.put(
            self.url(f"/admin/services/{service_id}"),
            headers=self.headers,
            json={"name": "GitLab", "slug": "git", "url": "https://git.example.org"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["slug"], "git")
        self.assertIsNone(body["category"])
        self.assertIsNone(body["icon"])

    def test_update_to_a_taken_slug_conflicts(self):
        self.create()
        other_id = self.create(name="Wiki", slug="wiki", url="https://wiki.example.org").json()["id"]
        response = self.client.patch(
            self.url(f"/admin/services/{other_id}"), headers=self.headers, json={"slug": "gitlab"}
        )
        self.assertEqual(response.status_code, 409)

    def test_update_writes_old_and_new_values_to_the_audit_log(self):
        service_id = self.create().json()["id"]
        self.client.patch(
            self.url(f"/admin/services/{service_id}"),
            headers=self.headers,
            json={"category": "Tools"},
        )
        entry = self.client.get(self.url("/admin/logs"), headers=self.headers).json()["data"][0]
        self.assertEqual(entry["action"], "update_service")
        self.assertEqual(
            json.loads(entry["details"]), {"category": {"old": "Development", "new": "Tools"}}
        )

    def test_maintenance_toggle(self):
        service_id = self.create().json()["id"]
        url = self.url(f"/admin/services/{service_id}/maintenance")

        on = self.client.patch(
            url,
            headers=self.headers,
            json={"is_maintenance": True, "maintenance_message": "Upgrading to 17.0"},
        )
        self.assertEqual(on.status_code, 200)
        self.assertTrue(on.json()["is_maintenance"])
        self.assertEqual(on.json()["maintenance_message"], "Upgrading to 17.0")

        off = self.client.patch(url, headers=self.headers, json={"is_maintenance": False})
        self.assertFalse(off.json()["is_maintenance"])
        self.assertIsNone(off.json()["maintenance_message"])

    def test_delete_service_removes_role_links(self):
        staff = self.make_role("staff")
        service = self.make_service("wiki", roles=(staff,))

        response = self.client.delete(
            self.url(f"/admin/services/{service.id}"), headers=self.headers
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Deleted successfully.")
        self.db.expire_all()
        self.assertEqual(self.db.get(Role, staff.id).services, [])

    def test_list_services_includes_roles(self):
        staff = self.make_role("staff")
        self.make_service("wiki", roles=(staff,))
        response = self.client.get(self.url("/admin/services"), headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r["name"] for r in response.json()[0]["roles"]], ["staff"])


class TestAuditLogs(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()

    def test_pagination(self):
        for name in ("alpha", "beta", "gamma"):
            self.client.post(self.url("/admin/roles"), headers=self.headers, json={"name": name})

        with self.settings_override(AUDIT_LOG_PAGE_SIZE=2):
            first = self.client.get(self.url("/admin/logs"), headers=self.headers).json()
            second = self.client.get(self.url("/admin/logs?page=2"), headers=self.headers).json()

        self.assertEqual(first["total"], 3)
        self.assertEqual(first["per_page"], 2)
        self.assertEqual(first["last_page"], 2)
        self.assertEqual([e["target"] for e in first["data"]], ["Role: gamma", "Role: beta"])
        self.assertEqual([e["target"] for e in second["data"]], ["Role: alpha"])
        self.assertEqual(first["data"][0]["user"]["username"], "root-admin")

    def test_page_must_be_positive(self):
        response = self.client.get(self.url("/admin/logs?page=0"), headers=self.headers)
        self.assertEqual(response.status_code, 422)
        self.assertIn("page", response.json()["errors"])


if __name__ == "__main__":
    unittest.main()
