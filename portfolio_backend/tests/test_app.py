import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from portfolio_backend.app import create_app
from portfolio_backend.auth import StaticTokenAuthVerifier, SupabaseAuthVerifier
from portfolio_backend.config import get_settings
from portfolio_backend.dependencies import (
    get_auth_verifier,
    get_email_notifier,
    get_kv_store,
)
from portfolio_backend.errors import NotificationError
from portfolio_backend.kv_store import InMemoryKvStore
from portfolio_backend.notifications import InMemoryEmailNotifier
from portfolio_backend.site_config import DEFAULT_SITE_CONFIG

ADMIN_TOKEN = "test-admin-token"
ADMIN = {"Authorization": f"Bearer {ADMIN_TOKEN}"}


class BackendApiTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.store = InMemoryKvStore()
        self.notifier = InMemoryEmailNotifier()
        self.verifier = StaticTokenAuthVerifier(
            token=ADMIN_TOKEN, email="admin@example.com", password="hunter22"
        )
        self.app.dependency_overrides[get_kv_store] = lambda: self.store
        self.app.dependency_overrides[get_auth_verifier] = lambda: self.verifier
        self.app.dependency_overrides[get_email_notifier] = lambda: self.notifier
        self.client = TestClient(self.app)
        self.prefix = get_settings().api_prefix

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def create_project(self, **fields):
        payload = {"title": "Project", "tagline": "Tagline"}
        payload.update(fields)
        response = self.client.post(self.url("/projects"), json=payload, headers=ADMIN)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["project"]


class HealthAndAuthTests(BackendApiTestCase):
    def test_health(self):
        response = self.client.get(self.url("/health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_sign_in_returns_token(self):
        response = self.client.post(
            self.url("/auth/signin"),
            json={"email": "admin@example.com", "password": "hunter22"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["access_token"], ADMIN_TOKEN)
        self.assertEqual(response.json()["user"]["email"], "admin@example.com")

    def test_sign_in_rejects_bad_password(self):
        response = self.client.post(
            self.url("/auth/signin"),
            json={"email": "admin@example.com", "password": "nope"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Invalid credentials")


class ContactApiTests(BackendApiTestCase):
    def submit(self, **overrides):
        payload = {
            "name": "Ada",
            "email": "ada@example.com",
            "message": "this is long enough",
        }
        payload.update(overrides)
        return self.client.post(self.url("/contact"), json=payload)

    def test_submit_stores_and_notifies(self):
        first = self.submit()
        second = self.submit(name="Grace")
        self.assertEqual(first.status_code, 200)
        self.assertTrue(first.json()["success"])
        self.assertEqual(first.json()["id"], 1)
        self.assertEqual(second.json()["id"], 2)

        stored = self.store.get("contact:1")
        self.assertEqual(stored["name"], "Ada")
        self.assertFalse(stored["read"])
        self.assertIn("submittedAt", stored)
        self.assertEqual([s.id for s in self.notifier.sent], [1, 2])

    def test_submit_accepts_long_message(self):
        message = "x" * 6000
        response = self.submit(message=message)
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(self.store.get("contact:1")["message"], message)

    def test_submit_rejects_short_message(self):
        response = self.submit(message="short")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["error"], "Message must be at least 10 characters"
        )
        self.assertEqual(self.store.items, {})

    def test_submit_rejects_invalid_email(self):
        response = self.submit(email="not-an-email")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invalid email address")

    def test_submit_requires_all_fields(self):
        response = self.client.post(self.url("/contact"), json={"name": "Ada"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "All fields are required")

    def test_notification_failure_does_not_fail_submission(self):
        failing = MagicMock()
        failing.send_contact_notification.side_effect = NotificationError("down")
        self.app.dependency_overrides[get_email_notifier] = lambda: failing

        with self.assertLogs("portfolio_backend.contacts", level="ERROR"):
            response = self.submit()

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertIsNotNone(self.store.get("contact:1"))
        failing.send_contact_notification.assert_called_once()

    def test_list_requires_admin(self):
        self.submit()
        response = self.client.get(self.url("/contact"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthorized")

        response = self.client.get(
            self.url("/contact"), headers={"Authorization": "Bearer wrong"}
        )
        self.assertEqual(response.status_code, 401)

    def test_list_sorts_newest_first(self):
        self.store.set(
            "contact:1",
            {"id": 1, "name": "A", "email": "a@x.io", "message": "m" * 10,
             "submittedAt": "2025-01-01T10:00:00+00:00", "read": False},
        )
        self.store.set(
            "contact:2",
            {"id": 2, "name": "B", "email": "b@x.io", "message": "m" * 10,
             "submittedAt": "2025-03-01T10:00:00+00:00", "read": False},
        )
        response = self.client.get(self.url("/contact"), headers=ADMIN)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([c["id"] for c in response.json()["contacts"]], [2, 1])

    def test_mark_read(self):
        self.submit()
        response = self.client.put(self.url("/contact/1/read"), headers=ADMIN)
        self.assertEqual(response.status_code, 200)
        contact = response.json()["contact"]
        self.assertTrue(contact["read"])
        self.assertIsNotNone(contact["readAt"])

        listed = self.client.get(self.url("/contact"), headers=ADMIN).json()["contacts"]
        self.assertTrue(listed[0]["read"])
        self.assertIsNotNone(listed[0]["readAt"])

    def test_mark_read_unknown_id(self):
        response = self.client.put(self.url("/contact/99/read"), headers=ADMIN)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Contact not found")

    def test_mark_read_without_token_does_not_mutate(self):
        self.submit()
        before = self.store.get("contact:1")
        response = self.client.put(self.url("/contact/1/read"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.get("contact:1"), before)

    def test_delete_is_idempotent(self):
        self.submit()
        response = self.client.delete(self.url("/contact/1"), headers=ADMIN)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        self.assertIsNone(self.store.get("contact:1"))

        again = self.client.delete(self.url("/contact/1"), headers=ADMIN)
        self.assertEqual(again.status_code, 200)

    def test_delete_without_token_does_not_mutate(self):
        self.submit()
        response = self.client.delete(self.url("/contact/1"))
        self.assertEqual(response.status_code, 401)
        self.assertIsNotNone(self.store.get("contact:1"))


class ProjectApiTests(BackendApiTestCase):
    def test_create_derives_slug_and_defaults(self):
        project = self.create_project(title="My Cool Project!", tagline="x")
        self.assertEqual(project["slug"], "my-cool-project")
        self.assertEqual(project["id"], 1)
        self.assertEqual(project["status"], "published")
        self.assertFalse(project["featured"])
        self.assertIsNotNone(project["createdAt"])
        self.assertEqual(project["createdAt"], project["updatedAt"])

    def test_create_with_cleared_slug_field_derives_slug(self):
        project = self.create_project(title="My Cool Project!", tagline="x", slug="")
        self.assertEqual(project["slug"], "my-cool-project")
        response = self.client.get(self.url("/projects/my-cool-project"))
        self.assertEqual(response.status_code, 200)

    def test_create_requires_title_and_tagline(self):
        response = self.client.post(
            self.url("/projects"), json={"title": "Only title"}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Project tagline is required")

        response = self.client.post(
            self.url("/projects"), json={"title": "  ", "tagline": "x"}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 400)

    def test_create_rejects_unknown_category(self):
        response = self.client.post(
            self.url("/projects"),
            json={"title": "A", "tagline": "B", "category": "Spaceship"},
            headers=ADMIN,
        )
        self.assertEqual(response.status_code, 400)

    def test_create_rejects_duplicate_slug(self):
        self.create_project(title="Same Name")
        response = self.client.post(
            self.url("/projects"),
            json={"title": "Same Name", "tagline": "again"},
            headers=ADMIN,
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("already in use", response.json()["error"])

    def test_create_without_token_does_not_mutate(self):
        response = self.client.post(
            self.url("/projects"), json={"title": "A", "tagline": "B"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.items, {})

    def test_public_listing_hides_drafts(self):
        self.create_project(title="Live")
        self.create_project(title="Hidden", status="draft")

        public = self.client.get(self.url("/projects")).json()["projects"]
        self.assertEqual([p["slug"] for p in public], ["live"])

        # Asking for drafts without a token still only yields published work.
        forced = self.client.get(self.url("/projects"), params={"status": "draft"})
        self.assertEqual([p["slug"] for p in forced.json()["projects"]], ["live"])

        admin = self.client.get(self.url("/projects"), headers=ADMIN).json()["projects"]
        self.assertEqual({p["slug"] for p in admin}, {"live", "hidden"})

    def test_listing_puts_featured_first_then_newest(self):
        self.create_project(title="One")
        self.create_project(title="Two", featured=True)
        self.create_project(title="Three")

        projects = self.client.get(self.url("/projects")).json()["projects"]
        self.assertEqual([p["id"] for p in projects], [2, 3, 1])

    @patch("portfolio_backend.auth.requests.get")
    def test_listing_falls_back_to_public_on_garbled_auth_reply(self, mock_get):
        self.create_project(title="Live")
        self.create_project(title="Hidden", status="draft")
        reply = MagicMock(status_code=200)
        reply.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = reply
        self.verifier = SupabaseAuthVerifier(url="https://proj.supabase.co", anon_key="anon")

        response = self.client.get(
            self.url("/projects"), headers={"Authorization": "Bearer tok"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["title"] for p in response.json()["projects"]], ["Live"])

    def test_featured_filter(self):
        self.create_project(title="One")
        self.create_project(title="Two", featured=True)
        response = self.client.get(self.url("/projects"), params={"featured": "true"})
        self.assertEqual([p["id"] for p in response.json()["projects"]], [2])

    def test_get_by_slug(self):
        self.create_project(title="Tour Ease", tagline="Travel")
        response = self.client.get(self.url("/projects/tour-ease"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["project"]["tagline"], "Travel")

        missing = self.client.get(self.url("/projects/nope"))
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"], "Project not found")

    def test_update_merges_patch(self):
        created = self.create_project(title="Tour Ease", tagline="Travel", tech=["Dart"])
        response = self.client.put(
            self.url("/projects/1"), json={"tagline": "Booking app"}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 200)
        project = response.json()["project"]
        self.assertEqual(project["tagline"], "Booking app")
        self.assertEqual(project["title"], "Tour Ease")
        self.assertEqual(project["tech"], ["Dart"])
        self.assertEqual(project["createdAt"], created["createdAt"])
        self.assertEqual(project["id"], 1)

    def test_update_unknown_id(self):
        response = self.client.put(
            self.url("/projects/42"), json={"tagline": "x"}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 404)

    def test_update_rejects_blank_title(self):
        self.create_project(title="Keep")
        response = self.client.put(
            self.url("/projects/1"), json={"title": ""}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.get("project:1")["title"], "Keep")

    def test_update_without_token_does_not_mutate(self):
        self.create_project(title="Keep")
        before = self.store.get("project:1")
        response = self.client.put(self.url("/projects/1"), json={"title": "Changed"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.get("project:1"), before)

    def test_delete_project(self):
        self.create_project(title="Gone")
        response = self.client.delete(self.url("/projects/1"), headers=ADMIN)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get(self.url("/projects/gone")).status_code, 404)

        again = self.client.delete(self.url("/projects/1"), headers=ADMIN)
        self.assertEqual(again.status_code, 200)

    def test_delete_rejects_non_numeric_id(self):
        response = self.client.delete(self.url("/projects/abc"), headers=ADMIN)
        self.assertEqual(response.status_code, 400)

    def test_store_failure_is_reported_generically(self):
        broken = MagicMock()
        broken.get_by_prefix.side_effect = RuntimeError("connection refused")
        self.app.dependency_overrides[get_kv_store] = lambda: broken
        client = TestClient(self.app, raise_server_exceptions=False)

        response = client.get(self.url("/projects"))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})


class SiteConfigApiTests(BackendApiTestCase):
    def test_get_returns_default(self):
        response = self.client.get(self.url("/config"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), DEFAULT_SITE_CONFIG)

    def test_partial_update_keeps_siblings(self):
        response = self.client.put(
            self.url("/config"), json={"stats": {"experience": "5"}}, headers=ADMIN
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

        config = self.client.get(self.url("/config")).json()
        self.assertEqual(config["stats"]["experience"], "5")
        self.assertEqual(config["stats"]["projects"], DEFAULT_SITE_CONFIG["stats"]["projects"])
        self.assertEqual(config["hero"], DEFAULT_SITE_CONFIG["hero"])

    def test_update_requires_admin(self):
        response = self.client.put(self.url("/config"), json={"stats": {"experience": "9"}})
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(self.store.get("site-config"))

    def test_get_falls_back_when_store_fails(self):
        broken = MagicMock()
        broken.get.side_effect = RuntimeError("timeout")
        self.app.dependency_overrides[get_kv_store] = lambda: broken

        with self.assertLogs("portfolio_backend.routes", level="ERROR"):
            response = self.client.get(self.url("/config"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), DEFAULT_SITE_CONFIG)


if __name__ == "__main__":
    unittest.main()
