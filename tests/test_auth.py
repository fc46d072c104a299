import unittest
from datetime import datetime, timedelta, timezone

from app import app
from models.user import User
from tests.utils.case import JSON_HEADERS, AppTestCase


class AuthenticationTestCase(AppTestCase):
    def test_signup_creates_account(self):
        response = self.client.post(
            "/signup",
            data={
                "username": "newbie",
                "name": "New User",
                "email": "newbie@example.com",
                "password": "Password123",
                "confirm_password": "Password123",
            },
        )
        self.assertEqual(response.status_code, 302)
        with app.app_context():
            user = User.query.filter_by(username="newbie").one()
            self.assertTrue(user.check_password("Password123"))

    def test_signup_rejects_duplicate_username(self):
        self.create_user("taken")
        response = self.client.post(
            "/signup",
            data={
                "username": "taken",
                "name": "Someone",
                "email": "someone@example.com",
                "password": "Password123",
                "confirm_password": "Password123",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"This username is already in use.", response.data)

    def test_signup_rejects_duplicate_email(self):
        self.create_user("taken")
        response = self.client.post(
            "/signup",
            data={
                "username": "fresh",
                "name": "Someone",
                "email": "taken@example.com",
                "password": "Password123",
                "confirm_password": "Password123",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"This email is already in use.", response.data)
        with app.app_context():
            self.assertIsNone(User.query.filter_by(username="fresh").first())

    def test_login_and_logout(self):
        user_id = self.create_user("owner", password="Password123")

        response = self.client.post(
            "/login", data={"username": "owner", "password": "Password123"}
        )
        self.assertEqual(response.status_code, 302)
        with self.client.session_transaction() as session_data:
            self.assertEqual(session_data.get("user_id"), user_id)

        self.client.get("/logout")
        with self.client.session_transaction() as session_data:
            self.assertIsNone(session_data.get("user_id"))

    def test_login_redirects_to_requested_page(self):
        self.create_user("owner", password="Password123")
        response = self.client.post(
            "/login?next=/projects/",
            data={"username": "owner", "password": "Password123"},
        )
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers["Location"].endswith("/projects/"))

    def test_login_rejects_bad_password(self):
        self.create_user("owner", password="Password123")
        response = self.client.post(
            "/login", data={"username": "owner", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Invalid username or password", response.data)

    def test_session_probe_when_anonymous(self):
        response = self.client.get("/api/session")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json(),
            {"authenticated": False, "user": None, "expires_at": None},
        )

    def test_session_probe_reports_user_and_expiry(self):
        self.create_user("owner", password="Password123")
        self.client.post("/login", data={"username": "owner", "password": "Password123"})

        payload = self.client.get("/api/session").get_json()
        self.assertTrue(payload["authenticated"])
        self.assertEqual(payload["user"]["username"], "owner")
        expires_at = datetime.fromisoformat(payload["expires_at"])
        self.assertGreater(expires_at, datetime.now(timezone.utc))

    def test_idle_session_expires(self):
        user_id = self.create_user("owner")
        idle_since = datetime.now(timezone.utc) - app.config["PERMANENT_SESSION_LIFETIME"] - timedelta(minutes=1)
        with self.client.session_transaction() as client_session:
            client_session["user_id"] = user_id
            client_session["last_seen"] = idle_since.timestamp()

        response = self.client.get("/projects/", headers=JSON_HEADERS)
        self.assertEqual(response.status_code, 401)
        self.assertFalse(self.client.get("/api/session").get_json()["authenticated"])

    def test_session_of_deleted_user_is_cleared(self):
        self._login(9999)
        response = self.client.get("/projects/")
        self.assertEqual(response.status_code, 302)
        with self.client.session_transaction() as session_data:
            self.assertIsNone(session_data.get("user_id"))


if __name__ == "__main__":
    unittest.main()
