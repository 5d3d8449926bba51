"""Endpoint tests for /api/v1/user with an in-memory database and a fake media uploader."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.api.v1.user import get_account_service, get_media_uploader
from app.core.config import Settings
from app.core.database import get_db
from app.core.security import decode_session_token
from app.main import app
from app.services.account_store import SqlAccountStore
from app.services.accounts import AccountService
from tests.helpers import PHOTO_URL, count_accounts, make_session, make_uploader

BASE = "/api/v1/user"

REGISTRATION_FORM = {
    "fullname": "Ada Lovelace",
    "email": "ada@example.com",
    "phoneNumber": "5550100",
    "password": "analytical-engine",
    "role": "student",
}
PHOTO_PART = {"file": ("photo.jpeg", b"\xff\xd8\xff\xe0fake", "image/jpeg")}


def _set_cookie_token(resp) -> tuple[str, str]:
    """Return (token value, full Set-Cookie header) for the session cookie."""
    header = resp.headers["set-cookie"]
    first = header.split(";", 1)[0]
    name, _, value = first.partition("=")
    assert name == "token"
    return value.strip('"'), header


class UserRoutesTestCase(unittest.TestCase):

    def setUp(self) -> None:
        self.db = make_session()
        self.uploader = make_uploader()
        app.dependency_overrides[get_db] = lambda: self.db
        app.dependency_overrides[get_media_uploader] = lambda: self.uploader
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.db.close()

    def register(self, **overrides: str):
        form = {**REGISTRATION_FORM, **overrides}
        return self.client.post(f"{BASE}/register", data=form, files=PHOTO_PART)

    def login(self, **overrides: str):
        body = {"email": "ada@example.com", "password": "analytical-engine", "role": "student"}
        body.update(overrides)
        return self.client.post(f"{BASE}/login", json=body)


class TestRegisterRoute(UserRoutesTestCase):

    def test_created(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), {"message": "Account created successfully.", "success": True})

    def test_missing_photo(self) -> None:
        resp = self.client.post(f"{BASE}/register", data=REGISTRATION_FORM)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"message": "Profile photo is required", "success": False})

    def test_duplicate_email(self) -> None:
        self.register()
        resp = self.register()
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(resp.json()["message"], "User already exists with this email.")

    def test_upload_failure_is_500(self) -> None:
        self.uploader.upload.side_effect = RuntimeError("down")
        resp = self.register()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"message": "Failed to upload profile photo", "success": False})


class TestLoginRoute(UserRoutesTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_success_sets_cookie_and_returns_redacted_user(self) -> None:
        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Welcome back Ada Lovelace")
        user = body["user"]
        self.assertEqual(user["email"], "ada@example.com")
        self.assertEqual(user["phoneNumber"], "5550100")
        self.assertEqual(user["role"], "student")
        self.assertEqual(user["profile"], {"bio": None, "skills": [], "profilePhoto": PHOTO_URL})
        self.assertNotIn("password_hash", user)
        self.assertNotIn("password", user)

        token, header = _set_cookie_token(resp)
        self.assertEqual(decode_session_token(token)["account_id"], user["_id"])
        lowered = header.lower()
        self.assertIn("httponly", lowered)
        self.assertIn("samesite=strict", lowered)
        self.assertIn("max-age=86400", lowered)

    def test_form_body_accepted(self) -> None:
        resp = self.client.post(
            f"{BASE}/login",
            data={"email": "ada@example.com", "password": "analytical-engine", "role": "student"},
        )
        self.assertEqual(resp.status_code, 200)

    def test_wrong_password(self) -> None:
        resp = self.login(password="nope")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"message": "Incorrect email or password.", "success": False})
        self.assertNotIn("set-cookie", resp.headers)

    def test_wrong_role(self) -> None:
        resp = self.login(role="recruiter")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Account doesn't exist with current role.")

    def test_missing_fields(self) -> None:
        resp = self.client.post(f"{BASE}/login", json={"email": "ada@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "All fields are required")


class TestLogoutRoute(UserRoutesTestCase):

    def test_logout_without_session(self) -> None:
        resp = self.client.get(f"{BASE}/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Logged out successfully.", "success": True})
        token, header = _set_cookie_token(resp)
        self.assertEqual(token, "")
        self.assertIn("max-age=0", header.lower())


class TestUpdateProfileRoute(UserRoutesTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.token, _ = _set_cookie_token(self.login())
        self.uploader.upload.reset_mock()

    def update(self, data: dict, files: dict | None = None, token: str | None = None):
        headers = {"Cookie": f"token={self.token if token is None else token}"}
        return self.client.post(f"{BASE}/profile/update", data=data, files=files, headers=headers)

    def test_requires_session(self) -> None:
        self.client.cookies.clear()
        resp = self.client.post(f"{BASE}/profile/update", data={"bio": "x"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"message": "User not authenticated", "success": False})

    def test_invalid_token(self) -> None:
        resp = self.update({"bio": "x"}, token="not-a-jwt")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Invalid token")

    def test_partial_update(self) -> None:
        resp = self.update({"bio": "Mathematician", "skills": "java, node , react"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["message"], "Profile updated successfully.")
        user = body["user"]
        self.assertEqual(user["fullname"], "Ada Lovelace")
        self.assertEqual(user["profile"]["bio"], "Mathematician")
        self.assertEqual(user["profile"]["skills"], ["java", "node", "react"])
        self.assertEqual(user["profile"]["profilePhoto"], PHOTO_URL)
        self.uploader.upload.assert_not_called()

    def test_empty_bio_clears_it(self) -> None:
        self.update({"bio": "Mathematician"})
        resp = self.update({"bio": ""})
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["user"]["profile"]["bio"])

    def test_file_replaces_photo(self) -> None:
        self.uploader.upload.return_value = "https://res.cloudinary.com/demo/new.png"
        resp = self.update({"fullname": "Augusta Ada King"}, files={"file": ("new.png", b"png", "image/png")})
        self.assertEqual(resp.status_code, 200)
        user = resp.json()["user"]
        self.assertEqual(user["fullname"], "Augusta Ada King")
        self.assertEqual(user["profile"]["profilePhoto"], "https://res.cloudinary.com/demo/new.png")

    def test_upload_failure_is_500(self) -> None:
        self.uploader.upload.side_effect = RuntimeError("down")
        resp = self.update({"bio": "x"}, files={"file": ("new.png", b"png", "image/png")})
        self.assertEqual(resp.status_code, 500)
        self.assertFalse(resp.json()["success"])


class TestInternalErrors(UserRoutesTestCase):
    """Unexpected failures map to a generic 500, never to a client error."""

    INTERNAL = {"message": "Internal server error", "success": False}

    def test_malformed_stored_hash_on_login(self) -> None:
        self.register()
        account = SqlAccountStore(self.db).get_by_email("ada@example.com")
        account.password_hash = "not-a-bcrypt-hash"
        self.db.commit()

        with self.assertLogs("app.api.v1.user", "ERROR"):
            resp = self.login()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), self.INTERNAL)
        self.assertNotIn("set-cookie", resp.headers)

    def test_login_without_signing_secret(self) -> None:
        self.register()
        unsigned = Settings(_env_file=None, DATABASE_URL="sqlite://", JWT_SECRET=None, SECRET_KEY=None)
        app.dependency_overrides[get_account_service] = lambda: AccountService(
            SqlAccountStore(self.db), self.uploader, unsigned
        )

        with self.assertLogs("app.api.v1.user", "ERROR"):
            resp = self.login()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), self.INTERNAL)
        self.assertNotIn("set-cookie", resp.headers)

    def test_insert_failure_after_upload(self) -> None:
        with patch.object(SqlAccountStore, "insert", side_effect=RuntimeError("db down")):
            with self.assertLogs("app.services.accounts", "ERROR") as logs:
                resp = self.register()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), self.INTERNAL)
        self.uploader.upload.assert_awaited_once()
        orphaned = [getattr(r, "orphaned_media_url", None) for r in logs.records]
        self.assertIn(PHOTO_URL, orphaned)
        self.assertEqual(count_accounts(self.db), 0)


class TestRootAndHealth(UserRoutesTestCase):

    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").json(), {"message": "API is running"})

    def test_health(self) -> None:
        body = self.client.get("/api/v1/health/").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")


class TestCors(UserRoutesTestCase):
    """The CORS interceptor echoes allowlisted origins only, with credentials."""

    ALLOWED = "http://localhost:5173"

    def test_allowed_origin(self) -> None:
        resp = self.client.get("/", headers={"Origin": self.ALLOWED})
        self.assertEqual(resp.headers.get("access-control-allow-origin"), self.ALLOWED)
        self.assertEqual(resp.headers.get("access-control-allow-credentials"), "true")

    def test_unknown_origin_gets_no_grant(self) -> None:
        resp = self.client.get("/", headers={"Origin": "https://evil.example.com"})
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("access-control-allow-origin", resp.headers)

    def test_preflight(self) -> None:
        headers = {"Access-Control-Request-Method": "POST"}
        allowed = self.client.options(f"{BASE}/login", headers={**headers, "Origin": self.ALLOWED})
        self.assertEqual(allowed.status_code, 200)
        self.assertEqual(allowed.headers.get("access-control-allow-origin"), self.ALLOWED)
        denied = self.client.options(
            f"{BASE}/login", headers={**headers, "Origin": "https://evil.example.com"}
        )
        self.assertEqual(denied.status_code, 400)


if __name__ == "__main__":
    unittest.main()
