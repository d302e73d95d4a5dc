"""Tests for registration, bearer tokens and role administration."""

from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from convenio_core.adapters.security.hash_service import HashService
from convenio_core.adapters.security.jwt_service import JWTService
from plugins.django_interface.models import User, UserRole
from tests.helpers.factories import auth, make_user

JSON = "application/json"


class RegisterTests(TestCase):
    def register(self, **body):
        payload = {
            "name": "Maria",
            "cpf": "12345678901",
            "email": "Maria@Example.com",
            "password": "secret123",
            **body,
        }
        return self.client.post(reverse("register"), payload, content_type=JSON)

    def test_register_creates_pending_member(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertEqual(body["roles"], ["member"])
        self.assertEqual(body["email"], "maria@example.com")
        self.assertNotIn("password_hash", body)

        user = User.objects.get(id=body["id"])
        self.assertEqual(user.subscription_status, "pending")
        self.assertTrue(HashService.verify("secret123", user.password_hash), "senha não confere com o hash")

    def test_duplicate_email_is_conflict(self) -> None:
        self.register()
        resp = self.register(cpf="10987654321", email="maria@example.com")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "USER_EXISTS")

    def test_short_password_is_validation_error(self) -> None:
        resp = self.register(password="123")
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["error"], "VALIDATION_ERROR")
        self.assertIn("password", body["message"])


class TokenTests(TestCase):
    def test_me_with_bearer_token(self) -> None:
        user = make_user("member")
        token = JWTService.create_token(str(user.id), ["member"])
        payload = JWTService.decode_token(token)
        self.assertEqual(payload["sub"], str(user.id))

        resp = self.client.get(reverse("me"), HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["user"]["id"], str(user.id))
        self.assertEqual(resp.json()["subscription"]["status"], "pending")

    def test_me_for_non_member_has_no_subscription(self) -> None:
        admin = make_user("admin")
        resp = self.client.get(reverse("me"), **auth(admin))
        self.assertIsNone(resp.json()["subscription"])

    def test_missing_token_is_401_with_message(self) -> None:
        resp = self.client.get(reverse("me"))
        self.assertEqual(resp.status_code, 401)
        self.assertIn("message", resp.json())

    def test_invalid_token_is_401(self) -> None:
        resp = self.client.get(reverse("me"), HTTP_AUTHORIZATION="Bearer nao-e-um-jwt")
        self.assertEqual(resp.status_code, 401)

    def test_expired_token_is_401(self) -> None:
        user = make_user("member")
        token = JWTService.create_token(str(user.id), ["member"], expires_in=-10)
        resp = self.client.get(reverse("me"), HTTP_AUTHORIZATION=f"Bearer {token}")
        self.assertEqual(resp.status_code, 401)

    def test_inactive_user_is_401(self) -> None:
        user = make_user("member", is_active=False)
        self.assertEqual(self.client.get(reverse("me"), **auth(user)).status_code, 401)

    def test_roles_come_from_database_not_token(self) -> None:
        user = make_user("member")
        forged = JWTService.create_token(str(user.id), ["admin"])
        resp = self.client.get("/api/users", HTTP_AUTHORIZATION=f"Bearer {forged}")
        self.assertEqual(resp.status_code, 403)
        self.assertIn("message", resp.json())

    def test_healthz_is_public(self) -> None:
        resp = self.client.get(reverse("healthz"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})


class RoleAdminTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.user = make_user("member")

    def test_grant_and_revoke_role(self) -> None:
        resp = self.client.post(
            f"/api/users/{self.user.id}/roles", {"role": "professional"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertIn("professional", resp.json()["roles"])

        resp = self.client.delete(f"/api/users/{self.user.id}/roles/professional", **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("professional", resp.json()["roles"])

    def test_unknown_role_is_validation_error(self) -> None:
        resp = self.client.post(
            f"/api/users/{self.user.id}/roles", {"role": "superuser"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(resp.status_code, 400)

    def test_last_admin_cannot_revoke_itself(self) -> None:
        resp = self.client.delete(f"/api/users/{self.admin.id}/roles/admin", **auth(self.admin))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "LAST_ADMIN")
        self.assertTrue(UserRole.objects.filter(user=self.admin, role="admin").exists())

    def test_admin_can_step_down_when_another_exists(self) -> None:
        make_user("admin")
        resp = self.client.delete(f"/api/users/{self.admin.id}/roles/admin", **auth(self.admin))
        self.assertEqual(resp.status_code, 200, resp.content)

    def test_list_users_filters_by_role(self) -> None:
        resp = self.client.get("/api/users", {"role": "member"}, **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_items"], 1)
        self.assertEqual(resp.json()["results"][0]["id"], str(self.user.id))

    def test_member_cannot_list_users(self) -> None:
        resp = self.client.get("/api/users", **auth(self.user))
        self.assertEqual(resp.status_code, 403)


class SeedAdminCommandTests(TestCase):
    def test_seed_admin_is_idempotent(self) -> None:
        args = ["--email", "admin@example.com", "--password", "secret123", "--cpf", "00011122233"]
        call_command("seed_admin", *args, stdout=StringIO())
        call_command("seed_admin", *args, stdout=StringIO())

        user = User.objects.get(email="admin@example.com")
        self.assertEqual(
            set(UserRole.objects.filter(user=user).values_list("role", flat=True)), {"member", "admin"}
        )
