"""Acesso à agenda dos profissionais: concessão, prorrogação e revogação pelo admin."""
from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from plugins.django_interface.models import SchedulingAccess
from tests.helpers.factories import auth, make_professional, make_user

JSON = "application/json"


class SchedulingAccessTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.professional = make_professional(with_access=False)

    def post(self, action: str, **body):
        body.setdefault("professional_id", str(self.professional.id))
        return self.client.post(f"/api/scheduling-access/{action}", body, content_type=JSON, **auth(self.admin))

    def in_days(self, days: int) -> str:
        return (timezone.now() + timedelta(days=days)).isoformat()

    def test_absent_access_view(self) -> None:
        resp = self.client.get(
            f"/api/professionals/{self.professional.id}/scheduling-access", **auth(self.professional)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["state"], "absent")
        self.assertFalse(resp.json()["has_access"])

    def test_grant_extend_revoke(self) -> None:
        granted = self.post("grant", expires_at=self.in_days(10), reason="Contrato mensal")
        self.assertEqual(granted.status_code, 200, granted.content)
        self.assertEqual(granted.json()["state"], "active")
        self.assertEqual(granted.json()["granted_by_id"], str(self.admin.id))
        self.assertIn(granted.json()["days_remaining"], (9, 10))

        extended = self.post("extend", expires_at=self.in_days(40))
        self.assertEqual(extended.status_code, 200, extended.content)
        self.assertIn(extended.json()["days_remaining"], (39, 40))

        revoked = self.post("revoke", reason="Fim do contrato")
        self.assertEqual(revoked.status_code, 200, revoked.content)
        self.assertEqual(revoked.json()["state"], "absent")
        self.assertIsNotNone(revoked.json()["revoked_at"])

    def test_grant_in_the_past_is_rejected(self) -> None:
        resp = self.post("grant", expires_at=self.in_days(-1))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "EXPIRY_IN_PAST")

    def test_grant_to_non_professional_is_not_found(self) -> None:
        member = make_user("member")
        resp = self.post("grant", professional_id=str(member.id), expires_at=self.in_days(5))
        self.assertEqual(resp.status_code, 404)

    def test_extend_must_be_later(self) -> None:
        self.post("grant", expires_at=self.in_days(10))
        resp = self.post("extend", expires_at=self.in_days(5))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "EXTEND_NOT_LATER")

    def test_extend_after_revoke_requires_new_grant(self) -> None:
        self.post("grant", expires_at=self.in_days(10))
        self.post("revoke")
        resp = self.post("extend", expires_at=self.in_days(30))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "ACCESS_REVOKED")

        regrant = self.post("grant", expires_at=self.in_days(30))
        self.assertEqual(regrant.json()["state"], "active")
        self.assertIsNone(SchedulingAccess.objects.get().revoked_at)

    def test_revoke_without_access_is_not_found(self) -> None:
        self.assertEqual(self.post("revoke").status_code, 404)

    def test_expired_access_reads_as_expired(self) -> None:
        SchedulingAccess.objects.create(
            professional=self.professional,
            has_access=True,
            expires_at=timezone.now() - timedelta(hours=1),
        )
        resp = self.client.get(
            f"/api/professionals/{self.professional.id}/scheduling-access", **auth(self.admin)
        )
        self.assertEqual(resp.json()["state"], "expired")
        self.assertEqual(resp.json()["days_remaining"], 0)

    def test_list_shows_every_professional(self) -> None:
        make_professional()
        resp = self.client.get("/api/scheduling-access", **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        states = sorted(row["access"]["state"] for row in resp.json())
        self.assertEqual(states, ["absent", "active"])

    def test_professional_cannot_grant_itself(self) -> None:
        resp = self.client.post(
            "/api/scheduling-access/grant",
            {"professional_id": str(self.professional.id), "expires_at": self.in_days(10)},
            content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 403)

    def test_professional_cannot_read_other_access(self) -> None:
        other = make_professional()
        resp = self.client.get(f"/api/professionals/{other.id}/scheduling-access", **auth(self.professional))
        self.assertEqual(resp.status_code, 403)
