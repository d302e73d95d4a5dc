"""Dependentes do titular: limite por titular e posse."""
from __future__ import annotations

from django.test import TestCase

from plugins.django_interface.models import Dependent
from tests.helpers.factories import auth, make_user

JSON = "application/json"


class DependentTests(TestCase):
    def setUp(self) -> None:
        self.member = make_user("member")
        self.admin = make_user("admin")

    def create(self, cpf: str, user=None, **body):
        payload = {"name": f"Dependente {cpf[-2:]}", "cpf": cpf, **body}
        return self.client.post("/api/dependents", payload, content_type=JSON, **auth(user or self.member))

    def test_member_creates_for_self(self) -> None:
        other = make_user("member")
        resp = self.create("55500000001", member_id=str(other.id))
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(resp.json()["member_id"], str(self.member.id), "member_id do corpo é ignorado")
        self.assertEqual(resp.json()["subscription_status"], "pending")

    def test_limit_of_ten_dependents(self) -> None:
        for i in range(10):
            self.assertEqual(self.create(f"5550000{i:04d}").status_code, 201)
        resp = self.create("55500009999")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "DEPENDENT_LIMIT")
        self.assertEqual(Dependent.objects.filter(member=self.member).count(), 10)

    def test_admin_must_name_member(self) -> None:
        resp = self.create("55500000003", user=self.admin)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "OWNER_REQUIRED")
        ok = self.create("55500000003", user=self.admin, member_id=str(self.member.id))
        self.assertEqual(ok.status_code, 201, ok.content)

    def test_member_cannot_touch_other_members_dependent(self) -> None:
        other = make_user("member")
        dep = Dependent.objects.create(member=other, name="Alheio", cpf="55500000004")
        resp = self.client.get(f"/api/dependents/{dep.id}", **auth(self.member))
        self.assertEqual(resp.status_code, 403)
        resp = self.client.delete(f"/api/dependents/{dep.id}", **auth(self.member))
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(Dependent.objects.filter(id=dep.id).exists())

    def test_list_returns_only_own(self) -> None:
        self.create("55500000005")
        Dependent.objects.create(member=make_user("member"), name="Outro", cpf="55500000006")
        resp = self.client.get("/api/dependents", **auth(self.member))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 1)

    def test_professional_is_forbidden(self) -> None:
        professional = make_user("professional")
        self.assertEqual(self.client.get("/api/dependents", **auth(professional)).status_code, 403)
