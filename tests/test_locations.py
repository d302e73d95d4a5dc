"""Locais de atendimento e pacientes particulares do profissional."""
from __future__ import annotations

from django.test import TestCase

from plugins.django_interface.models import AttendanceLocation, PrivatePatient
from tests.helpers.factories import auth, make_professional, make_user

JSON = "application/json"


class AttendanceLocationTests(TestCase):
    def setUp(self) -> None:
        self.professional = make_professional()

    def create(self, name: str, **body):
        return self.client.post(
            "/api/attendance-locations",
            {"name": name, "address": "Rua das Flores, 10", **body},
            content_type=JSON,
            **auth(self.professional),
        )

    def test_single_default_per_professional(self) -> None:
        first = self.create("Consultório Centro", is_default=True).json()
        second = self.create("Consultório Norte", is_default=True).json()
        self.assertTrue(second["is_default"])
        self.assertFalse(AttendanceLocation.objects.get(id=first["id"]).is_default)
        self.assertEqual(
            AttendanceLocation.objects.filter(professional=self.professional, is_default=True).count(), 1
        )

    def test_update_to_default_moves_flag(self) -> None:
        first = self.create("A", is_default=True).json()
        second = self.create("B").json()
        resp = self.client.patch(
            f"/api/attendance-locations/{second['id']}", {"is_default": True}, content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertFalse(AttendanceLocation.objects.get(id=first["id"]).is_default)

    def test_list_puts_default_first(self) -> None:
        self.create("A")
        self.create("Z", is_default=True)
        resp = self.client.get("/api/attendance-locations", **auth(self.professional))
        self.assertEqual([row["name"] for row in resp.json()], ["Z", "A"])

    def test_other_professional_cannot_edit(self) -> None:
        loc_id = self.create("A").json()["id"]
        other = make_professional()
        resp = self.client.patch(
            f"/api/attendance-locations/{loc_id}", {"name": "Invadido"}, content_type=JSON, **auth(other)
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "NOT_OWNER")

    def test_member_is_forbidden(self) -> None:
        member = make_user("member")
        self.assertEqual(self.client.get("/api/attendance-locations", **auth(member)).status_code, 403)


class PrivatePatientTests(TestCase):
    def setUp(self) -> None:
        self.professional = make_professional()

    def test_professional_registers_and_lists_own_patients(self) -> None:
        resp = self.client.post(
            "/api/private-patients",
            {"name": "Carla", "email": "carla@example.com"},
            content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 201, resp.content)
        PrivatePatient.objects.create(professional=make_professional(), name="De outro")

        listing = self.client.get("/api/private-patients", **auth(self.professional))
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.json()["total_items"], 1)
        self.assertEqual(listing.json()["results"][0]["name"], "Carla")

    def test_invalid_email_is_validation_error(self) -> None:
        resp = self.client.post(
            "/api/private-patients", {"name": "Carla", "email": "nao-e-email"}, content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "VALIDATION_ERROR")
