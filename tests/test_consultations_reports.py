"""Consultas do profissional e relatórios de repasse."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from plugins.django_interface.models import (
    AttendanceLocation,
    Consultation,
    PrivatePatient,
    SchedulingAccess,
)
from tests.helpers.factories import auth, make_professional, make_service, make_user

JSON = "application/json"
MONTH = {"start_date": "2025-03-01T00:00:00+00:00", "end_date": "2025-04-01T00:00:00+00:00"}


class ConsultationTestBase(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.professional = make_professional("70.00", name="Dra. Ana")
        self.member = make_user("member", name="João Titular")
        self.private = PrivatePatient.objects.create(professional=self.professional, name="Paciente Particular")
        self.service = make_service(base_price="100.00")

    def record(self, user=None, **body):
        payload = {
            "patient_kind": "member",
            "patient_id": str(self.member.id),
            "service_id": str(self.service.id),
            "date": "2025-03-10T14:00:00+00:00",
            **body,
        }
        return self.client.post("/api/consultations", payload, content_type=JSON, **auth(user or self.professional))


class ConsultationTests(ConsultationTestBase):
    def test_value_defaults_to_service_price(self) -> None:
        resp = self.record()
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertEqual(body["value"], "100.00")
        self.assertEqual(body["professional_id"], str(self.professional.id))
        self.assertEqual(body["patient_kind"], "member")

    def test_private_patient_of_other_professional_is_not_found(self) -> None:
        other = make_professional()
        foreign = PrivatePatient.objects.create(professional=other, name="Outro")
        resp = self.record(patient_kind="private", patient_id=str(foreign.id))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "PATIENT_NOT_FOUND")

    def test_location_must_belong_to_professional(self) -> None:
        other = make_professional()
        loc = AttendanceLocation.objects.create(professional=other, name="Sala", address="Rua A")
        resp = self.record(location_id=str(loc.id))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "LOCATION_NOT_OWNED")

    def test_cannot_create_as_cancelled(self) -> None:
        resp = self.record(status="cancelled")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "USE_CANCEL")

    def test_cancel_records_who_and_when(self) -> None:
        cid = self.record().json()["id"]
        resp = self.client.post(
            f"/api/consultations/{cid}/cancel", {"reason": "Paciente desmarcou"}, content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["status"], "cancelled")
        self.assertEqual(body["cancelled_by_id"], str(self.professional.id))
        self.assertEqual(body["cancellation_reason"], "Paciente desmarcou")
        self.assertIsNotNone(body["cancelled_at"])

        again = self.client.post(f"/api/consultations/{cid}/cancel", {}, content_type=JSON, **auth(self.professional))
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["error"], "ALREADY_CANCELLED")

    def test_patient_kind_is_immutable(self) -> None:
        cid = self.record().json()["id"]
        resp = self.client.patch(
            f"/api/consultations/{cid}",
            {"patient_kind": "private", "patient_id": str(self.private.id)},
            content_type=JSON,
            **auth(self.professional),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "PATIENT_KIND_IMMUTABLE")

    def test_write_without_scheduling_access_is_forbidden(self) -> None:
        SchedulingAccess.objects.filter(professional=self.professional).update(has_access=False, expires_at=None)
        resp = self.record()
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "NO_SCHEDULING_ACCESS")

    def test_expired_access_blocks_writes_but_not_reads(self) -> None:
        cid = self.record().json()["id"]
        SchedulingAccess.objects.filter(professional=self.professional).update(
            expires_at=timezone.now() - timedelta(minutes=1)
        )
        self.assertEqual(self.client.get(f"/api/consultations/{cid}", **auth(self.professional)).status_code, 200)
        self.assertEqual(self.record().status_code, 403)

    def test_professional_sees_only_own_consultations(self) -> None:
        self.record()
        other = make_professional()
        self.record(user=other)
        resp = self.client.get("/api/consultations", **auth(self.professional))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_items"], 1)

        admin_view = self.client.get("/api/consultations", **auth(self.admin))
        self.assertEqual(admin_view.json()["total_items"], 2)

    def test_admin_must_name_professional(self) -> None:
        resp = self.record(user=self.admin)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "OWNER_REQUIRED")
        ok = self.record(user=self.admin, professional_id=str(self.professional.id))
        self.assertEqual(ok.status_code, 201, ok.content)

    def test_member_cannot_record(self) -> None:
        self.assertEqual(self.record(user=self.member).status_code, 403)


class RecurringConsultationTests(ConsultationTestBase):
    def recurring(self, user=None, **body):
        payload = {
            "patient_kind": "member",
            "patient_id": str(self.member.id),
            "service_id": str(self.service.id),
            "date": "2025-01-31T14:00:00+00:00",
            "recurrence_type": "weekly",
            "occurrences": 4,
            **body,
        }
        return self.client.post(
            "/api/consultations/recurring", payload, content_type=JSON, **auth(user or self.professional)
        )

    def dates(self) -> list[datetime]:
        return list(Consultation.objects.order_by("date").values_list("date", flat=True))

    def test_weekly_series(self) -> None:
        resp = self.recurring(recurrence_interval=2)
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(resp.json()["created_count"], 4)
        start = datetime(2025, 1, 31, 14, tzinfo=dt_timezone.utc)
        self.assertEqual(self.dates(), [start + timedelta(weeks=2 * i) for i in range(4)])
        self.assertTrue(all(row["value"] == "100.00" for row in resp.json()["results"]))

    def test_monthly_series_clamps_to_month_end(self) -> None:
        resp = self.recurring(recurrence_type="monthly", occurrences=3)
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(
            [d.date().isoformat() for d in self.dates()], ["2025-01-31", "2025-02-28", "2025-03-31"]
        )

    def test_end_date_cuts_series(self) -> None:
        resp = self.recurring(recurrence_type="daily", occurrences=10, end_date="2025-02-02T23:59:59+00:00")
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(resp.json()["created_count"], 3)

    def test_end_date_before_start_is_validation_error(self) -> None:
        resp = self.recurring(end_date="2025-01-01T00:00:00+00:00")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "VALIDATION_ERROR")

    def test_invalid_reference_creates_nothing(self) -> None:
        other = make_professional()
        loc = AttendanceLocation.objects.create(professional=other, name="Sala", address="Rua A")
        resp = self.recurring(location_id=str(loc.id))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "LOCATION_NOT_OWNED")
        self.assertFalse(Consultation.objects.exists())

    def test_expired_access_blocks_series(self) -> None:
        SchedulingAccess.objects.filter(professional=self.professional).update(
            expires_at=timezone.now() - timedelta(hours=1)
        )
        resp = self.recurring()
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Consultation.objects.exists())

    def test_admin_must_name_professional(self) -> None:
        resp = self.recurring(user=self.admin)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "OWNER_REQUIRED")
        ok = self.recurring(user=self.admin, professional_id=str(self.professional.id), occurrences=2)
        self.assertEqual(ok.status_code, 201, ok.content)
        self.assertEqual(Consultation.objects.filter(professional=self.professional).count(), 2)


class RevenueReportTests(ConsultationTestBase):
    def setUp(self) -> None:
        super().setUp()
        base = datetime(2025, 3, 10, 14, tzinfo=dt_timezone.utc)
        self._consult("member", self.member, "100.00", base)
        self._consult("private", self.private, "80.00", base + timedelta(days=1))
        # fora do relatório: cancelada, agendada e fora da janela
        self._consult("member", self.member, "500.00", base, status="cancelled")
        self._consult("member", self.member, "500.00", base, status="scheduled")
        self._consult("member", self.member, "500.00", datetime(2025, 4, 1, tzinfo=dt_timezone.utc))

    def _consult(self, kind, patient, value, date, status="completed"):
        refs = {"member": None, "dependent": None, "private_patient": None}
        refs["private_patient" if kind == "private" else kind] = patient
        return Consultation.objects.create(
            professional=self.professional,
            patient_kind=kind,
            service=self.service,
            value=Decimal(value),
            date=date,
            status=status,
            **refs,
        )

    def test_revenue_split_for_month(self) -> None:
        resp = self.client.get("/api/reports/revenue", MONTH, **auth(self.admin))
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["consultations_count"], 2)
        self.assertEqual(body["total_revenue"], "180.00")
        self.assertEqual(body["total_professional_payment"], "150.00")
        self.assertEqual(body["total_clinic_revenue"], "30.00")

        row = body["revenue_by_professional"][0]
        self.assertEqual(row["professional_id"], str(self.professional.id))
        self.assertEqual(row["revenue"], "180.00")
        self.assertEqual(row["professional_payment"], "150.00")
        self.assertEqual(row["clinic_revenue"], "30.00")
        self.assertEqual((row["convenio_count"], row["private_count"]), (1, 1))

    def test_split_identity_holds_to_the_cent(self) -> None:
        base = datetime(2025, 3, 20, tzinfo=dt_timezone.utc)
        for value in ("33.33", "0.01", "99.99", "12.35"):
            self._consult("member", self.member, value, base)
        body = self.client.get("/api/reports/revenue", MONTH, **auth(self.admin)).json()
        self.assertEqual(
            Decimal(body["total_revenue"]),
            Decimal(body["total_professional_payment"]) + Decimal(body["total_clinic_revenue"]),
        )

    def test_professional_report_private_goes_fully_to_professional(self) -> None:
        resp = self.client.get("/api/reports/professional-revenue", MONTH, **auth(self.professional))
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["percentage"], "70.00")
        self.assertEqual(body["summary"]["convenio_revenue"], "100.00")
        self.assertEqual(body["summary"]["private_revenue"], "80.00")
        self.assertEqual(body["summary"]["professional_payment"], "150.00")
        for row in body["consultations"]:
            if row["patient_type"] == "private":
                self.assertEqual(row["professional_payment"], row["value"])
                self.assertEqual(row["clinic_revenue"], "0.00")

    def test_admin_professional_report_requires_professional_id(self) -> None:
        resp = self.client.get("/api/reports/professional-revenue", MONTH, **auth(self.admin))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "OWNER_REQUIRED")

        ok = self.client.get(
            "/api/reports/professional-revenue",
            {**MONTH, "professional_id": str(self.professional.id)},
            **auth(self.admin),
        )
        self.assertEqual(ok.status_code, 200)

    def test_cancelled_consultations_report(self) -> None:
        resp = self.client.get("/api/reports/cancelled-consultations", MONTH, **auth(self.professional))
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["count"], 1)

    def test_invalid_window_is_rejected(self) -> None:
        resp = self.client.get(
            "/api/reports/revenue",
            {"start_date": MONTH["end_date"], "end_date": MONTH["start_date"]},
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 400)

    def test_revenue_report_is_admin_only(self) -> None:
        self.assertEqual(
            self.client.get("/api/reports/revenue", MONTH, **auth(self.professional)).status_code, 403
        )
