"""Motor de assinaturas: ativação manual, pagamento de dependente e varredura de expiração."""
from __future__ import annotations

from datetime import timedelta
from datetime import timezone as dt_timezone
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from convenio_api.tasks import expire_subscriptions_task
from convenio_core.adapters.repositories.subscription_repo_impl import SubscriptionRepoImpl
from convenio_core.core.application.commands.subscription_commands import ExpireSubscriptionsCommand
from convenio_core.core.application.handlers.subscription_handlers import ExpireSubscriptionsHandler
from convenio_core.core.domain.services.clock import FixedClock
from plugins.django_interface.models import Dependent, SubscriptionPayment, User
from tests.helpers.factories import WEBHOOK_HEADERS, auth, make_user

JSON = "application/json"


class AdminActivationTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.member = make_user("member")

    def test_admin_activates_member(self) -> None:
        expires = timezone.now() + timedelta(days=90)
        resp = self.client.post(
            "/api/subscriptions/activate",
            {"member_id": str(self.member.id), "expires_at": expires.isoformat()},
            content_type=JSON,
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "active")
        self.assertEqual(self.member.subscription_expiry, expires)
        self.assertTrue(self.member.has_been_active)

    def test_expiry_in_the_past_is_rejected(self) -> None:
        resp = self.client.post(
            "/api/subscriptions/activate",
            {"member_id": str(self.member.id), "expires_at": (timezone.now() - timedelta(days=1)).isoformat()},
            content_type=JSON,
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "EXPIRY_IN_PAST")

    def test_member_cannot_activate(self) -> None:
        resp = self.client.post(
            "/api/subscriptions/activate",
            {"member_id": str(self.member.id), "expires_at": (timezone.now() + timedelta(days=1)).isoformat()},
            content_type=JSON,
            **auth(self.member),
        )
        self.assertEqual(resp.status_code, 403)

    def test_unknown_member_is_not_found(self) -> None:
        resp = self.client.post(
            "/api/subscriptions/activate",
            {"member_id": "6f1c1d2e-0000-4000-8000-000000000000",
             "expires_at": (timezone.now() + timedelta(days=1)).isoformat()},
            content_type=JSON,
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 404)

    def test_member_reads_own_subscription_only(self) -> None:
        own = self.client.get(f"/api/subscriptions/{self.member.id}", **auth(self.member))
        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.json()["status"], "pending")
        self.assertIsNone(own.json()["expires_at"])

        other = make_user("member")
        resp = self.client.get(f"/api/subscriptions/{other.id}", **auth(self.member))
        self.assertEqual(resp.status_code, 403)


class DependentPaymentTests(TestCase):
    def setUp(self) -> None:
        self.member = make_user("member")
        self.dependent = Dependent.objects.create(member=self.member, name="Filho", cpf="99988877766")

    def pay(self, amount: str, reference: str, **extra):
        body = {
            "user_id": str(self.member.id),
            "amount_paid": amount,
            "payment_reference": reference,
            "target": "dependente",
            "dependent_id": str(self.dependent.id),
            **extra,
        }
        return self.client.post("/api/subscriptions/payment-confirmed", body, content_type=JSON, **WEBHOOK_HEADERS)

    def test_dependent_payment_activates_for_one_year(self) -> None:
        resp = self.pay("150.00", "DEP-1")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.dependent.refresh_from_db()
        self.assertEqual(self.dependent.subscription_status, "active")
        self.assertGreater(self.dependent.subscription_expiry, timezone.now() + timedelta(days=364))
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "pending", "titular não muda com o dependente")

    def test_dependent_paid_with_member_price_is_mismatch(self) -> None:
        resp = self.pay("600.00", "DEP-2")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "PAYMENT_MISMATCH")

    def test_dependent_id_is_required(self) -> None:
        resp = self.client.post(
            "/api/subscriptions/payment-confirmed",
            {"user_id": str(self.member.id), "amount_paid": "150.00", "payment_reference": "DEP-3",
             "target": "dependente"},
            content_type=JSON,
            **WEBHOOK_HEADERS,
        )
        self.assertEqual(resp.status_code, 400)

    def test_dependent_of_other_member_is_rejected(self) -> None:
        other = make_user("member")
        resp = self.pay("150.00", "DEP-4", user_id=str(other.id))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "DEPENDENT_OWNER_MISMATCH")

    def test_reference_reused_with_other_payload_is_conflict(self) -> None:
        self.assertEqual(self.pay("150.00", "DEP-5").status_code, 200)
        resp = self.client.post(
            "/api/subscriptions/payment-confirmed",
            {"user_id": str(self.member.id), "amount_paid": "600.00", "payment_reference": "DEP-5",
             "target": "titular"},
            content_type=JSON,
            **WEBHOOK_HEADERS,
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "PAYMENT_REFERENCE_REUSED")
        self.assertEqual(SubscriptionPayment.objects.count(), 1)

    def test_member_reads_dependent_subscription(self) -> None:
        self.pay("150.00", "DEP-6")
        resp = self.client.get(f"/api/subscriptions/dependents/{self.dependent.id}", **auth(self.member))
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["status"], "active")
        self.assertEqual(resp.json()["member_id"], str(self.member.id))


class ExpireSweepTests(TestCase):
    def setUp(self) -> None:
        self.expiry = timezone.now() - timedelta(seconds=1)
        self.member = make_user(
            "member",
            subscription_status="active",
            subscription_expiry=self.expiry,
            has_been_active=True,
        )
        self.current = make_user(
            "member",
            subscription_status="active",
            subscription_expiry=timezone.now() + timedelta(days=10),
            has_been_active=True,
        )
        self.dependent = Dependent.objects.create(
            member=self.current,
            name="Dep",
            cpf="11122233344",
            subscription_status="active",
            subscription_expiry=self.expiry,
        )

    def test_sweep_expires_due_and_preserves_expiry(self) -> None:
        result = expire_subscriptions_task.apply().get()
        self.assertEqual(result["members"], 1)
        self.assertEqual(result["dependents"], 1)

        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "expired")
        self.assertEqual(self.member.subscription_expiry, self.expiry)
        self.current.refresh_from_db()
        self.assertEqual(self.current.subscription_status, "active")
        self.dependent.refresh_from_db()
        self.assertEqual(self.dependent.subscription_status, "expired")

    def test_second_sweep_is_noop(self) -> None:
        expire_subscriptions_task.apply().get()
        result = expire_subscriptions_task.apply().get()
        self.assertEqual(result["members"], 0)
        self.assertEqual(result["dependents"], 0)

    def test_active_iff_expiry_in_future_after_sweep(self) -> None:
        call_command("expire_subscriptions", stdout=StringIO())
        now = timezone.now()
        for user in User.objects.filter(subscription_status__in=["active", "expired"]):
            self.assertEqual(
                user.subscription_status == "active",
                user.subscription_expiry > now,
                f"status incoerente para {user.email}",
            )

    def test_command_accepts_reference_instant(self) -> None:
        later = (timezone.now() + timedelta(days=30)).isoformat()
        out = StringIO()
        call_command("expire_subscriptions", "--now", later, stdout=out)
        self.current.refresh_from_db()
        self.assertEqual(self.current.subscription_status, "expired")
        self.assertIn("expire_sweep", out.getvalue())

    def test_expired_member_reactivates_by_payment(self) -> None:
        expire_subscriptions_task.apply().get()
        resp = self.client.post(
            "/api/subscriptions/payment-confirmed",
            {"user_id": str(self.member.id), "amount_paid": "600.00", "payment_reference": "REN-1",
             "target": "titular"},
            content_type=JSON,
            **WEBHOOK_HEADERS,
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "active")
        self.assertGreater(self.member.subscription_expiry, timezone.now())

    def test_task_reads_naive_reference_as_utc(self) -> None:
        later = (timezone.now() + timedelta(days=30)).astimezone(dt_timezone.utc).replace(tzinfo=None)
        result = expire_subscriptions_task.apply(kwargs={"now": later.isoformat()}).get()
        self.assertEqual(result["members"], 2)
        self.assertEqual(result["dependents"], 1)

    def test_sweep_uses_injected_clock(self) -> None:
        instant = timezone.now() + timedelta(days=11)
        handler = ExpireSubscriptionsHandler(repo=SubscriptionRepoImpl(), clock=FixedClock(instant))
        outcome = handler.handle(ExpireSubscriptionsCommand())
        self.assertEqual(outcome.result["swept_at"], instant)
        self.assertEqual(outcome.result["members"], 2)
        self.current.refresh_from_db()
        self.assertEqual(self.current.subscription_status, "expired")
