"""
Fluxo de afiliados de ponta a ponta: clique → cadastro → pagamento →
comissão → baixa manual.
"""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from convenio_core.core.domain.exceptions import ValidationError
from plugins.django_interface.models import (
    Affiliate,
    Commission,
    Coupon,
    ReferralEvent,
    ReferredUser,
    SubscriptionPayment,
    User,
)
from tests.helpers.factories import WEBHOOK_HEADERS, auth, make_affiliate, make_user

JSON = "application/json"


class AffiliateFlowTestBase(TestCase):
    def setUp(self) -> None:
        self.affiliate = make_affiliate("AFF1", "10.00")
        self.admin = make_user("admin")

    # ——— atalhos ———
    def click(self, code: str, visitor: str, **metadata):
        return self.client.post(
            "/api/referrals/click",
            {"referral_code": code, "visitor_identifier": visitor, "metadata": metadata},
            content_type=JSON,
        )

    def register(self, visitor: str | None = None, email: str = "titular@example.com", cpf: str = "12345678901"):
        body = {"name": "Titular", "cpf": cpf, "email": email, "password": "senha123"}
        if visitor:
            body["visitor_identifier"] = visitor
        resp = self.client.post("/api/auth/register", body, content_type=JSON)
        self.assertEqual(resp.status_code, 201, resp.content)
        return User.objects.get(id=resp.json()["id"])

    def pay(self, user, amount: str, reference: str, coupon: str | None = None):
        body = {
            "user_id": str(user.id),
            "amount_paid": amount,
            "payment_reference": reference,
            "target": "titular",
        }
        if coupon:
            body["coupon_code"] = coupon
        return self.client.post(
            "/api/subscriptions/payment-confirmed", body, content_type=JSON, **WEBHOOK_HEADERS
        )

    def referred_member(self, visitor: str = "visitor-1", **kwargs):
        self.assertTrue(self.click("AFF1", visitor).json()["tracked"])
        return self.register(visitor, **kwargs)


class ReferralClickTests(AffiliateFlowTestBase):
    def test_unknown_code_is_not_tracked(self) -> None:
        resp = self.click("NAOEXISTE", "v-1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"tracked": False})
        self.assertEqual(ReferralEvent.objects.count(), 0)

    def test_inactive_affiliate_is_not_tracked(self) -> None:
        make_affiliate("OFF1", status="inactive")
        self.assertFalse(self.click("OFF1", "v-1").json()["tracked"])

    def test_code_is_case_insensitive(self) -> None:
        self.assertTrue(self.click("aff1", "v-1").json()["tracked"])

    def test_legacy_affiliate_id_reference(self) -> None:
        self.assertTrue(self.click(str(self.affiliate.id), "v-1").json()["tracked"])
        event = ReferralEvent.objects.get()
        self.assertEqual(event.affiliate_id, self.affiliate.id)

    def test_same_day_clicks_are_coalesced(self) -> None:
        self.click("AFF1", "v-1", utm_source="instagram")
        self.click("AFF1", "v-1", utm_campaign="black-friday")
        event = ReferralEvent.objects.get(stage="click")
        self.assertEqual(event.metadata["hits"], 2)
        self.assertEqual(event.metadata["utm_source"], "instagram")
        self.assertEqual(event.metadata["utm_campaign"], "black-friday")

    def test_blank_visitor_is_validation_error(self) -> None:
        resp = self.click("AFF1", "   ")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "VALIDATION_ERROR")

    def test_non_mapping_metadata_is_validation_error(self) -> None:
        resp = self.client.post(
            "/api/referrals/click",
            {"referral_code": "AFF1", "visitor_identifier": "v-1", "metadata": "abc"},
            content_type=JSON,
        )
        self.assertEqual(resp.status_code, 400, resp.content)
        self.assertEqual(resp.json()["error"], "VALIDATION_ERROR")
        self.assertFalse(ReferralEvent.objects.exists())

    def test_user_agent_is_merged_into_metadata(self) -> None:
        self.client.post(
            "/api/referrals/click",
            {"referral_code": "AFF1", "visitor_identifier": "v-1"},
            content_type=JSON,
            HTTP_USER_AGENT="Mozilla/5.0",
        )
        self.assertEqual(ReferralEvent.objects.get().metadata["user_agent"], "Mozilla/5.0")


class AttributionTests(AffiliateFlowTestBase):
    def test_registration_promotes_click(self) -> None:
        user = self.referred_member("v-1")
        attribution = ReferredUser.objects.get(user=user)
        self.assertEqual(attribution.affiliate_id, self.affiliate.id)
        self.assertTrue(
            ReferralEvent.objects.filter(stage="registration", linked_user=user).exists(),
            "clique deveria virar cadastro",
        )

    def test_registration_without_click_has_no_attribution(self) -> None:
        user = self.register("v-sem-clique")
        self.assertFalse(ReferredUser.objects.filter(user=user).exists())

    def test_earliest_click_wins(self) -> None:
        other = make_affiliate("AFF2")
        self.click("AFF1", "v-1")
        self.click("AFF2", "v-1")
        user = self.register("v-1")
        self.assertEqual(ReferredUser.objects.get(user=user).affiliate_id, self.affiliate.id)
        self.assertNotEqual(self.affiliate.id, other.id)

    def test_attribution_is_write_once(self) -> None:
        user = self.referred_member("v-1")
        make_affiliate("AFF2")
        self.click("AFF2", "v-1")
        self.click("AFF2", "v-2")
        self.assertEqual(ReferredUser.objects.filter(user=user).count(), 1)
        self.assertEqual(ReferredUser.objects.get(user=user).affiliate_id, self.affiliate.id)


class ConversionTests(AffiliateFlowTestBase):
    def test_payment_activates_and_accrues_commission(self) -> None:
        user = self.referred_member()
        before = timezone.now()
        resp = self.pay(user, "600.00", "PAY-1")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["status"], "active")

        user.refresh_from_db()
        self.assertEqual(user.subscription_status, "active")
        self.assertGreater(user.subscription_expiry, before + timedelta(days=364))
        self.assertLess(user.subscription_expiry, timezone.now() + timedelta(days=367))

        commission = Commission.objects.get()
        self.assertEqual(commission.affiliate_id, self.affiliate.id)
        self.assertEqual(commission.source_user_id, user.id)
        self.assertEqual(commission.amount, Decimal("10.00"))
        self.assertEqual(commission.status, "pending")
        self.assertTrue(ReferralEvent.objects.filter(stage="conversion", linked_user=user).exists())

    def test_payment_replay_is_idempotent(self) -> None:
        user = self.referred_member()
        self.assertEqual(self.pay(user, "600.00", "PAY-1").status_code, 200)
        user.refresh_from_db()
        expiry = user.subscription_expiry

        second = self.pay(user, "600.00", "PAY-1")
        self.assertEqual(second.status_code, 200)
        user.refresh_from_db()
        self.assertEqual(user.subscription_expiry, expiry, "replay não pode renovar a validade")
        self.assertEqual(Commission.objects.count(), 1)
        self.assertEqual(SubscriptionPayment.objects.count(), 1)
        self.assertEqual(ReferralEvent.objects.filter(stage="conversion").count(), 1)

    def test_renewal_does_not_accrue_second_commission(self) -> None:
        user = self.referred_member()
        self.pay(user, "600.00", "PAY-1")
        self.assertEqual(self.pay(user, "600.00", "PAY-2").status_code, 200)
        self.assertEqual(Commission.objects.filter(source_user=user).count(), 1)

    def test_admin_activation_accrues_commission_once(self) -> None:
        user = self.referred_member()
        body = {"member_id": str(user.id), "expires_at": (timezone.now() + timedelta(days=180)).isoformat()}

        first = self.client.post("/api/subscriptions/activate", body, content_type=JSON, **auth(self.admin))
        self.assertEqual(first.status_code, 200, first.content)
        commission = Commission.objects.get()
        self.assertEqual(commission.source_user_id, user.id)
        self.assertEqual(commission.amount, Decimal("10.00"))
        self.assertEqual(commission.status, "pending")
        self.assertTrue(ReferralEvent.objects.filter(stage="conversion", linked_user=user).exists())

        again = self.client.post("/api/subscriptions/activate", body, content_type=JSON, **auth(self.admin))
        self.assertEqual(again.status_code, 200, again.content)
        self.assertEqual(Commission.objects.count(), 1)
        self.assertEqual(ReferralEvent.objects.filter(stage="conversion").count(), 1)

    def test_commission_amount_change_keeps_accrued_rows(self) -> None:
        first = self.referred_member("v-1")
        self.pay(first, "600.00", "PAY-1")

        resp = self.client.put(
            f"/api/affiliates/{self.affiliate.id}", {"commission_amount": "25.00"}, content_type=JSON,
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["commission_amount"], "25.00")
        self.assertEqual(Commission.objects.get(source_user=first).amount, Decimal("10.00"))

        second = self.referred_member("v-2", email="segundo@example.com", cpf="10987654321")
        self.pay(second, "600.00", "PAY-2")
        self.assertEqual(Commission.objects.get(source_user=second).amount, Decimal("25.00"))
        self.assertEqual(Commission.objects.get(source_user=first).amount, Decimal("10.00"))

    def test_coupon_payment_still_accrues_commission(self) -> None:
        Coupon.objects.create(
            code="PROMO50", target="titular", final_price=Decimal("300.00"), discount_value=Decimal("300.00")
        )
        user = self.referred_member()
        resp = self.pay(user, "300.00", "PAY-2", coupon="PROMO50")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(Commission.objects.get().amount, Decimal("10.00"))

    def test_amount_mismatch_rolls_back_everything(self) -> None:
        Coupon.objects.create(
            code="PROMO50", target="titular", final_price=Decimal("300.00"), discount_value=Decimal("300.00")
        )
        user = self.referred_member()
        resp = self.pay(user, "250.00", "PAY-3", coupon="PROMO50")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "PAYMENT_MISMATCH")

        user.refresh_from_db()
        self.assertEqual(user.subscription_status, "pending")
        self.assertIsNone(user.subscription_expiry)
        self.assertEqual(Commission.objects.count(), 0)
        self.assertEqual(SubscriptionPayment.objects.count(), 0)
        self.assertFalse(ReferralEvent.objects.filter(stage="conversion").exists())

    def test_payment_without_webhook_secret_is_rejected(self) -> None:
        user = self.register()
        resp = self.client.post(
            "/api/subscriptions/payment-confirmed",
            {"user_id": str(user.id), "amount_paid": "600.00", "payment_reference": "X", "target": "titular"},
            content_type=JSON,
        )
        self.assertIn(resp.status_code, (401, 403))

    def test_unreferred_member_has_no_commission(self) -> None:
        user = self.register()
        self.assertEqual(self.pay(user, "600.00", "PAY-1").status_code, 200)
        self.assertEqual(Commission.objects.count(), 0)


class CommissionPaymentTests(AffiliateFlowTestBase):
    def setUp(self) -> None:
        super().setUp()
        self.member = self.referred_member()
        self.pay(self.member, "600.00", "PAY-1")
        self.commission = Commission.objects.get()
        self.url = f"/api/affiliates/{self.affiliate.id}/commissions/{self.commission.id}/pay"

    def test_mark_paid_then_already_paid(self) -> None:
        resp = self.client.put(
            self.url, {"paid_method": "Pix", "receipt": "R1"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["status"], "paid")
        self.assertEqual(body["receipt_reference"], "R1")
        self.assertIsNotNone(body["paid_at"])

        again = self.client.put(
            self.url, {"paid_method": "Pix", "receipt": "R1"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(again.status_code, 409)

    def test_paid_method_is_required(self) -> None:
        resp = self.client.put(self.url, {"paid_method": "  "}, content_type=JSON, **auth(self.admin))
        self.assertEqual(resp.status_code, 400)
        self.commission.refresh_from_db()
        self.assertEqual(self.commission.status, "pending")

    def test_commission_of_other_affiliate_is_not_found(self) -> None:
        other = make_affiliate("AFF9")
        resp = self.client.put(
            f"/api/affiliates/{other.id}/commissions/{self.commission.id}/pay",
            {"paid_method": "Pix"},
            content_type=JSON,
            **auth(self.admin),
        )
        self.assertEqual(resp.status_code, 404)

    def test_affiliate_cannot_pay_own_commission(self) -> None:
        resp = self.client.put(
            self.url, {"paid_method": "Pix"}, content_type=JSON, **auth(self.affiliate.user)
        )
        self.assertEqual(resp.status_code, 403)

    def test_paid_commission_is_immutable(self) -> None:
        self.client.put(self.url, {"paid_method": "Pix"}, content_type=JSON, **auth(self.admin))
        commission = Commission.objects.get()
        commission.amount = Decimal("99.00")
        with self.assertRaises(ValidationError):
            commission.save()
        commission.refresh_from_db()
        self.assertEqual(commission.amount, Decimal("10.00"))


class AffiliateReadsTests(AffiliateFlowTestBase):
    def setUp(self) -> None:
        super().setUp()
        self.member = self.referred_member()
        self.pay(self.member, "600.00", "PAY-1")
        now = timezone.now()
        self.window = {
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        }

    def test_dashboard_counts_funnel(self) -> None:
        resp = self.client.get("/api/affiliate/dashboard", **auth(self.affiliate.user))
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["stats"], {"clicks": 1, "registrations": 1, "conversions": 1})
        self.assertEqual(body["totals"]["pending_total"], "10.00")
        self.assertEqual(len(body["referred_users"]), 1)
        self.assertTrue(body["referred_users"][0]["converted"])
        self.assertEqual(body["commissions"]["total_items"], 1)
        self.assertEqual(body["commissions"]["results"][0]["amount"], "10.00")

    def test_dashboard_pages_commissions(self) -> None:
        resp = self.client.get("/api/affiliate/dashboard", {"page": 2, "page_size": 1}, **auth(self.affiliate.user))
        self.assertEqual(resp.status_code, 200, resp.content)
        commissions = resp.json()["commissions"]
        self.assertEqual(commissions["page"], 2)
        self.assertEqual(commissions["total_items"], 1)
        self.assertEqual(commissions["results"], [])

    def test_dashboard_requires_affiliate_role(self) -> None:
        resp = self.client.get("/api/affiliate/dashboard", **auth(self.member))
        self.assertEqual(resp.status_code, 403)

    def test_affiliate_reads_own_commissions_only(self) -> None:
        own = self.client.get(f"/api/affiliates/{self.affiliate.id}/commissions", **auth(self.affiliate.user))
        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.json()["total_items"], 1)

        other = make_affiliate("AFF2")
        resp = self.client.get(f"/api/affiliates/{self.affiliate.id}/commissions", **auth(other.user))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "NOT_OWNER")

    def test_financial_report(self) -> None:
        resp = self.client.get("/api/reports/affiliates", self.window, **auth(self.admin))
        self.assertEqual(resp.status_code, 200, resp.content)
        body = resp.json()
        self.assertEqual(body["stats"]["total_pending"], "10.00")
        self.assertEqual(body["stats"]["total_paid"], "0.00")
        self.assertEqual(body["stats"]["total_affiliates"], Affiliate.objects.count())
        row = body["affiliates"][0]
        self.assertEqual(row["referral_code"], "AFF1")
        self.assertEqual(row["clients_count"], 1)

    def test_commissions_by_period(self) -> None:
        resp = self.client.get("/api/commissions", {**self.window, "status": "pending"}, **auth(self.admin))
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["count"], 1)

        paid = self.client.get("/api/commissions", {**self.window, "status": "paid"}, **auth(self.admin))
        self.assertEqual(paid.json()["count"], 0)

    def test_create_affiliate_generates_code_and_grants_role(self) -> None:
        user = make_user(name="Maria Souza")
        resp = self.client.post("/api/affiliates", {"user_id": str(user.id)}, content_type=JSON, **auth(self.admin))
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertTrue(body["referral_code"].startswith("MARIAS"))
        self.assertEqual(body["commission_amount"], "10.00")
        self.assertTrue(user.roles.filter(role="affiliate").exists())

    def test_create_affiliate_twice_is_conflict(self) -> None:
        resp = self.client.post(
            "/api/affiliates", {"user_id": str(self.affiliate.user_id)}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "AFFILIATE_EXISTS")
