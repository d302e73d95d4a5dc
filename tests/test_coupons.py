"""Cupons: cadastro com preço final limitado ao preço-base e resolução no checkout."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from convenio_core.adapters.config import composition_root as core_root
from convenio_core.core.application.handlers.coupon_handlers import ResolveCouponHandler
from convenio_core.core.application.queries.coupon_queries import ResolveCouponQuery
from convenio_core.core.domain.exceptions import CouponInvalidError
from convenio_core.core.domain.services.clock import FixedClock
from plugins.django_interface.models import Coupon
from tests.helpers.factories import auth, make_user

JSON = "application/json"


class CouponAdminTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")

    def create(self, **body):
        payload = {"code": "PROMO50", "target": "titular", "final_price": "300.00", **body}
        return self.client.post("/api/coupons", payload, content_type=JSON, **auth(self.admin))

    def test_create_computes_discount(self) -> None:
        resp = self.create()
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertEqual(body["final_price"], "300.00")
        self.assertEqual(body["discount_value"], "300.00")

    def test_dependent_coupon_discount_uses_dependent_base(self) -> None:
        resp = self.create(code="DEP100", target="dependente", final_price="100.00")
        self.assertEqual(resp.json()["discount_value"], "50.00")

    def test_final_price_above_base_is_rejected(self) -> None:
        resp = self.create(final_price="600.01")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "COUPON_PRICE_ABOVE_BASE")
        self.assertFalse(Coupon.objects.exists())

    def test_code_is_unique_case_insensitive(self) -> None:
        self.create()
        resp = self.create(code="promo50")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "COUPON_CODE_EXISTS")

    def test_update_recomputes_discount_and_keeps_bound(self) -> None:
        coupon_id = self.create().json()["id"]
        resp = self.client.patch(
            f"/api/coupons/{coupon_id}", {"final_price": "450.00"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["discount_value"], "150.00")

        over = self.client.patch(
            f"/api/coupons/{coupon_id}", {"final_price": "700.00"}, content_type=JSON, **auth(self.admin)
        )
        self.assertEqual(over.status_code, 400)
        self.assertEqual(Coupon.objects.get().final_price, Decimal("450.00"))

    def test_toggle_flips_active_flag(self) -> None:
        coupon_id = self.create().json()["id"]
        resp = self.client.post(f"/api/coupons/{coupon_id}/toggle", **auth(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["is_active"])

    def test_member_cannot_create(self) -> None:
        member = make_user("member")
        resp = self.client.post(
            "/api/coupons",
            {"code": "X", "target": "titular", "final_price": "1.00"},
            content_type=JSON,
            **auth(member),
        )
        self.assertEqual(resp.status_code, 403)

    def test_every_coupon_respects_base_price(self) -> None:
        self.create(code="A", final_price="0.00")
        self.create(code="B", final_price="600.00")
        self.create(code="C", target="dependente", final_price="150.00")
        self.create(code="D", target="dependente", final_price="151.00")
        bases = {"titular": Decimal("600.00"), "dependente": Decimal("150.00")}
        for coupon in Coupon.objects.all():
            self.assertLessEqual(coupon.final_price, bases[coupon.target], coupon.code)
            self.assertEqual(coupon.discount_value, bases[coupon.target] - coupon.final_price)
        self.assertEqual(Coupon.objects.count(), 3)


class CouponResolveTests(TestCase):
    def setUp(self) -> None:
        self.member = make_user("member")
        now = timezone.now()
        Coupon.objects.create(
            code="PROMO50", target="titular", final_price=Decimal("300.00"), discount_value=Decimal("300.00")
        )
        Coupon.objects.create(
            code="OFF", target="titular", final_price=Decimal("500.00"), discount_value=Decimal("100.00"),
            is_active=False,
        )
        Coupon.objects.create(
            code="OLD", target="titular", final_price=Decimal("500.00"), discount_value=Decimal("100.00"),
            valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1),
        )
        Coupon.objects.create(
            code="SOON", target="titular", final_price=Decimal("500.00"), discount_value=Decimal("100.00"),
            valid_from=now + timedelta(days=1),
        )

    def resolve(self, code: str, target: str = "titular"):
        return self.client.post(
            "/api/coupons/resolve", {"code": code, "target": target}, content_type=JSON, **auth(self.member)
        )

    def test_resolve_returns_quote(self) -> None:
        resp = self.resolve("promo50")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(
            resp.json(),
            {"code": "PROMO50", "target": "titular", "final_price": "300.00", "discount_value": "300.00"},
        )

    def test_invalid_coupons(self) -> None:
        cases = {
            "NADA": "COUPON_NOT_FOUND",
            "OFF": "COUPON_DISABLED",
            "OLD": "COUPON_EXPIRED",
            "SOON": "COUPON_NOT_STARTED",
        }
        for code, error in cases.items():
            with self.subTest(code=code):
                resp = self.resolve(code)
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["error"], error)

    def test_target_mismatch(self) -> None:
        resp = self.resolve("PROMO50", target="dependente")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "COUPON_TARGET_MISMATCH")

    def test_resolve_requires_authentication(self) -> None:
        resp = self.client.post(
            "/api/coupons/resolve", {"code": "PROMO50", "target": "titular"}, content_type=JSON
        )
        self.assertEqual(resp.status_code, 401)

    def test_window_bounds_are_inclusive(self) -> None:
        old = Coupon.objects.get(code="OLD")
        coupons = core_root.container.coupon_service()

        def resolve_at(instant):
            return ResolveCouponHandler(coupon_service=coupons, clock=FixedClock(instant)).handle(
                ResolveCouponQuery(code="OLD", target="titular")
            )

        self.assertEqual(resolve_at(old.valid_from).final_price, Decimal("500.00"))
        self.assertEqual(resolve_at(old.valid_until).final_price, Decimal("500.00"))
        with self.assertRaises(CouponInvalidError) as ctx:
            resolve_at(old.valid_until + timedelta(microseconds=1))
        self.assertEqual(ctx.exception.error, "COUPON_EXPIRED")
        with self.assertRaises(CouponInvalidError) as ctx:
            resolve_at(old.valid_from - timedelta(microseconds=1))
        self.assertEqual(ctx.exception.error, "COUPON_NOT_STARTED")
