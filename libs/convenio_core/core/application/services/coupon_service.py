from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from convenio_core.core.application.services.revenue_split_service import round_money
from convenio_core.core.domain.entities.coupon_entity import CouponQuote
from convenio_core.core.domain.exceptions import CouponInvalidError, ValidationError
from convenio_core.core.domain.repositories.coupon_repository import CouponRepository
from convenio_core.core.domain.services.pricing import SubscriptionPricing


class CouponService:
    """Resolução de cupons e cálculo do preço esperado no checkout."""

    def __init__(self, repo: CouponRepository, pricing: SubscriptionPricing):
        self.repo = repo
        self.pricing = pricing

    def resolve(self, code: str, target: str, now: datetime) -> CouponQuote:
        coupon = self.repo.find_by_code(code.strip()) if code else None
        if coupon is None:
            raise CouponInvalidError("Cupom não encontrado.", error="COUPON_NOT_FOUND")
        coupon.ensure_applicable(target, now)
        return CouponQuote(
            code=coupon.code,
            target=coupon.target,
            final_price=coupon.final_price,
            discount_value=coupon.discount_value,
        )

    def expected_price(self, target: str, coupon_code: str | None, now: datetime) -> Decimal:
        if coupon_code:
            return round_money(self.resolve(coupon_code, target, now).final_price)
        return round_money(self.pricing.base_for(target))

    def discount_for(self, target: str, final_price: Decimal) -> Decimal:
        """`base − final`; rejeita preço final acima do preço-base ou negativo."""
        base = round_money(self.pricing.base_for(target))
        final_price = round_money(Decimal(final_price))
        if final_price < 0:
            raise ValidationError("Preço final não pode ser negativo.", error="COUPON_PRICE_NEGATIVE")
        if final_price > base:
            raise ValidationError(
                f"Preço final ({final_price}) acima do preço-base ({base}).",
                error="COUPON_PRICE_ABOVE_BASE",
            )
        return base - final_price
