"""
Fábricas de dados para os testes de API.

Cria registros direto no ORM (sem passar pelos handlers) e emite tokens
bearer com o JWTService, como o front faria após o login.
"""
from __future__ import annotations

import itertools
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from convenio_core.adapters.security.hash_service import HashService
from convenio_core.adapters.security.jwt_service import JWTService
from plugins.django_interface.models import (
    Affiliate,
    Professional,
    SchedulingAccess,
    Service,
    User,
    UserRole,
)

WEBHOOK_HEADERS = {"HTTP_X_WEBHOOK_SECRET": "test-webhook-secret"}
PASSWORD = "senha123"

_seq = itertools.count(1)
_password_hash = None


def _hash() -> str:
    global _password_hash
    if _password_hash is None:
        _password_hash = HashService.hash_password(PASSWORD)
    return _password_hash


def make_user(*roles: str, name: str | None = None, **fields) -> User:
    n = next(_seq)
    user = User.objects.create(
        name=name or f"Usuário {n}",
        cpf=fields.pop("cpf", f"{n:011d}"),
        email=fields.pop("email", f"user{n}@example.com"),
        password_hash=_hash(),
        **fields,
    )
    for role in roles:
        UserRole.objects.create(user=user, role=role)
    return user


def make_professional(percentage: str = "70.00", *, with_access: bool = True, **fields) -> User:
    user = make_user("professional", **fields)
    Professional.objects.create(user=user, percentage=Decimal(percentage))
    if with_access:
        now = timezone.now()
        SchedulingAccess.objects.create(
            professional=user,
            has_access=True,
            expires_at=now + timedelta(days=30),
            granted_at=now,
        )
    return user


def make_affiliate(code: str = "AFF1", commission: str = "10.00", status: str = "active") -> Affiliate:
    user = make_user("affiliate")
    return Affiliate.objects.create(
        user=user,
        referral_code=code,
        commission_amount=Decimal(commission),
        status=status,
    )


def make_service(name: str = "Consulta clínica", base_price: str = "100.00") -> Service:
    return Service.objects.create(name=name, base_price=Decimal(base_price))


def auth(user: User) -> dict:
    """Cabeçalho Authorization pronto para `self.client.get(..., **auth(user))`."""
    roles = UserRole.objects.filter(user=user).values_list("role", flat=True)
    return {"HTTP_AUTHORIZATION": f"Bearer {JWTService.create_token(str(user.id), roles)}"}
