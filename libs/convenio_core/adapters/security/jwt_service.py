from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings


class JWTService:
    """
    Emissão e validação dos tokens bearer.
    """

    @staticmethod
    def create_token(
        subject: str,
        roles: Iterable[str] = (),
        expires_in: int | None = None,
    ) -> str:
        """Gera um token com `sub`, `roles`, `iat` e `exp`."""
        now = datetime.now(timezone.utc)
        ttl = int(expires_in if expires_in is not None else settings.JWT_EXPIRES_IN)
        payload = {
            "sub": str(subject),
            "roles": sorted(set(roles)),
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> dict:
        """
        Decodifica e valida o token, devolvendo o payload.
        Levanta jwt.PyJWTError se inválido ou expirado.
        """
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
