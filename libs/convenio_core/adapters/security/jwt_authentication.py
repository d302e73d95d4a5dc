import jwt
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication

from convenio_core.adapters.repositories.user_repo_impl import UserRepoImpl
from convenio_core.adapters.security.jwt_service import JWTService


class SimpleUser:
    """
    Usuário mínimo compatível com DRF: id, papéis e is_authenticated.
    Os papéis vêm do banco a cada requisição; o claim `roles` do token é só informativo.
    """
    def __init__(self, id, roles=(), name: str | None = None, email: str | None = None):
        self.id = id
        self.roles = frozenset(roles)
        self.name = name
        self.email = email
        self.is_authenticated = True

    def has_role(self, *roles: str) -> bool:
        return bool(self.roles.intersection(roles))

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    def __str__(self):
        return f"<SimpleUser id={self.id} roles={sorted(self.roles)}>"


class JWTAuthentication(BaseAuthentication):
    """
    Lê `Authorization: Bearer <token>`, valida com o JWTService e
    carrega o usuário de domínio pelo UserRepoImpl.
    """
    keyword = "Bearer"

    def authenticate(self, request):
        header = request.headers.get("Authorization", "")
        parts = header.split()

        if not header or parts[0].lower() != "bearer" or len(parts) != 2:
            return None

        token = parts[1]
        try:
            payload = JWTService.decode_token(token)
        except jwt.PyJWTError as e:
            raise exceptions.AuthenticationFailed(f"Token inválido: {e}")  # noqa: B904

        user_id = payload.get("sub")
        if not user_id:
            raise exceptions.AuthenticationFailed("Token não contém o claim 'sub'.")

        domain_user = UserRepoImpl().find_by_id(user_id)
        if not domain_user or not domain_user.is_active:
            raise exceptions.AuthenticationFailed("Usuário não encontrado ou inativo.")

        user = SimpleUser(
            id=domain_user.id,
            roles=domain_user.roles,
            name=domain_user.name,
            email=domain_user.email,
        )
        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
