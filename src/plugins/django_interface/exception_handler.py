"""
Mapeia exceções para o corpo padrão `{message, error?}`.
"""
import structlog
from django.http import Http404
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

from convenio_core.core.domain.exceptions import DomainError

logger = structlog.get_logger(__name__)


def _body(message: str, error: str | None = None) -> dict:
    body = {"message": message}
    if error:
        body["error"] = error
    return body


def _pydantic_message(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Dados inválidos: " + "; ".join(parts)


def domain_exception_handler(exc, context):
    view = context.get("view").__class__.__name__ if context.get("view") else None

    if isinstance(exc, DomainError):
        logger.info("request.domain_error", view=view, error=exc.error, status=exc.status_code)
        return Response(_body(exc.message, exc.error), status=exc.status_code)

    if isinstance(exc, PydanticValidationError):
        return Response(_body(_pydantic_message(exc), "VALIDATION_ERROR"), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, Http404):
        return Response(_body("Registro não encontrado."), status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, drf_exceptions.ValidationError):
        return Response(_body("Dados inválidos.", "VALIDATION_ERROR") | {"details": exc.detail},
                        status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response = Response(_body(str(exc.detail)), status=exc.status_code)
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            response["WWW-Authenticate"] = auth_header
        return response

    if isinstance(exc, drf_exceptions.APIException):
        return Response(_body(str(exc.detail)), status=exc.status_code)

    logger.exception("request.unhandled_error", view=view, error=str(exc))
    return Response(_body("Erro interno."), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
