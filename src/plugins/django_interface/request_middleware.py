import uuid

import structlog

from convenio_core.adapters.context.request_context import reset_request, set_current_request


class RequestContextMiddleware:
    """
    Guarda a requisição num ContextVar e amarra `request_id`/`path` ao
    contexto do structlog durante o ciclo da requisição.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = set_current_request(request)
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.path)
        try:
            response = self.get_response(request)
            response["X-Request-ID"] = request_id
        finally:
            structlog.contextvars.clear_contextvars()
            reset_request(token)
        return response
