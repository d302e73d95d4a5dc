import contextvars

_current_request = contextvars.ContextVar("current_request", default=None)


def set_current_request(request):
    """Guarda a requisição corrente numa context variable."""
    return _current_request.set(request)


def get_current_request():
    """Recupera a requisição guardada pelo RequestContextMiddleware."""
    return _current_request.get()


def get_current_user_id() -> str | None:
    request = get_current_request()
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return str(getattr(user, "id", "")) or None


def reset_request(token):
    _current_request.reset(token)
