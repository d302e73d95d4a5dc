from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Model, QuerySet

from convenio_core.core.application.cqrs import PagedResult


def get_or_none(qs: QuerySet, **lookup: Any) -> Model | None:
    """`.get()` que também trata ids malformados como ausentes."""
    try:
        return qs.get(**lookup)
    except (qs.model.DoesNotExist, DjangoValidationError, ValueError):
        return None


def paginate(qs: QuerySet, page: int, page_size: int, mapper) -> PagedResult:
    page = max(int(page or 1), 1)
    page_size = max(int(page_size or 1), 1)
    total = qs.count()
    offset = (page - 1) * page_size
    items = [mapper(obj) for obj in qs[offset: offset + page_size]]
    return PagedResult(items=items, total=total, page=page, page_size=page_size)
