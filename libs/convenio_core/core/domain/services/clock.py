from __future__ import annotations

from calendar import monthrange
from datetime import datetime, timezone

from django.utils import timezone as dj_timezone


class SystemClock:
    """Relógio padrão: instante atual em UTC (aware)."""

    def now(self) -> datetime:
        return dj_timezone.now().astimezone(timezone.utc)


class FixedClock:
    """Relógio congelado, útil em testes e reprocessamentos."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock exige datetime com timezone")
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def add_one_year(moment: datetime) -> datetime:
    """Desloca um ano de calendário; 29/02 vira 28/02."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)


def add_months(moment: datetime, months: int) -> datetime:
    """Desloca `months` meses; o dia é limitado ao último dia do mês de destino."""
    index = moment.month - 1 + months
    year, month = moment.year + index // 12, index % 12 + 1
    return moment.replace(year=year, month=month, day=min(moment.day, monthrange(year, month)[1]))
