"""
Resolução de período para os relatórios financeiros
"""

import logging
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from confeitaria.core.datas import end_of_month, start_of_week
from confeitaria.core.erros import DataIntegrityWarning
from confeitaria.core.models import Order, Transaction

logger = logging.getLogger(__name__)


class Period(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class MonthSelector(BaseModel):
    """Mês explícito escolhido pelo usuário"""
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1900, le=9999)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return end_of_month(self.year, self.month)

    def previous(self) -> "MonthSelector":
        if self.month == 1:
            return MonthSelector(month=12, year=self.year - 1)
        return MonthSelector(month=self.month - 1, year=self.year)


class DateRange(BaseModel):
    """
    Janela resolvida. start/end None = sem limite.
    Uma janela sem nenhum limite é o período "all".
    """
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, d: Optional[date]) -> bool:
        if self.unbounded:
            return True
        if d is None:
            return False
        if self.start is not None and d < self.start:
            return False
        if self.end is not None and d > self.end:
            return False
        return True


def resolve_period(
    period: Period,
    today: date,
    selected_month: Optional[MonthSelector] = None,
) -> DateRange:
    """
    Converte período em janela de datas.

    Mês selecionado tem precedência e vira [primeiro dia, último dia].
    Presets abrem a janela a partir do início (semana começa no domingo).
    """
    if selected_month is not None:
        return DateRange(start=selected_month.first_day, end=selected_month.last_day)

    period = Period(period)
    if period == Period.WEEK:
        return DateRange(start=start_of_week(today))
    if period == Period.MONTH:
        return DateRange(start=today.replace(day=1))
    if period == Period.YEAR:
        return DateRange(start=date(today.year, 1, 1))
    return DateRange()


def filter_transactions(
    transactions: Iterable[Transaction],
    janela: DateRange,
) -> Tuple[List[Transaction], List[DataIntegrityWarning]]:
    """
    Transações dentro da janela.

    Returns:
        Tupla (transações, avisos). Datas inválidas geram aviso e ficam de fora
        de períodos limitados.
    """
    selecionadas: List[Transaction] = []
    avisos: List[DataIntegrityWarning] = []

    for t in transactions:
        if t.date is None:
            avisos.append(DataIntegrityWarning(
                code="INVALID_DATE",
                message=f"Transação {t.id or '?'} sem data válida",
                ref_id=t.id,
            ))
        if janela.contains(t.date):
            selecionadas.append(t)

    return selecionadas, avisos


def filter_orders_by_delivery(orders: Iterable[Order], janela: DateRange) -> List[Order]:
    """Pedidos com data de entrega dentro da janela; sem data nunca entram, nem em "all"."""
    return [o for o in orders if o.delivery_date is not None and janela.contains(o.delivery_date)]
