"""
Helpers de data: parsing tolerante, formatação pt-BR e diferença em dias de calendário
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str, None]

_FORMATOS = [
    '%Y-%m-%d',
    '%d/%m/%Y',
    '%d/%m/%y',
    '%d-%m-%Y',
]


def parse_date(valor: DateLike) -> Optional[date]:
    """
    Converte valor para date.
    Aceita date, datetime, ISO (YYYY-MM-DD ou datetime ISO) e DD/MM/YYYY, DD/MM/YY.
    Retorna None quando não for possível converter.
    """
    if valor is None:
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor

    texto = str(valor).strip()
    if not texto:
        return None

    # Datetime ISO (ex: 2025-03-10T14:00:00Z) - só a parte da data importa
    if len(texto) > 10 and texto[4:5] == '-' and texto[10:11] in ('T', ' '):
        texto = texto[:10]

    for fmt in _FORMATOS:
        try:
            return datetime.strptime(texto, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Não foi possível converter data: {valor}")
    return None


def days_between(inicio: Union[date, datetime], fim: Union[date, datetime]) -> int:
    """
    Diferença em dias de calendário (fim - inicio).
    Datetimes são truncados para a data antes da subtração, então horário e
    mudanças de horário de verão não afetam o resultado.
    """
    if isinstance(inicio, datetime):
        inicio = inicio.date()
    if isinstance(fim, datetime):
        fim = fim.date()
    return (fim - inicio).days


def format_date_br(valor: DateLike) -> str:
    """Formata como DD/MM/YYYY; string vazia para datas inválidas."""
    d = parse_date(valor)
    return d.strftime('%d/%m/%Y') if d else ''


def start_of_week(d: date) -> date:
    """Domingo da semana de `d` (semana começa no domingo)."""
    # weekday(): segunda=0 ... domingo=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def end_of_month(ano: int, mes: int) -> date:
    if mes == 12:
        return date(ano, 12, 31)
    return date(ano, mes + 1, 1) - timedelta(days=1)


def anniversary_in_year(aniversario: date, ano: int) -> date:
    """Data do aniversário no ano dado; 29/02 vira 28/02 em anos não bissextos."""
    try:
        return aniversario.replace(year=ano)
    except ValueError:
        return date(ano, 2, 28)
