"""
Helpers de dinheiro (BRL) com Decimal

Todos os valores monetários calculados passam por `money()`, que aplica
ROUND_HALF_UP em 2 casas. Usar a mesma regra em todo lugar evita diferença de
1 centavo entre telas (ex.: total do pedido x sinal sugerido).
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

logger = logging.getLogger(__name__)

TWO = Decimal("0.01")
ZERO = Decimal("0")
CEM = Decimal("100")


def D(x) -> Decimal:
    """
    Converte para Decimal de forma segura (float passa por str).
    Entrada não numérica levanta ValueError (vira erro de validação no pydantic).
    """
    if isinstance(x, Decimal):
        return x
    if x is None:
        return ZERO
    if isinstance(x, bool):
        raise ValueError("bool não é um valor monetário")
    try:
        return Decimal(str(x).strip())
    except InvalidOperation:
        raise ValueError(f"Valor numérico inválido: {x!r}")


def money(x) -> Decimal:
    """Arredonda com HALF_UP para 2 casas."""
    return D(x).quantize(TWO, rounding=ROUND_HALF_UP)


def percent_of(part, total) -> Decimal:
    """
    Percentual de `part` sobre `total` (0 a 100), 2 casas.
    Retorna 0 quando o total é 0 (nunca divide por zero).
    """
    total = D(total)
    if total == 0:
        return money(0)
    return money(D(part) / total * CEM)


def format_brl(valor) -> str:
    """
    Formata valor como Real brasileiro: R$ 1.234,56

    Negativos saem como -R$ 1.234,56.
    """
    v = money(valor)
    negativo = v < 0
    texto = f"{abs(v):,.2f}"  # 1,234.56
    texto = texto.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{'-' if negativo else ''}R$ {texto}"


def parse_brl(valor_str: Optional[str]) -> Decimal:
    """
    Converte string brasileira (ex: 'R$ 1.234,56' ou '-1.234,56') para Decimal.
    Também aceita formato americano (1,234.56).
    """
    if valor_str is None or str(valor_str).strip() == '':
        return money(0)

    valor_str = str(valor_str).strip().replace("R$", "").replace(" ", "").replace("\xa0", "")

    # Detecta sinal negativo
    negativo = False
    if valor_str.startswith('-'):
        negativo = True
        valor_str = valor_str[1:].strip()

    # Brasileiro: 1.234,56 (ponto milhares, vírgula decimal)
    # Americano: 1,234.56 (vírgula milhares, ponto decimal)
    if ',' in valor_str and '.' in valor_str:
        if valor_str.rindex(',') > valor_str.rindex('.'):
            valor_str = valor_str.replace('.', '').replace(',', '.')
        else:
            valor_str = valor_str.replace(',', '')
    elif ',' in valor_str:
        partes = valor_str.split(',')
        if len(partes) == 2 and len(partes[1]) <= 2:
            valor_str = valor_str.replace(',', '.')
        else:
            valor_str = valor_str.replace(',', '')
    elif '.' in valor_str:
        partes = valor_str.split('.')
        if not (len(partes) == 2 and len(partes[1]) <= 2):
            # Milhares
            valor_str = valor_str.replace('.', '')

    try:
        valor = money(Decimal(valor_str))
    except InvalidOperation:
        logger.warning(f"Não foi possível converter valor: {valor_str}")
        return money(0)
    return -valor if negativo else valor
