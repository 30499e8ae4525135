"""
Cálculo do total do pedido e numeração sequencial
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from confeitaria.core.dinheiro import money
from confeitaria.core.erros import DataIntegrityWarning
from confeitaria.core.models import Order, OrderItem

logger = logging.getLogger(__name__)


def items_total(items: Iterable[OrderItem]) -> Decimal:
    """Soma das linhas; brindes não contam."""
    return money(sum((item.line_total for item in items), Decimal("0")))


def compute_order_total(items: Iterable[OrderItem], delivery_fee) -> Decimal:
    """total = soma das linhas + taxa de entrega"""
    return money(items_total(items) + money(delivery_fee))


def build_order(order: Order) -> Order:
    """
    Devolve o pedido pronto para gravação, com `total_amount` recalculado.

    É o único ponto onde o total é derivado dos itens; os relatórios leem o
    `total_amount` gravado.
    """
    total = compute_order_total(order.items, order.delivery_fee)
    if total != order.total_amount:
        logger.debug(f"Pedido {order.id}: total ajustado de {order.total_amount} para {total}")
    return order.model_copy(update={"total_amount": total})


def check_order_total(order: Order) -> Optional[DataIntegrityWarning]:
    """Aviso quando o total gravado não bate com itens + entrega."""
    esperado = compute_order_total(order.items, order.delivery_fee)
    if esperado == order.total_amount:
        return None
    return DataIntegrityWarning(
        code="TOTAL_MISMATCH",
        message=(
            f"Pedido {format_order_number(order.order_number) or order.id}: total gravado "
            f"{order.total_amount} difere de itens + entrega ({esperado})"
        ),
        ref_id=order.id,
    )


def next_order_number(existing_numbers: Iterable[Optional[int]], start: int = 1) -> int:
    """
    Próximo número sequencial do usuário.
    Respeita o número inicial configurado (quem migrou de outro sistema
    continua a numeração de onde parou).
    """
    numeros: List[int] = [n for n in existing_numbers if n is not None]
    proximo = max(numeros) + 1 if numeros else 1
    return max(proximo, start)


def format_order_number(order_number: Optional[int]) -> str:
    """#0042"""
    if order_number is None:
        return ""
    return f"#{order_number:04d}"
