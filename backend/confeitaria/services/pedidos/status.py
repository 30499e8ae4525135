"""
Máquina de estados do pedido

Fluxo recomendado: orçamento -> aguardando sinal -> em produção -> pronto -> entregue.
Qualquer status pode ser definido diretamente (modo permissivo); a tabela
ALLOWED_TRANSITIONS só é aplicada quando `strict=True`.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

from confeitaria.core.dinheiro import money
from confeitaria.core.erros import InvalidTransitionError
from confeitaria.core.models import Order, OrderStatus, PaymentMethod
from confeitaria.services.pedidos.ledger import (
    CATEGORIA_PAGAMENTO_FINAL,
    PREFIXO_PAGAMENTO_TOTAL,
    LedgerChanges,
    LedgerRemoval,
    final_payment_entry,
)
from confeitaria.services.pedidos.sinal import remaining_amount

logger = logging.getLogger(__name__)

ORDER_FLOW = (
    OrderStatus.QUOTE,
    OrderStatus.AWAITING_DEPOSIT,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

STATUS_LABELS = {
    OrderStatus.QUOTE: "Orçamento",
    OrderStatus.AWAITING_DEPOSIT: "Aguardando Sinal",
    OrderStatus.IN_PRODUCTION: "Em Produção",
    OrderStatus.READY: "Pronto",
    OrderStatus.DELIVERED: "Entregue",
    OrderStatus.CANCELLED: "Cancelado",
}

# Modo estrito: avança um passo, volta um passo ou cancela (se não entregue)
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.QUOTE: frozenset({OrderStatus.AWAITING_DEPOSIT, OrderStatus.IN_PRODUCTION, OrderStatus.CANCELLED}),
    OrderStatus.AWAITING_DEPOSIT: frozenset({OrderStatus.QUOTE, OrderStatus.IN_PRODUCTION, OrderStatus.CANCELLED}),
    OrderStatus.IN_PRODUCTION: frozenset({OrderStatus.AWAITING_DEPOSIT, OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.IN_PRODUCTION, OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.READY}),
    OrderStatus.CANCELLED: frozenset({OrderStatus.QUOTE}),
}


class StatusChange(BaseModel):
    """Resultado de uma mudança de status"""
    order: Order
    previous_status: OrderStatus
    ledger: LedgerChanges = Field(default_factory=LedgerChanges)

    @property
    def changed(self) -> bool:
        return self.order.status != self.previous_status


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """Próximo status recomendado; None para entregue/cancelado."""
    status = OrderStatus(status)
    if status == OrderStatus.CANCELLED:
        return None
    idx = ORDER_FLOW.index(status)
    if idx + 1 >= len(ORDER_FLOW):
        return None
    return ORDER_FLOW[idx + 1]


def can_transition(atual: OrderStatus, novo: OrderStatus) -> bool:
    if atual == novo:
        return True
    return novo in ALLOWED_TRANSITIONS[atual]


def change_status(
    order: Order,
    new_status: OrderStatus,
    today: date,
    strict: bool = False,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee=Decimal("0"),
    deposit_percentage=None,
) -> StatusChange:
    """
    Muda o status do pedido e devolve os lançamentos implicados.

    - Cancelar: zera sinal/pagamento e remove todos os lançamentos do pedido
    - Entregar sem pagamento integral: lança o restante como "Pagamento Final"
    - Sair de entregue: remove o "Pagamento Final" lançado na entrega

    Args:
        payment_method / payment_fee: forma e taxa do pagamento na entrega

    Raises:
        InvalidTransitionError: só com strict=True, fora de ALLOWED_TRANSITIONS
    """
    anterior = order.status
    novo = OrderStatus(new_status)

    if strict and not can_transition(anterior, novo):
        raise InvalidTransitionError(
            f"Transição não permitida: {anterior.value} -> {novo.value}"
        )

    changes = LedgerChanges()

    if novo == anterior:
        return StatusChange(order=order, previous_status=anterior, ledger=changes)

    if novo == OrderStatus.CANCELLED:
        atualizado = order.model_copy(update={
            "status": novo,
            "deposit_paid": False,
            "full_payment_received": False,
            "payment_method": None,
            "payment_fee": money(0),
        })
        changes.remove.append(LedgerRemoval(order_id=order.id))
        logger.info(f"Pedido {order.id} cancelado; lançamentos removidos")
        return StatusChange(order=atualizado, previous_status=anterior, ledger=changes)

    if anterior == OrderStatus.DELIVERED:
        changes.remove.append(LedgerRemoval(
            order_id=order.id,
            category=CATEGORIA_PAGAMENTO_FINAL,
            exclude_note_prefix=PREFIXO_PAGAMENTO_TOTAL,
        ))

    atualizado = order.model_copy(update={"status": novo})

    if novo == OrderStatus.DELIVERED and not order.full_payment_received:
        restante = remaining_amount(order, deposit_percentage)
        entry = final_payment_entry(order, restante, today, payment_method, money(payment_fee))
        if entry is not None:
            changes.add.append(entry)
        else:
            logger.debug(f"Pedido {order.id}: nada a receber na entrega")

    return StatusChange(order=atualizado, previous_status=anterior, ledger=changes)
