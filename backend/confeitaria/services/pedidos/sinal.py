"""
Sinal (depósito) e pagamentos do pedido

Regras:
- Sinal sugerido = total * percentual (50% por padrão), arredondado HALF_UP
- Sinal manual precisa ser > 0 e <= total (excesso é rejeitado, não ajustado)
- Marcar o sinal só avança o status a partir de orçamento/aguardando sinal
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field

from confeitaria.core.config import settings
from confeitaria.core.dinheiro import CEM, D, money
from confeitaria.core.erros import DepositValidationError, ValidationError
from confeitaria.core.models import Order, OrderStatus, PaymentMethod
from confeitaria.services.pedidos.ledger import (
    CATEGORIA_PAGAMENTO_FINAL,
    CATEGORIA_SINAL,
    PREFIXO_PAGAMENTO_TOTAL,
    LedgerChanges,
    LedgerRemoval,
    deposit_entry,
    full_payment_entry,
)

logger = logging.getLogger(__name__)

# Status a partir dos quais o pagamento move o pedido para produção
STATUS_AVANCA_COM_PAGAMENTO = frozenset({OrderStatus.QUOTE, OrderStatus.AWAITING_DEPOSIT})

QUICK_PICK_PERCENTAGES = (30, 50, 100)


class DepositResult(BaseModel):
    """Pedido atualizado + lançamentos a aplicar"""
    order: Order
    ledger: LedgerChanges = Field(default_factory=LedgerChanges)


def suggested_deposit(total_amount, percentage=None) -> Decimal:
    """
    Sinal sugerido.

    Args:
        total_amount: Total do pedido
        percentage: Fração do total (0.5 = 50%). Padrão vem das configurações.

    Returns:
        Valor arredondado para centavos
    """
    if percentage is None:
        percentage = settings.default_deposit_percentage
    return money(D(total_amount) * D(percentage))


def validate_deposit(amount, total_amount) -> Decimal:
    """
    Valida sinal informado manualmente.

    Raises:
        DepositValidationError: valor <= 0 ou maior que o total
    """
    valor = money(amount)
    total = money(total_amount)
    if valor <= 0:
        raise DepositValidationError(f"Valor do sinal deve ser maior que zero (recebido {valor})")
    if valor > total:
        raise DepositValidationError(f"Valor do sinal ({valor}) maior que o total do pedido ({total})")
    return valor


def quick_pick_amounts(total_amount) -> Dict[int, Decimal]:
    """Atalhos de 30%, 50% e 100% do total"""
    total = D(total_amount)
    return {pct: money(total * pct / CEM) for pct in QUICK_PICK_PERCENTAGES}


def payment_fee_amount(base, fee, fee_type: str = "value") -> Decimal:
    """
    Taxa da maquininha/link.

    Args:
        base: Valor sobre o qual a taxa incide
        fee: Valor fixo ou percentual (ex.: 4.99 = 4,99%)
        fee_type: "value" ou "percentage"
    """
    if fee_type == "percentage":
        return money(D(base) * D(fee) / CEM)
    if fee_type == "value":
        return money(fee)
    raise ValidationError(f"Tipo de taxa desconhecido: {fee_type}")


def remaining_amount(order: Order, percentage=None) -> Decimal:
    """Falta receber: total - sinal (pago ou sugerido)"""
    if order.deposit_amount is not None:
        sinal = order.deposit_amount
    else:
        sinal = suggested_deposit(order.total_amount, percentage)
    return money(order.total_amount - sinal)


def mark_deposit_paid(
    order: Order,
    today: date,
    amount=None,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee=Decimal("0"),
    percentage=None,
) -> DepositResult:
    """
    Marca o sinal como pago.

    Sem `amount`, usa o sinal sugerido. O status só muda se o pedido ainda está
    em orçamento ou aguardando sinal; pedidos mais adiantados ficam onde estão.
    Remarcar substitui o lançamento anterior. Pedido cancelado não gera receita.
    """
    if amount is None:
        valor = suggested_deposit(order.total_amount, percentage)
    else:
        valor = validate_deposit(amount, order.total_amount)

    update = {"deposit_paid": True, "deposit_amount": valor}
    if order.status in STATUS_AVANCA_COM_PAGAMENTO:
        update["status"] = OrderStatus.IN_PRODUCTION
        logger.info(f"Pedido {order.id}: sinal recebido, movido para produção")

    changes = LedgerChanges()
    if order.deposit_paid:
        # Remarcar substitui o lançamento anterior
        changes.remove.append(LedgerRemoval(order_id=order.id, category=CATEGORIA_SINAL))
    if order.status != OrderStatus.CANCELLED:
        entry = deposit_entry(order, valor, today, payment_method, money(payment_fee))
        if entry is not None:
            changes.add.append(entry)
    else:
        logger.info(f"Pedido {order.id} cancelado: sinal marcado sem lançamento")

    return DepositResult(order=order.model_copy(update=update), ledger=changes)


def unmark_deposit(order: Order) -> DepositResult:
    """Desfaz o sinal e pede a remoção do lançamento correspondente."""
    atualizado = order.model_copy(update={"deposit_paid": False, "deposit_amount": None})
    changes = LedgerChanges(
        remove=[LedgerRemoval(order_id=order.id, category=CATEGORIA_SINAL)]
    )
    return DepositResult(order=atualizado, ledger=changes)


def mark_full_payment(
    order: Order,
    today: date,
    payment_method: PaymentMethod,
    payment_fee=Decimal("0"),
) -> DepositResult:
    """Pagamento integral antecipado (receita = total - taxa)."""
    fee = money(payment_fee)
    if fee < 0:
        raise ValidationError("Taxa de pagamento não pode ser negativa")

    update = {
        "full_payment_received": True,
        "payment_method": PaymentMethod(payment_method),
        "payment_fee": fee,
    }
    if order.status in STATUS_AVANCA_COM_PAGAMENTO:
        update["status"] = OrderStatus.IN_PRODUCTION

    changes = LedgerChanges()
    if order.full_payment_received:
        changes.remove.append(LedgerRemoval(
            order_id=order.id,
            category=CATEGORIA_PAGAMENTO_FINAL,
            note_prefix=PREFIXO_PAGAMENTO_TOTAL,
        ))
    if order.status != OrderStatus.CANCELLED:
        entry = full_payment_entry(order, today, payment_method, fee)
        if entry is not None:
            changes.add.append(entry)
    else:
        logger.info(f"Pedido {order.id} cancelado: pagamento integral sem lançamento")

    return DepositResult(order=order.model_copy(update=update), ledger=changes)


def undo_full_payment(order: Order) -> DepositResult:
    """Desfaz o pagamento integral e remove só o lançamento dele."""
    atualizado = order.model_copy(update={
        "full_payment_received": False,
        "payment_method": None,
        "payment_fee": money(0),
    })
    changes = LedgerChanges(remove=[
        LedgerRemoval(
            order_id=order.id,
            category=CATEGORIA_PAGAMENTO_FINAL,
            note_prefix=PREFIXO_PAGAMENTO_TOTAL,
        )
    ])
    return DepositResult(order=atualizado, ledger=changes)
