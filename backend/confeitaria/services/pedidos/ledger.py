"""
Lançamentos financeiros derivados de mudanças no pedido

O motor não grava nada: ele devolve o que deve entrar ou sair do caixa e a
camada de persistência aplica.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, Field

from confeitaria.core.dinheiro import money
from confeitaria.core.models import (
    PAYMENT_METHOD_LABELS,
    Order,
    PaymentMethod,
    TransactionType,
)
from confeitaria.services.financeiro.categorias import compose_description
from confeitaria.services.pedidos.calculo import format_order_number

CATEGORIA_SINAL = "Sinal"
CATEGORIA_PAGAMENTO_FINAL = "Pagamento Final"
PREFIXO_PAGAMENTO_TOTAL = "Pagamento total"


class LedgerEntry(BaseModel):
    """Transação a ser registrada"""
    order_id: Optional[str] = None
    type: TransactionType = TransactionType.INCOME
    category: Optional[str] = None
    note: Optional[str] = None
    amount: Decimal
    date: date

    @property
    def description(self) -> str:
        return compose_description(self.category, self.note)


class LedgerRemoval(BaseModel):
    """
    Transações do pedido a remover.
    category None remove todas; note_prefix restringe dentro da categoria.
    """
    order_id: str
    category: Optional[str] = None
    note_prefix: Optional[str] = None
    exclude_note_prefix: Optional[str] = None

    def matches(self, transaction) -> bool:
        if transaction.order_id != self.order_id:
            return False
        if self.category is not None and transaction.category != self.category:
            return False
        note = transaction.note or ""
        if self.note_prefix is not None and not note.startswith(self.note_prefix):
            return False
        if self.exclude_note_prefix is not None and note.startswith(self.exclude_note_prefix):
            return False
        return True


class LedgerChanges(BaseModel):
    add: List[LedgerEntry] = Field(default_factory=list)
    remove: List[LedgerRemoval] = Field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.add and not self.remove


def _cliente(order: Order) -> str:
    return order.client_name or "Cliente"


def _sufixo_metodo(payment_method: Optional[PaymentMethod]) -> str:
    if payment_method is None:
        return ""
    return f" ({PAYMENT_METHOD_LABELS[PaymentMethod(payment_method)]})"


def deposit_entry(
    order: Order,
    amount: Decimal,
    today: date,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee: Decimal = Decimal("0"),
) -> Optional[LedgerEntry]:
    """Receita do sinal, líquida da taxa. None se o líquido não for positivo."""
    net = money(amount - payment_fee)
    if net <= 0:
        return None
    if order.total_amount > 0:
        pct = (amount / order.total_amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    else:
        pct = Decimal("50")
    return LedgerEntry(
        order_id=order.id,
        category=CATEGORIA_SINAL,
        note=f"{pct}%{_sufixo_metodo(payment_method)} - {_cliente(order)}",
        amount=net,
        date=today,
    )


def final_payment_entry(
    order: Order,
    remaining: Decimal,
    today: date,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee: Decimal = Decimal("0"),
) -> Optional[LedgerEntry]:
    """Receita do restante, registrada na entrega."""
    net = money(remaining - payment_fee)
    if net <= 0:
        return None
    return LedgerEntry(
        order_id=order.id,
        category=CATEGORIA_PAGAMENTO_FINAL,
        note=f"{_cliente(order)}{_sufixo_metodo(payment_method)}",
        amount=net,
        date=today,
    )


def full_payment_entry(
    order: Order,
    today: date,
    payment_method: PaymentMethod,
    payment_fee: Decimal = Decimal("0"),
) -> Optional[LedgerEntry]:
    """Receita do pagamento integral antecipado."""
    net = money(order.total_amount - payment_fee)
    if net <= 0:
        return None
    numero = format_order_number(order.order_number)
    numero = f" {numero}" if numero else ""
    return LedgerEntry(
        order_id=order.id,
        category=CATEGORIA_PAGAMENTO_FINAL,
        note=f"{PREFIXO_PAGAMENTO_TOTAL}{_sufixo_metodo(payment_method)} - {_cliente(order)}{numero}",
        amount=net,
        date=today,
    )
