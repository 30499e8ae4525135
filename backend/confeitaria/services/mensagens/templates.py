"""
Contexto para os modelos de mensagem (WhatsApp)

O envio e a substituição de placeholders ficam com quem consome; aqui só
saem os valores já calculados.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from confeitaria.core.datas import format_date_br
from confeitaria.core.dinheiro import format_brl, money
from confeitaria.core.models import Order, OrderStatus, TERMINAL_STATUSES
from confeitaria.services.pedidos.calculo import format_order_number
from confeitaria.services.pedidos.sinal import remaining_amount, suggested_deposit


class TemplateKind(str, Enum):
    QUOTE = "quote"
    BIRTHDAY = "birthday"
    DEPOSIT_COLLECTION = "deposit_collection"
    ORDER_READY = "order_ready"


class TemplateContext(BaseModel):
    kind: TemplateKind
    client_name: str
    client_first_name: str
    company_name: str
    order_number: Optional[int] = None
    order_number_label: str = ""
    total_amount: Decimal
    deposit_amount: Decimal
    remaining_amount: Decimal
    total_amount_label: str
    deposit_amount_label: str
    remaining_amount_label: str
    delivery_date: Optional[str] = None
    delivery_date_label: str = "a definir"
    delivery_time: Optional[str] = None
    deposit_paid: bool = False
    full_payment_received: bool = False


def first_name(nome: Optional[str]) -> str:
    if not nome or not nome.strip():
        return "Cliente"
    return nome.split()[0]


def build_template_context(
    kind: TemplateKind,
    order: Order,
    company_name: Optional[str] = None,
    deposit_percentage=None,
) -> TemplateContext:
    """
    Valores para o modelo de mensagem.
    Sinal sem valor gravado usa o sugerido.
    """
    sinal = order.deposit_amount
    if sinal is None:
        sinal = suggested_deposit(order.total_amount, deposit_percentage)
    restante = money(0) if order.full_payment_received else remaining_amount(order, deposit_percentage)

    entrega = order.delivery_date.isoformat() if order.delivery_date else None
    data_label = format_date_br(order.delivery_date) or "a definir"
    if order.delivery_date and order.delivery_time:
        data_label = f"{data_label} às {order.delivery_time[:5]}"

    return TemplateContext(
        kind=TemplateKind(kind),
        client_name=order.client_name or "Cliente",
        client_first_name=first_name(order.client_name),
        company_name=company_name or "nossa confeitaria",
        order_number=order.order_number,
        order_number_label=format_order_number(order.order_number),
        total_amount=money(order.total_amount),
        deposit_amount=money(sinal),
        remaining_amount=restante,
        total_amount_label=format_brl(order.total_amount),
        deposit_amount_label=format_brl(sinal),
        remaining_amount_label=format_brl(restante),
        delivery_date=entrega,
        delivery_date_label=data_label,
        delivery_time=order.delivery_time,
        deposit_paid=order.deposit_paid,
        full_payment_received=order.full_payment_received,
    )


def available_templates(order: Order) -> List[TemplateKind]:
    """Modelos que fazem sentido no estado atual do pedido."""
    kinds: List[TemplateKind] = []

    if order.status not in (OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        kinds.append(TemplateKind.QUOTE)

    if (
        not order.deposit_paid
        and not order.full_payment_received
        and order.status not in TERMINAL_STATUSES
    ):
        kinds.append(TemplateKind.DEPOSIT_COLLECTION)

    if order.status in (OrderStatus.IN_PRODUCTION, OrderStatus.READY):
        kinds.append(TemplateKind.ORDER_READY)

    return kinds
