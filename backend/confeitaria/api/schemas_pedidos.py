"""
Schemas Pydantic para API de pedidos
"""

from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from confeitaria.core.models import Order, OrderStatus, PaymentMethod, UnitType
from confeitaria.services.mensagens.templates import TemplateKind


class PedidoItemCreate(BaseModel):
    """Item informado na criação do pedido"""

    product_id: Optional[str] = None
    product_name: Optional[str] = None  # Obrigatório quando não há produto
    quantity: Decimal = Field(gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)  # Padrão: preço de venda do produto
    unit_type: Optional[UnitType] = None
    is_gift: bool = False


class PedidoCreate(BaseModel):
    """Schema para criação de pedido"""

    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    items: List[PedidoItemCreate] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.QUOTE
    delivery_date: Optional[str] = None
    delivery_time: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None


class StatusUpdate(BaseModel):
    """Mudança de status; forma/taxa valem para o pagamento na entrega"""

    status: OrderStatus
    strict: bool = False
    payment_method: Optional[PaymentMethod] = None
    payment_fee: Decimal = Field(default=Decimal("0"), ge=0)


class SinalUpdate(BaseModel):
    """Marcar/desmarcar sinal"""

    paid: bool = True
    amount: Optional[Decimal] = None  # Padrão: sinal sugerido
    payment_method: Optional[PaymentMethod] = None
    payment_fee: Decimal = Field(default=Decimal("0"), ge=0)
    fee_type: Literal["value", "percentage"] = "value"


class PagamentoUpdate(BaseModel):
    """Registrar/desfazer pagamento integral"""

    received: bool = True
    payment_method: Optional[PaymentMethod] = None
    payment_fee: Decimal = Field(default=Decimal("0"), ge=0)
    fee_type: Literal["value", "percentage"] = "value"


class UrgenciaSchema(BaseModel):
    tier: str
    days_until: Optional[int] = None
    label: str
    severity: Optional[str] = None
    css_class: str = ""


class PedidoOut(Order):
    """Pedido com os valores derivados usados nas telas"""

    order_number_label: str = ""
    status_label: str = ""
    next_status: Optional[OrderStatus] = None
    urgency: UrgenciaSchema
    suggested_deposit: Decimal
    remaining_amount: Decimal
    quick_pick_amounts: Dict[int, Decimal] = Field(default_factory=dict)
    available_templates: List[TemplateKind] = Field(default_factory=list)
