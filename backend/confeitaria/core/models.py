"""
Modelos Pydantic para dados em memória

São os registros que o motor recebe (já carregados da persistência) e devolve.
Valores monetários são Decimal; datas inválidas viram None em vez de erro.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, model_validator

from confeitaria.core.datas import parse_date
from confeitaria.core.dinheiro import D, money
from confeitaria.services.financeiro.categorias import parse_description


def _dinheiro(valor) -> Optional[Decimal]:
    return None if valor is None else money(valor)


# Dinheiro sempre em 2 casas HALF_UP desde a construção do registro
Money = Annotated[Decimal, BeforeValidator(_dinheiro)]

# Quantidade aceita frações (kg), sem arredondar
Quantity = Annotated[Decimal, BeforeValidator(D)]


def _data_tolerante(valor) -> Optional[dt.date]:
    return parse_date(valor)


LenientDate = Annotated[Optional[dt.date], BeforeValidator(_data_tolerante)]


class OrderStatus(str, Enum):
    QUOTE = "quote"
    AWAITING_DEPOSIT = "awaiting_deposit"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class UnitType(str, Enum):
    KG = "kg"
    UNIT = "unit"
    CENTO = "cento"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    LINK = "link"


PAYMENT_METHOD_LABELS = {
    PaymentMethod.PIX: "Pix",
    PaymentMethod.CREDIT_CARD: "Cartão",
    PaymentMethod.LINK: "Link",
}


class Client(BaseModel):
    """Cliente da confeitaria"""
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    birthday: LenientDate = None
    address: Optional[str] = None
    cpf_cnpj: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class Product(BaseModel):
    """Produto do catálogo"""
    id: str
    name: str
    description: Optional[str] = None
    cost_price: Money = Field(default=Decimal("0"), ge=0)
    sale_price: Money = Field(default=Decimal("0"), ge=0)
    unit_type: UnitType = UnitType.UNIT
    photo_url: Optional[str] = None


class OrderItem(BaseModel):
    """
    Linha do pedido.
    `product_name` e `unit_price` são cópias do produto no momento da venda.
    """
    id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: str
    quantity: Quantity = Field(gt=0)
    unit_price: Money = Field(ge=0)
    unit_type: UnitType = UnitType.UNIT
    is_gift: bool = False

    @property
    def line_total(self) -> Decimal:
        """Total da linha; brinde não soma."""
        if self.is_gift:
            return money(0)
        return money(self.quantity * self.unit_price)


class Order(BaseModel):
    """Pedido com itens aninhados"""
    id: str
    user_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None  # Snapshot (cliente pode ter sido excluído)
    client_phone: Optional[str] = None
    order_number: Optional[int] = None
    items: List[OrderItem] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.QUOTE
    delivery_date: LenientDate = None
    delivery_time: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_fee: Money = Field(default=Decimal("0.00"), ge=0)
    total_amount: Money = Field(default=Decimal("0.00"), ge=0)
    deposit_paid: bool = False
    deposit_amount: Optional[Money] = None
    full_payment_received: bool = False
    payment_method: Optional[PaymentMethod] = None
    payment_fee: Money = Field(default=Decimal("0.00"), ge=0)
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class Transaction(BaseModel):
    """
    Lançamento financeiro (receita ou despesa).

    A categoria é um campo explícito. Registros antigos trazem só `description`
    no formato "Categoria - texto"; nesse caso a descrição é interpretada uma
    única vez na construção do registro.
    """
    id: Optional[str] = None
    user_id: Optional[str] = None
    type: TransactionType
    category: Optional[str] = None
    note: Optional[str] = None
    description: Optional[str] = None  # Formato legado
    amount: Money = Field(gt=0)
    date: LenientDate = None
    order_id: Optional[str] = None

    @model_validator(mode="after")
    def _migra_descricao_legada(self) -> "Transaction":
        if self.category is None and self.description:
            category, note = parse_description(self.description, self.type)
            self.category = category
            if self.note is None:
                self.note = note
        return self


class NotificationType(str, Enum):
    BIRTHDAY = "birthday"
    DELIVERY = "delivery"
    DEPOSIT_OVERDUE = "deposit_overdue"


class NotificationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Notification(BaseModel):
    """Alerta derivado (não persistido)"""
    id: str
    type: NotificationType
    priority: NotificationPriority
    title: str
    description: str
    date: dt.date
    client_name: Optional[str] = None
    order_id: Optional[str] = None
