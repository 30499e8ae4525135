"""
Serviço de pedidos: ponte entre o banco e o motor de pedidos

Carrega as linhas, chama o motor (puro) e grava o pedido atualizado junto com
os lançamentos financeiros que a mudança implica.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from confeitaria.core.config import settings
from confeitaria.core.erros import ValidationError, require_user
from confeitaria.core.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    Transaction,
    UnitType,
)
from confeitaria.models import ClienteDB, PedidoDB, PedidoItemDB, ProdutoDB, TransacaoDB
from confeitaria.models.cadastro import novo_id
from confeitaria.services.pedidos.calculo import build_order, next_order_number
from confeitaria.services.pedidos.ledger import LedgerChanges
from confeitaria.services.pedidos.sinal import (
    mark_deposit_paid,
    mark_full_payment,
    undo_full_payment,
    unmark_deposit,
)
from confeitaria.services.pedidos.status import change_status

logger = logging.getLogger(__name__)


class OrderNotFound(LookupError):
    """Pedido inexistente para o usuário"""


# ---------------------------------------------------------------------------
# Conversões linha <-> registro
# ---------------------------------------------------------------------------

def row_to_order(row: PedidoDB) -> Order:
    """Converte PedidoDB (com itens) em Order"""
    return Order(
        id=row.id,
        user_id=row.user_id,
        client_id=row.client_id,
        client_name=row.client_name,
        client_phone=row.client_phone,
        order_number=row.order_number,
        items=[
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                unit_type=item.unit_type or UnitType.UNIT,
                is_gift=bool(item.is_gift),
            )
            for item in row.items
        ],
        status=row.status,
        delivery_date=row.delivery_date,
        delivery_time=row.delivery_time,
        delivery_address=row.delivery_address,
        delivery_fee=row.delivery_fee or 0,
        total_amount=row.total_amount or 0,
        deposit_paid=bool(row.deposit_paid),
        deposit_amount=row.deposit_amount,
        full_payment_received=bool(row.full_payment_received),
        payment_method=row.payment_method,
        payment_fee=row.payment_fee or 0,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def row_to_transaction(row: TransacaoDB) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        category=row.category,
        note=row.note,
        description=row.description,
        amount=row.amount,
        date=row.date,
        order_id=row.order_id,
    )


def _grava_estado(row: PedidoDB, order: Order) -> None:
    """Copia os campos de estado/pagamento do registro para a linha"""
    row.status = order.status.value
    row.deposit_paid = order.deposit_paid
    row.deposit_amount = order.deposit_amount
    row.full_payment_received = order.full_payment_received
    row.payment_method = order.payment_method.value if order.payment_method else None
    row.payment_fee = order.payment_fee
    row.total_amount = order.total_amount


def apply_ledger(db: Session, user_id: str, changes: LedgerChanges) -> None:
    """Aplica remoções e inclusões de lançamentos emitidas pelo motor"""
    for removal in changes.remove:
        rows = (
            db.query(TransacaoDB)
            .filter(TransacaoDB.user_id == user_id, TransacaoDB.order_id == removal.order_id)
            .all()
        )
        for row in rows:
            if removal.matches(row_to_transaction(row)):
                db.delete(row)
                logger.info(f"Lançamento {row.id} removido (pedido {removal.order_id})")

    for entry in changes.add:
        db.add(TransacaoDB(
            user_id=user_id,
            order_id=entry.order_id,
            type=entry.type.value,
            category=entry.category,
            note=entry.note,
            description=entry.description,
            amount=entry.amount,
            date=entry.date,
        ))
        logger.info(f"Lançamento {entry.category} de {entry.amount} criado (pedido {entry.order_id})")

    db.flush()


# ---------------------------------------------------------------------------
# Consultas
# ---------------------------------------------------------------------------

def _query_pedidos(db: Session, user_id: str):
    return (
        db.query(PedidoDB)
        .options(selectinload(PedidoDB.items))
        .filter(PedidoDB.user_id == user_id)
    )


def load_orders(db: Session, user_id: Optional[str]) -> List[Order]:
    user_id = require_user(user_id)
    rows = _query_pedidos(db, user_id).order_by(PedidoDB.order_number.desc()).all()
    return [row_to_order(r) for r in rows]


def _get_row(db: Session, user_id: str, order_id: str) -> PedidoDB:
    row = _query_pedidos(db, user_id).filter(PedidoDB.id == order_id).first()
    if row is None:
        raise OrderNotFound(f"Pedido {order_id} não encontrado")
    return row


def get_order(db: Session, user_id: Optional[str], order_id: str) -> Order:
    user_id = require_user(user_id)
    return row_to_order(_get_row(db, user_id, order_id))


# ---------------------------------------------------------------------------
# Mutações
# ---------------------------------------------------------------------------

def create_order(db: Session, user_id: Optional[str], data: Dict[str, Any]) -> Order:
    """
    Cria pedido com itens.

    Nome/preço dos itens e nome/telefone do cliente são copiados do cadastro
    quando não informados. O total é calculado aqui (itens + entrega).

    Args:
        data: Campos do pedido; `items` é uma lista de dicts com product_id,
              quantity e opcionalmente product_name, unit_price, unit_type, is_gift
    """
    user_id = require_user(user_id)

    client_name = data.get("client_name")
    client_phone = data.get("client_phone")
    client_id = data.get("client_id")
    if client_id:
        cliente = db.query(ClienteDB).filter(ClienteDB.id == client_id, ClienteDB.user_id == user_id).first()
        if cliente is None:
            raise ValidationError(f"Cliente {client_id} não encontrado")
        client_name = client_name or cliente.name
        client_phone = client_phone or cliente.phone

    itens: List[OrderItem] = []
    for raw in data.get("items") or []:
        produto = None
        if raw.get("product_id"):
            produto = (
                db.query(ProdutoDB)
                .filter(ProdutoDB.id == raw["product_id"], ProdutoDB.user_id == user_id)
                .first()
            )
            if produto is None:
                raise ValidationError(f"Produto {raw['product_id']} não encontrado")

        nome = raw.get("product_name") or (produto.name if produto else None)
        if not nome:
            raise ValidationError("Item sem produto e sem nome")
        preco = raw.get("unit_price")
        if preco is None:
            preco = produto.sale_price if produto else Decimal("0")

        itens.append(OrderItem(
            product_id=produto.id if produto else None,
            product_name=nome,
            quantity=raw["quantity"],
            unit_price=preco,
            unit_type=raw.get("unit_type") or (produto.unit_type if produto else UnitType.UNIT),
            is_gift=bool(raw.get("is_gift", False)),
        ))

    numeros = [n for (n,) in db.query(PedidoDB.order_number).filter(PedidoDB.user_id == user_id).all()]
    numero = next_order_number(numeros, settings.order_number_start)

    row = PedidoDB(id=novo_id(), user_id=user_id)
    order = build_order(Order(
        id=row.id,
        user_id=user_id,
        client_id=client_id,
        client_name=client_name,
        client_phone=client_phone,
        order_number=numero,
        items=itens,
        status=data.get("status") or OrderStatus.QUOTE,
        delivery_date=data.get("delivery_date"),
        delivery_time=data.get("delivery_time"),
        delivery_address=data.get("delivery_address"),
        delivery_fee=data.get("delivery_fee") or 0,
        notes=data.get("notes"),
    ))

    row.client_id = order.client_id
    row.client_name = order.client_name
    row.client_phone = order.client_phone
    row.order_number = order.order_number
    row.delivery_date = order.delivery_date
    row.delivery_time = order.delivery_time
    row.delivery_address = order.delivery_address
    row.delivery_fee = order.delivery_fee
    row.notes = order.notes
    _grava_estado(row, order)
    row.items = [
        PedidoItemDB(
            position=idx,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            unit_type=item.unit_type.value,
            is_gift=item.is_gift,
        )
        for idx, item in enumerate(order.items)
    ]

    db.add(row)
    db.flush()
    db.refresh(row)
    logger.info(f"Pedido #{numero:04d} criado para usuário {user_id} (total {order.total_amount})")
    return row_to_order(row)


def _persiste(db: Session, user_id: str, row: PedidoDB, order: Order, changes: LedgerChanges) -> Order:
    _grava_estado(row, order)
    apply_ledger(db, user_id, changes)
    db.flush()
    db.refresh(row)
    return row_to_order(row)


def update_status(
    db: Session,
    user_id: Optional[str],
    order_id: str,
    new_status: OrderStatus,
    today: date,
    strict: bool = False,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee=Decimal("0"),
) -> Order:
    user_id = require_user(user_id)
    row = _get_row(db, user_id, order_id)
    result = change_status(
        row_to_order(row),
        new_status,
        today,
        strict=strict,
        payment_method=payment_method,
        payment_fee=payment_fee,
    )
    if result.changed:
        logger.info(f"Pedido {order_id}: {result.previous_status.value} -> {result.order.status.value}")
    return _persiste(db, user_id, row, result.order, result.ledger)


def set_deposit(
    db: Session,
    user_id: Optional[str],
    order_id: str,
    today: date,
    paid: bool = True,
    amount=None,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee=Decimal("0"),
) -> Order:
    """Marca ou desmarca o sinal do pedido"""
    user_id = require_user(user_id)
    row = _get_row(db, user_id, order_id)
    order = row_to_order(row)
    if paid:
        result = mark_deposit_paid(
            order, today, amount=amount, payment_method=payment_method, payment_fee=payment_fee
        )
    else:
        result = unmark_deposit(order)
    return _persiste(db, user_id, row, result.order, result.ledger)


def set_full_payment(
    db: Session,
    user_id: Optional[str],
    order_id: str,
    today: date,
    received: bool = True,
    payment_method: Optional[PaymentMethod] = None,
    payment_fee=Decimal("0"),
) -> Order:
    """Registra ou desfaz o pagamento integral"""
    user_id = require_user(user_id)
    row = _get_row(db, user_id, order_id)
    order = row_to_order(row)
    if received:
        if payment_method is None:
            raise ValidationError("Forma de pagamento obrigatória para pagamento integral")
        result = mark_full_payment(order, today, payment_method, payment_fee)
    else:
        result = undo_full_payment(order)
    return _persiste(db, user_id, row, result.order, result.ledger)


def delete_order(db: Session, user_id: Optional[str], order_id: str) -> None:
    """Exclui o pedido, seus itens e lançamentos vinculados"""
    user_id = require_user(user_id)
    row = _get_row(db, user_id, order_id)
    removidas = (
        db.query(TransacaoDB)
        .filter(TransacaoDB.user_id == user_id, TransacaoDB.order_id == order_id)
        .delete(synchronize_session=False)
    )
    db.delete(row)
    db.flush()
    logger.info(f"Pedido {order_id} excluído ({removidas} lançamentos removidos)")
