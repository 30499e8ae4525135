"""
Rotas FastAPI para pedidos
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from confeitaria.api.deps import get_today, get_user_id
from confeitaria.api.schemas_pedidos import (
    PagamentoUpdate,
    PedidoCreate,
    PedidoOut,
    SinalUpdate,
    StatusUpdate,
    UrgenciaSchema,
)
from confeitaria.core.models import Order
from confeitaria.db import get_db
from confeitaria.services.mensagens.templates import (
    TemplateContext,
    TemplateKind,
    available_templates,
    build_template_context,
)
from confeitaria.services.pedidos import service
from confeitaria.services.pedidos.calculo import format_order_number
from confeitaria.services.pedidos.sinal import (
    payment_fee_amount,
    quick_pick_amounts,
    remaining_amount,
    suggested_deposit,
)
from confeitaria.services.pedidos.status import STATUS_LABELS, next_status
from confeitaria.services.pedidos.urgencia import URGENCY_DISPLAY, classify_urgency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pedidos", tags=["pedidos"])


def _to_out(order: Order, today: date) -> PedidoOut:
    """Acrescenta urgência, sinal sugerido e demais derivados ao pedido"""
    urgencia = classify_urgency(order.delivery_date, today)
    return PedidoOut(
        **order.model_dump(),
        order_number_label=format_order_number(order.order_number),
        status_label=STATUS_LABELS[order.status],
        next_status=next_status(order.status),
        urgency=UrgenciaSchema(
            tier=urgencia.tier.value,
            days_until=urgencia.days_until,
            label=urgencia.label,
            severity=urgencia.severity,
            css_class=URGENCY_DISPLAY[urgencia.tier]["css_class"],
        ),
        suggested_deposit=suggested_deposit(order.total_amount),
        remaining_amount=remaining_amount(order),
        quick_pick_amounts=quick_pick_amounts(order.total_amount),
        available_templates=available_templates(order),
    )


@router.get("", response_model=List[PedidoOut])
def listar_pedidos(
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Lista pedidos (inclusive cancelados), mais recentes primeiro."""
    return [_to_out(o, today) for o in service.load_orders(db, user_id)]


@router.post("", response_model=PedidoOut, status_code=201)
def criar_pedido(
    payload: PedidoCreate,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    order = service.create_order(db, user_id, payload.model_dump())
    return _to_out(order, today)


@router.get("/{order_id}", response_model=PedidoOut)
def obter_pedido(
    order_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    try:
        order = service.get_order(db, user_id, order_id)
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return _to_out(order, today)


@router.put("/{order_id}/status", response_model=PedidoOut)
def atualizar_status(
    order_id: str,
    payload: StatusUpdate,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Muda o status do pedido.

    - cancelled: remove lançamentos e zera sinal/pagamento
    - delivered: lança o pagamento final (se não foi pago integralmente)
    """
    try:
        order = service.update_status(
            db, user_id, order_id, payload.status, today,
            strict=payload.strict,
            payment_method=payload.payment_method,
            payment_fee=payload.payment_fee,
        )
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return _to_out(order, today)


@router.put("/{order_id}/sinal", response_model=PedidoOut)
def atualizar_sinal(
    order_id: str,
    payload: SinalUpdate,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Marca ou desmarca o sinal; taxa pode vir em valor ou percentual."""
    try:
        atual = service.get_order(db, user_id, order_id)
        base = payload.amount if payload.amount is not None else suggested_deposit(atual.total_amount)
        order = service.set_deposit(
            db, user_id, order_id, today,
            paid=payload.paid,
            amount=payload.amount,
            payment_method=payload.payment_method,
            payment_fee=payment_fee_amount(base, payload.payment_fee, payload.fee_type),
        )
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return _to_out(order, today)


@router.put("/{order_id}/pagamento", response_model=PedidoOut)
def atualizar_pagamento(
    order_id: str,
    payload: PagamentoUpdate,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Registra ou desfaz o pagamento integral antecipado."""
    try:
        atual = service.get_order(db, user_id, order_id)
        order = service.set_full_payment(
            db, user_id, order_id, today,
            received=payload.received,
            payment_method=payload.payment_method,
            payment_fee=payment_fee_amount(atual.total_amount, payload.payment_fee, payload.fee_type),
        )
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return _to_out(order, today)


@router.get("/{order_id}/mensagens/{kind}", response_model=TemplateContext)
def contexto_mensagem(
    order_id: str,
    kind: TemplateKind,
    company_name: Optional[str] = None,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Valores para montar a mensagem de WhatsApp do pedido."""
    try:
        order = service.get_order(db, user_id, order_id)
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return build_template_context(kind, order, company_name)


@router.delete("/{order_id}", status_code=204)
def deletar_pedido(
    order_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Exclui pedido, itens e lançamentos vinculados."""
    try:
        service.delete_order(db, user_id, order_id)
    except service.OrderNotFound:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
