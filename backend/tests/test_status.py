"""
Testes da máquina de estados do pedido
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from decimal import Decimal

import pytest

from confeitaria.core.erros import InvalidTransitionError
from confeitaria.core.models import OrderStatus, PaymentMethod, Transaction
from confeitaria.services.pedidos.status import (
    ALLOWED_TRANSITIONS,
    change_status,
    next_status,
)
from fabricas import HOJE, pedido


def test_proximo_status_segue_fluxo_linear():
    assert next_status(OrderStatus.QUOTE) == OrderStatus.AWAITING_DEPOSIT
    assert next_status(OrderStatus.AWAITING_DEPOSIT) == OrderStatus.IN_PRODUCTION
    assert next_status(OrderStatus.IN_PRODUCTION) == OrderStatus.READY
    assert next_status(OrderStatus.READY) == OrderStatus.DELIVERED
    assert next_status(OrderStatus.DELIVERED) is None
    assert next_status(OrderStatus.CANCELLED) is None


def test_modo_permissivo_aceita_qualquer_transicao():
    for origem in OrderStatus:
        for destino in OrderStatus:
            result = change_status(pedido(status=origem), destino, HOJE)
            assert result.order.status == destino


def test_modo_estrito_rejeita_salto():
    with pytest.raises(InvalidTransitionError):
        change_status(pedido(status=OrderStatus.QUOTE), OrderStatus.DELIVERED, HOJE, strict=True)
    with pytest.raises(InvalidTransitionError):
        change_status(pedido(status=OrderStatus.DELIVERED), OrderStatus.CANCELLED, HOJE, strict=True)


def test_modo_estrito_aceita_tabela():
    for origem, destinos in ALLOWED_TRANSITIONS.items():
        for destino in destinos:
            result = change_status(pedido(status=origem), destino, HOJE, strict=True)
            assert result.order.status == destino


def test_mesmo_status_nao_gera_lancamentos():
    result = change_status(pedido(status=OrderStatus.READY), OrderStatus.READY, HOJE)
    assert not result.changed
    assert result.ledger.empty


def test_cancelar_zera_pagamentos_e_remove_lancamentos():
    order = pedido(
        status=OrderStatus.IN_PRODUCTION,
        deposit_paid=True,
        deposit_amount="100",
        full_payment_received=True,
        payment_method="pix",
        payment_fee="2",
    )
    result = change_status(order, OrderStatus.CANCELLED, HOJE)

    assert result.order.status == OrderStatus.CANCELLED
    assert result.order.deposit_paid is False
    assert result.order.full_payment_received is False
    assert result.order.payment_method is None
    assert result.order.payment_fee == Decimal("0")

    assert len(result.ledger.remove) == 1
    removal = result.ledger.remove[0]
    assert removal.category is None
    for categoria in ("Sinal", "Pagamento Final", "Venda Avulsa"):
        tx = Transaction(type="income", amount=1, category=categoria, order_id="p1")
        assert removal.matches(tx)
    assert not removal.matches(Transaction(type="income", amount=1, category="Sinal", order_id="p2"))


def test_entregar_lanca_restante():
    order = pedido(
        total="200",
        status=OrderStatus.READY,
        deposit_paid=True,
        deposit_amount="80",
        client_name="Ana",
    )
    result = change_status(order, OrderStatus.DELIVERED, HOJE, payment_method=PaymentMethod.PIX, payment_fee="1")

    assert result.order.status == OrderStatus.DELIVERED
    entry = result.ledger.add[0]
    assert entry.category == "Pagamento Final"
    assert entry.note == "Ana (Pix)"
    assert entry.amount == Decimal("119")
    assert entry.date == HOJE


def test_entregar_sem_sinal_registrado_usa_sugerido():
    order = pedido(total="200", status=OrderStatus.READY)
    result = change_status(order, OrderStatus.DELIVERED, HOJE)
    assert result.ledger.add[0].amount == Decimal("100")
    assert result.ledger.add[0].note == "Cliente"


def test_entregar_pago_integralmente_nao_lanca():
    order = pedido(total="200", status=OrderStatus.READY, full_payment_received=True)
    result = change_status(order, OrderStatus.DELIVERED, HOJE)
    assert result.ledger.add == []


def test_sair_de_entregue_remove_pagamento_final_da_entrega():
    order = pedido(status=OrderStatus.DELIVERED)
    result = change_status(order, OrderStatus.READY, HOJE)

    assert result.ledger.add == []
    removal = result.ledger.remove[0]
    na_entrega = Transaction(type="income", amount=100, category="Pagamento Final", note="Ana (Pix)", order_id="p1")
    integral = Transaction(
        type="income", amount=200, category="Pagamento Final",
        note="Pagamento total (Pix) - Ana", order_id="p1",
    )
    sinal = Transaction(type="income", amount=100, category="Sinal", note="50% - Ana", order_id="p1")
    assert removal.matches(na_entrega)
    assert not removal.matches(integral)
    assert not removal.matches(sinal)


def test_mudanca_nao_altera_original():
    order = pedido(status=OrderStatus.READY)
    change_status(order, OrderStatus.DELIVERED, HOJE)
    assert order.status == OrderStatus.READY
