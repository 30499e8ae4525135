"""
Testes de total do pedido e numeração
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from confeitaria.services.pedidos.calculo import (
    build_order,
    check_order_total,
    compute_order_total,
    format_order_number,
    next_order_number,
)
from fabricas import item, pedido


def _itens():
    return [
        item("Brigadeiro", 2, "35.50"),
        item("Bolo de pote", 1, "20", is_gift=True),
        item("Torta", "0.5", "89.90", unit_type="kg"),
    ]


def test_total_ignora_brinde_e_soma_entrega():
    # 71.00 + 0 + 44.95 + 15
    assert compute_order_total(_itens(), "15") == Decimal("130.95")


def test_build_order_recalcula_total():
    order = build_order(pedido(total="0", items=_itens(), delivery_fee="15"))
    assert order.total_amount == Decimal("130.95")
    assert check_order_total(order) is None


def test_check_order_total_detecta_divergencia():
    aviso = check_order_total(pedido(id="p9", total="100", items=_itens()))
    assert aviso is not None
    assert aviso.code == "TOTAL_MISMATCH"
    assert aviso.ref_id == "p9"


def test_quantidade_nao_positiva_e_erro_de_uso():
    with pytest.raises(PydanticValidationError):
        item("Brigadeiro", 0, "2")
    with pytest.raises(PydanticValidationError):
        item("Brigadeiro", -1, "2")


def test_linha_brinde_vale_zero():
    assert item("Mimo", 3, "10", is_gift=True).line_total == Decimal("0")
    assert item("Bolo", 3, "10").line_total == Decimal("30")


def test_next_order_number():
    assert next_order_number([]) == 1
    assert next_order_number([1, 5, 3]) == 6
    assert next_order_number([None, 4]) == 5
    # Numeração inicial configurada prevalece enquanto for maior
    assert next_order_number([2], start=100) == 100
    assert next_order_number([150], start=100) == 151


def test_format_order_number():
    assert format_order_number(42) == "#0042"
    assert format_order_number(12345) == "#12345"
    assert format_order_number(None) == ""
