"""
Testes da API (FastAPI TestClient) com banco SQLite em memória
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from confeitaria.api.deps import get_today
from confeitaria.db import build_engine, get_db, init_db
from confeitaria.main import app
from fabricas import HOJE

USUARIO = {"X-User-Id": "usuario-1"}


@pytest.fixture
def client():
    eng = build_engine("sqlite:///:memory:")
    init_db(bind=eng)
    Sessao = sessionmaker(autocommit=False, autoflush=False, bind=eng)

    def _get_db():
        db = Sessao()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_today] = lambda: HOJE
    yield TestClient(app)
    app.dependency_overrides.clear()
    eng.dispose()


def _cadastros(client):
    produto = client.post(
        "/produtos", json={"name": "Bolo de Chocolate", "cost_price": "40", "sale_price": "100"}, headers=USUARIO
    )
    assert produto.status_code == 201
    cliente = client.post(
        "/clientes", json={"name": "Maria Silva", "phone": "11999990000", "birthday": "1990-03-12"}, headers=USUARIO
    )
    assert cliente.status_code == 201
    return produto.json()["id"], cliente.json()["id"]


def _novo_pedido(client, produto_id, cliente_id=None, quantidade=2, entrega="2025-03-12"):
    resp = client.post(
        "/pedidos",
        json={
            "client_id": cliente_id,
            "items": [{"product_id": produto_id, "quantity": quantidade}],
            "delivery_date": entrega,
            "delivery_time": "14:00",
            "delivery_fee": "10",
        },
        headers=USUARIO,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_sem_usuario_e_erro_de_precondicao(client):
    for rota in ("/pedidos", "/transacoes", "/financeiro/resumo", "/notificacoes"):
        resp = client.get(rota)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Contexto de usuário ausente"


def test_ciclo_completo_do_pedido(client):
    produto_id, cliente_id = _cadastros(client)
    pedido = _novo_pedido(client, produto_id, cliente_id)

    assert Decimal(pedido["total_amount"]) == Decimal("210")
    assert pedido["order_number"] == 1
    assert pedido["order_number_label"] == "#0001"
    assert pedido["client_name"] == "Maria Silva"
    assert pedido["items"][0]["product_name"] == "Bolo de Chocolate"
    assert pedido["urgency"]["tier"] == "today"
    assert Decimal(pedido["suggested_deposit"]) == Decimal("105")
    assert pedido["next_status"] == "awaiting_deposit"
    pedido_id = pedido["id"]

    notificacoes = client.get("/notificacoes", headers=USUARIO).json()
    assert notificacoes["total_count"] == 3
    assert notificacoes["high_priority_count"] == 2

    # Sinal via Pix: vai para produção e lança o Sinal
    resp = client.put(f"/pedidos/{pedido_id}/sinal", json={"payment_method": "pix"}, headers=USUARIO)
    assert resp.status_code == 200
    assert resp.json()["status"] == "in_production"
    assert resp.json()["deposit_paid"] is True
    transacoes = client.get("/transacoes", headers=USUARIO).json()
    assert len(transacoes) == 1
    assert transacoes[0]["category"] == "Sinal"
    assert transacoes[0]["note"] == "50% (Pix) - Maria Silva"
    assert Decimal(transacoes[0]["amount"]) == Decimal("105")

    # Sinal pago: sobra só a notificação de entrega e o aniversário
    notificacoes = client.get("/notificacoes", headers=USUARIO).json()
    assert notificacoes["total_count"] == 2

    # Entrega lança o restante
    client.put(f"/pedidos/{pedido_id}/status", json={"status": "ready"}, headers=USUARIO)
    resp = client.put(
        f"/pedidos/{pedido_id}/status", json={"status": "delivered", "payment_method": "pix"}, headers=USUARIO
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "delivered"
    transacoes = client.get("/transacoes", headers=USUARIO).json()
    assert sorted(t["category"] for t in transacoes) == ["Pagamento Final", "Sinal"]

    resumo = client.get("/financeiro/resumo", params={"period": "all"}, headers=USUARIO).json()
    assert Decimal(resumo["income"]) == Decimal("210")
    assert Decimal(resumo["gross_profit"]["profit"]) == Decimal("130")
    assert Decimal(resumo["gross_profit"]["margin"]) == Decimal("61.90")
    assert resumo["warnings"] == []

    # Voltar para pronto desfaz o pagamento da entrega
    client.put(f"/pedidos/{pedido_id}/status", json={"status": "ready"}, headers=USUARIO)
    transacoes = client.get("/transacoes", headers=USUARIO).json()
    assert [t["category"] for t in transacoes] == ["Sinal"]

    # Cancelar remove todos os lançamentos do pedido
    resp = client.put(f"/pedidos/{pedido_id}/status", json={"status": "cancelled"}, headers=USUARIO)
    assert resp.json()["deposit_paid"] is False
    assert client.get("/transacoes", headers=USUARIO).json() == []


def test_transacoes_manuais(client):
    resp = client.post(
        "/transacoes",
        json={"type": "income", "amount": "50", "category": "Venda Avulsa", "note": "bolo no pote"},
        headers=USUARIO,
    )
    assert resp.status_code == 201
    assert resp.json()["date"] == "2025-03-12"
    assert resp.json()["description"] == "Venda Avulsa - bolo no pote"

    resp = client.post(
        "/transacoes", json={"type": "expense", "amount": "10", "category": "Sinal"}, headers=USUARIO
    )
    assert resp.status_code == 422

    resp = client.post(
        "/transacoes",
        json={"type": "expense", "amount": "30", "description": "Insumos - Farinha", "date": "2025-03-10"},
        headers=USUARIO,
    )
    assert resp.status_code == 201
    legada = resp.json()
    assert legada["category"] == "Insumos"
    assert legada["note"] == "Farinha"

    assert client.delete(f"/transacoes/{legada['id']}", headers=USUARIO).status_code == 204
    assert client.delete(f"/transacoes/{legada['id']}", headers=USUARIO).status_code == 404

    resumo = client.get("/financeiro/resumo", headers=USUARIO).json()
    assert Decimal(resumo["income"]) == Decimal("50")
    assert Decimal(resumo["expense"]) == Decimal("0")


def test_erros_de_validacao(client):
    produto_id, _ = _cadastros(client)
    pedido = _novo_pedido(client, produto_id)

    resp = client.put(
        f"/pedidos/{pedido['id']}/status", json={"status": "delivered", "strict": True}, headers=USUARIO
    )
    assert resp.status_code == 422

    resp = client.put(f"/pedidos/{pedido['id']}/sinal", json={"amount": "500"}, headers=USUARIO)
    assert resp.status_code == 422

    resp = client.put(f"/pedidos/{pedido['id']}/pagamento", json={"received": True}, headers=USUARIO)
    assert resp.status_code == 422

    resp = client.post("/pedidos", json={"items": [{"product_id": "inexistente", "quantity": 1}]}, headers=USUARIO)
    assert resp.status_code == 422


def test_pagamento_integral_com_taxa_percentual(client):
    produto_id, _ = _cadastros(client)
    pedido = _novo_pedido(client, produto_id)

    resp = client.put(
        f"/pedidos/{pedido['id']}/pagamento",
        json={"payment_method": "credit_card", "payment_fee": "5", "fee_type": "percentage"},
        headers=USUARIO,
    )
    assert resp.status_code == 200
    assert resp.json()["full_payment_received"] is True
    assert Decimal(resp.json()["payment_fee"]) == Decimal("10.50")
    assert Decimal(resp.json()["remaining_amount"]) == Decimal("105")

    transacoes = client.get("/transacoes", headers=USUARIO).json()
    assert Decimal(transacoes[0]["amount"]) == Decimal("199.50")
    assert transacoes[0]["note"].startswith("Pagamento total (Cartão)")

    # Entregar pedido quitado não lança nada novo
    client.put(f"/pedidos/{pedido['id']}/status", json={"status": "delivered"}, headers=USUARIO)
    assert len(client.get("/transacoes", headers=USUARIO).json()) == 1

    dashboard = client.get("/financeiro/dashboard", headers=USUARIO).json()
    assert dashboard["active_orders_count"] == 0


def test_contexto_de_mensagem_e_isolamento(client):
    produto_id, cliente_id = _cadastros(client)
    pedido = _novo_pedido(client, produto_id, cliente_id)

    resp = client.get(
        f"/pedidos/{pedido['id']}/mensagens/quote", params={"company_name": "Doce Sabor"}, headers=USUARIO
    )
    assert resp.status_code == 200
    ctx = resp.json()
    assert ctx["client_first_name"] == "Maria"
    assert ctx["company_name"] == "Doce Sabor"
    assert ctx["total_amount_label"] == "R$ 210,00"
    assert ctx["delivery_date_label"] == "12/03/2025 às 14:00"

    outro = {"X-User-Id": "usuario-2"}
    assert client.get(f"/pedidos/{pedido['id']}", headers=outro).status_code == 404
    assert client.get("/pedidos", headers=outro).json() == []


def test_numeracao_sequencial_e_exclusao(client):
    produto_id, cliente_id = _cadastros(client)
    primeiro = _novo_pedido(client, produto_id)
    segundo = _novo_pedido(client, produto_id, quantidade=1)
    assert segundo["order_number"] == 2
    assert Decimal(segundo["total_amount"]) == Decimal("110")

    client.put(f"/pedidos/{primeiro['id']}/sinal", json={}, headers=USUARIO)
    assert client.delete(f"/pedidos/{primeiro['id']}", headers=USUARIO).status_code == 204
    assert client.get(f"/pedidos/{primeiro['id']}", headers=USUARIO).status_code == 404
    assert client.get("/transacoes", headers=USUARIO).json() == []

    # Excluir cliente mantém o pedido com o nome copiado
    terceiro = _novo_pedido(client, produto_id, cliente_id)
    assert client.delete(f"/clientes/{cliente_id}", headers=USUARIO).status_code == 204
    pedido = client.get(f"/pedidos/{terceiro['id']}", headers=USUARIO).json()
    assert pedido["client_id"] is None
    assert pedido["client_name"] == "Maria Silva"


def test_dashboard_e_comparativo(client):
    produto_id, _ = _cadastros(client)
    _novo_pedido(client, produto_id)
    client.post("/transacoes", json={"type": "expense", "amount": "50", "date": "2025-02-10"}, headers=USUARIO)
    client.post("/transacoes", json={"type": "income", "amount": "300", "date": "2025-03-05"}, headers=USUARIO)

    dashboard = client.get("/financeiro/dashboard", headers=USUARIO).json()
    assert dashboard["active_orders_count"] == 1
    assert dashboard["pending_deposits_count"] == 1
    assert Decimal(dashboard["pending_deposits_value"]) == Decimal("105")

    comp = client.get("/financeiro/comparativo", headers=USUARIO).json()
    assert comp["current"]["month"] == {"month": 3, "year": 2025}
    assert Decimal(comp["income_variation"]) == Decimal("100")
    assert Decimal(comp["previous"]["expense"]) == Decimal("50")

    fevereiro = client.get("/financeiro/resumo", params={"month": 2, "year": 2025}, headers=USUARIO).json()
    assert Decimal(fevereiro["expense"]) == Decimal("50")
    assert fevereiro["start"] == "2025-02-01"


def test_remarcar_sinal_nao_duplica_receita(client):
    produto_id, _ = _cadastros(client)
    pedido = _novo_pedido(client, produto_id)

    client.put(f"/pedidos/{pedido['id']}/sinal", json={"payment_method": "pix"}, headers=USUARIO)
    resp = client.put(f"/pedidos/{pedido['id']}/sinal", json={"amount": "80"}, headers=USUARIO)
    assert resp.status_code == 200
    assert Decimal(resp.json()["deposit_amount"]) == Decimal("80")

    transacoes = client.get("/transacoes", headers=USUARIO).json()
    assert len(transacoes) == 1
    assert Decimal(transacoes[0]["amount"]) == Decimal("80")

    resumo = client.get("/financeiro/resumo", params={"period": "all"}, headers=USUARIO).json()
    assert Decimal(resumo["income"]) == Decimal("80")


def test_sinal_em_pedido_cancelado_nao_entra_no_caixa(client):
    produto_id, _ = _cadastros(client)
    pedido = _novo_pedido(client, produto_id)

    client.put(f"/pedidos/{pedido['id']}/status", json={"status": "cancelled"}, headers=USUARIO)
    resp = client.put(f"/pedidos/{pedido['id']}/sinal", json={"payment_method": "pix"}, headers=USUARIO)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert client.get("/transacoes", headers=USUARIO).json() == []
