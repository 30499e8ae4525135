"""
Testes de derivação de notificações
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import date

from confeitaria.core.models import NotificationPriority, NotificationType, OrderStatus
from confeitaria.services.notificacoes.motor import derive_notifications, next_birthday
from fabricas import HOJE, cliente, pedido


def test_entrega_hoje_sem_sinal_gera_duas_altas():
    order = pedido(total="200", delivery_date=HOJE, client_name="Maria", order_number=3)
    feed = derive_notifications([], [order], HOJE)

    assert feed.total_count == 2
    assert feed.high_priority_count == 2
    entrega, sinal = feed.notifications
    assert entrega.id == "delivery-p1"
    assert entrega.type == NotificationType.DELIVERY
    assert entrega.title == "Pedido #0003 - Maria"
    assert entrega.description == "Entrega é hoje!"
    assert sinal.id == "deposit-p1"
    assert sinal.type == NotificationType.DEPOSIT_OVERDUE
    assert sinal.order_id == "p1"


def test_pedido_quitado_nao_cobra_sinal():
    pagos = [
        pedido(id="a", delivery_date=HOJE, deposit_paid=True),
        pedido(id="b", delivery_date=HOJE, full_payment_received=True),
    ]
    feed = derive_notifications([], pagos, HOJE)
    assert [n.id for n in feed.notifications] == ["delivery-a", "delivery-b"]


def test_pedidos_terminais_ignorados():
    pedidos = [
        pedido(id="a", delivery_date="2025-03-10", status=OrderStatus.DELIVERED),
        pedido(id="b", delivery_date=HOJE, status=OrderStatus.CANCELLED),
    ]
    feed = derive_notifications([], pedidos, HOJE)
    assert feed.total_count == 0
    assert feed.high_priority_count == 0


def test_entrega_amanha_e_proxima_sao_medias():
    pedidos = [
        pedido(id="amanha", delivery_date="2025-03-13"),
        pedido(id="tres_dias", delivery_date="2025-03-15"),
        pedido(id="longe", delivery_date="2025-03-16"),
        pedido(id="sem_data"),
    ]
    feed = derive_notifications([], pedidos, HOJE)
    assert [n.id for n in feed.notifications] == ["delivery-amanha", "delivery-tres_dias"]
    assert all(n.priority == NotificationPriority.MEDIUM for n in feed.notifications)
    assert feed.notifications[1].description == "Entrega em 3 dias"


def test_entrega_atrasada():
    feed = derive_notifications([], [pedido(delivery_date="2025-03-10", deposit_paid=True)], HOJE)
    assert feed.notifications[0].priority == NotificationPriority.HIGH
    assert feed.notifications[0].description == "Entrega atrasada há 2 dia(s)"


def test_aniversario_hoje_e_media():
    clientes = [
        cliente("c1", "Ana", "1990-03-12"),
        cliente("c2", "Bia", "1985-03-13"),
        cliente("c3", "Caio"),
    ]
    feed = derive_notifications(clientes, [], HOJE)
    assert [n.id for n in feed.notifications] == ["birthday-c1"]
    assert feed.notifications[0].priority == NotificationPriority.MEDIUM
    assert feed.notifications[0].date == HOJE


def test_aniversario_com_antecedencia_e_baixa():
    clientes = [cliente("c2", "Bia", "1985-03-13"), cliente("c3", "Caio", "2000-03-19")]
    feed = derive_notifications(clientes, [], HOJE, birthday_lookahead_days=7)
    assert [n.id for n in feed.notifications] == ["birthday-c2", "birthday-c3"]
    assert all(n.priority == NotificationPriority.LOW for n in feed.notifications)
    assert feed.notifications[1].description == "Aniversário em 7 dias (19/03/2025)"


def test_aniversario_29_de_fevereiro_em_ano_comum():
    hoje = date(2025, 2, 28)
    feed = derive_notifications([cliente("c1", "Leap", "2000-02-29")], [], hoje)
    assert feed.total_count == 1
    assert feed.notifications[0].priority == NotificationPriority.MEDIUM
    assert next_birthday(date(2000, 2, 29), date(2024, 3, 1)) == date(2025, 2, 28)


def test_ordenacao_prioridade_data_tipo():
    pedidos = [
        pedido(id="proxima", delivery_date="2025-03-14", deposit_paid=True),
        pedido(id="hoje", delivery_date=HOJE, deposit_paid=True),
        pedido(id="atrasada", delivery_date="2025-03-11", deposit_paid=True),
    ]
    clientes = [cliente("c1", "Ana", "1990-03-12")]
    feed = derive_notifications(clientes, pedidos, HOJE)

    assert [n.id for n in feed.notifications] == [
        "delivery-atrasada",
        "delivery-hoje",
        "birthday-c1",
        "delivery-proxima",
    ]
    assert feed.high_priority_count == 2
    assert feed.total_count == 4


def test_cliente_sem_nome_no_pedido():
    feed = derive_notifications([], [pedido(delivery_date=HOJE, deposit_paid=True)], HOJE)
    assert feed.notifications[0].client_name == "Cliente não definido"
    assert feed.notifications[0].title == "Pedido - Cliente não definido"
