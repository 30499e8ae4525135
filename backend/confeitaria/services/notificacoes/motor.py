"""
Derivação de notificações a partir de clientes e pedidos

Notificações não são gravadas: a lista é recalculada a cada consulta e os
contadores saem da própria lista.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from confeitaria.core.config import settings
from confeitaria.core.datas import anniversary_in_year, days_between, format_date_br
from confeitaria.core.models import (
    Client,
    Notification,
    NotificationPriority,
    NotificationType,
    Order,
)
from confeitaria.services.pedidos.calculo import format_order_number
from confeitaria.services.pedidos.urgencia import UrgencyTier, classify_urgency

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {
    NotificationPriority.HIGH: 0,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.LOW: 2,
}

TYPE_ORDER = {
    NotificationType.DELIVERY: 0,
    NotificationType.DEPOSIT_OVERDUE: 1,
    NotificationType.BIRTHDAY: 2,
}

TIERS_ALTA = frozenset({UrgencyTier.OVERDUE, UrgencyTier.TODAY})
TIERS_MEDIA = frozenset({UrgencyTier.TOMORROW, UrgencyTier.SOON})


class NotificationFeed(BaseModel):
    notifications: List[Notification] = Field(default_factory=list)

    @property
    def high_priority_count(self) -> int:
        return sum(1 for n in self.notifications if n.priority == NotificationPriority.HIGH)

    @property
    def total_count(self) -> int:
        return len(self.notifications)


def next_birthday(birthday: date, today: date) -> date:
    """Próxima ocorrência do aniversário a partir de hoje (inclusive)."""
    neste_ano = anniversary_in_year(birthday, today.year)
    if neste_ano < today:
        return anniversary_in_year(birthday, today.year + 1)
    return neste_ano


def _birthday_notifications(clients: Iterable[Client], today: date, lookahead: int) -> List[Notification]:
    notifs = []
    for client in clients:
        if client.birthday is None:
            continue
        quando = next_birthday(client.birthday, today)
        dias = days_between(today, quando)
        if dias > lookahead:
            continue

        if dias == 0:
            priority = NotificationPriority.MEDIUM
            descricao = "Aniversário é hoje!"
        elif dias == 1:
            priority = NotificationPriority.LOW
            descricao = "Aniversário é amanhã"
        else:
            priority = NotificationPriority.LOW
            descricao = f"Aniversário em {dias} dias ({format_date_br(quando)})"

        notifs.append(Notification(
            id=f"birthday-{client.id}",
            type=NotificationType.BIRTHDAY,
            priority=priority,
            title=client.name,
            description=descricao,
            date=quando,
            client_name=client.name,
        ))
    return notifs


def _descricao_entrega(tier: UrgencyTier, dias: int) -> str:
    if tier == UrgencyTier.OVERDUE:
        return f"Entrega atrasada há {-dias} dia(s)"
    if tier == UrgencyTier.TODAY:
        return "Entrega é hoje!"
    if tier == UrgencyTier.TOMORROW:
        return "Entrega é amanhã"
    return f"Entrega em {dias} dias"


def _order_notifications(orders: Iterable[Order], today: date) -> List[Notification]:
    notifs = []
    for order in orders:
        if order.is_terminal:
            continue
        urgencia = classify_urgency(order.delivery_date, today)
        if urgencia.tier not in TIERS_ALTA and urgencia.tier not in TIERS_MEDIA:
            continue

        cliente = order.client_name or "Cliente não definido"
        numero = format_order_number(order.order_number)
        titulo = f"Pedido {numero} - {cliente}" if numero else f"Pedido - {cliente}"

        notifs.append(Notification(
            id=f"delivery-{order.id}",
            type=NotificationType.DELIVERY,
            priority=NotificationPriority.HIGH if urgencia.tier in TIERS_ALTA else NotificationPriority.MEDIUM,
            title=titulo,
            description=_descricao_entrega(urgencia.tier, urgencia.days_until),
            date=order.delivery_date,
            client_name=cliente,
            order_id=order.id,
        ))

        if urgencia.tier in TIERS_ALTA and not order.deposit_paid and not order.full_payment_received:
            notifs.append(Notification(
                id=f"deposit-{order.id}",
                type=NotificationType.DEPOSIT_OVERDUE,
                priority=NotificationPriority.HIGH,
                title=f"Sinal pendente - {cliente}",
                description="Entrega chegou e o sinal ainda não foi pago",
                date=order.delivery_date,
                client_name=cliente,
                order_id=order.id,
            ))
    return notifs


def derive_notifications(
    clients: Iterable[Client],
    orders: Iterable[Order],
    today: date,
    birthday_lookahead_days: Optional[int] = None,
) -> NotificationFeed:
    """
    Lista priorizada de alertas.

    Ordem: prioridade (alta > média > baixa), data do evento crescente, tipo.

    Args:
        clients: Clientes do usuário
        orders: Pedidos do usuário (cancelados e entregues são ignorados)
        today: Data de referência
        birthday_lookahead_days: Janela de aniversários (0 = só hoje)
    """
    if birthday_lookahead_days is None:
        birthday_lookahead_days = settings.birthday_lookahead_days

    notifs = _birthday_notifications(clients, today, birthday_lookahead_days)
    notifs.extend(_order_notifications(orders, today))

    notifs.sort(key=lambda n: (PRIORITY_ORDER[n.priority], n.date, TYPE_ORDER[n.type], n.id))
    feed = NotificationFeed(notifications=notifs)

    logger.info(f"Notificações derivadas: {feed.total_count} ({feed.high_priority_count} alta prioridade)")
    return feed
