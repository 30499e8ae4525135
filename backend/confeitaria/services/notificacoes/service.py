"""
Serviço de notificações do usuário
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from confeitaria.core.erros import require_user
from confeitaria.services.cadastro.service import load_clients
from confeitaria.services.notificacoes.motor import NotificationFeed, derive_notifications
from confeitaria.services.pedidos.service import load_orders

logger = logging.getLogger(__name__)


def user_notifications(
    db: Session,
    user_id: Optional[str],
    today: date,
    birthday_lookahead_days: Optional[int] = None,
) -> NotificationFeed:
    user_id = require_user(user_id)
    return derive_notifications(
        load_clients(db, user_id),
        load_orders(db, user_id),
        today,
        birthday_lookahead_days=birthday_lookahead_days,
    )
