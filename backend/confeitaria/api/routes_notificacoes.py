"""
Rotas FastAPI para notificações
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from confeitaria.api.deps import get_today, get_user_id
from confeitaria.core.models import Notification
from confeitaria.db import get_db
from confeitaria.services.notificacoes.service import user_notifications

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notificacoes", tags=["notificacoes"])


class NotificacoesResponse(BaseModel):
    notifications: List[Notification]
    high_priority_count: int
    total_count: int


@router.get("", response_model=NotificacoesResponse)
def listar_notificacoes(
    birthday_lookahead_days: Optional[int] = Query(default=None, ge=0, le=366),
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Alertas de aniversários, entregas próximas e sinais pendentes."""
    feed = user_notifications(db, user_id, today, birthday_lookahead_days)
    return NotificacoesResponse(
        notifications=feed.notifications,
        high_priority_count=feed.high_priority_count,
        total_count=feed.total_count,
    )
