"""
Dependências comuns das rotas
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Header

from confeitaria.core.config import settings


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Usuário da requisição (header X-User-Id). A validação fica nos serviços."""
    return x_user_id


def get_today() -> date:
    """Data de hoje no fuso configurado"""
    return datetime.now(ZoneInfo(settings.timezone)).date()
