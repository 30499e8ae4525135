"""
Modelos SQLAlchemy para clientes e produtos
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Date, Numeric, Text

from confeitaria.models.base import Base


def novo_id() -> str:
    return str(uuid.uuid4())


class ClienteDB(Base):
    """Cliente da confeitaria"""

    __tablename__ = "clientes"

    id = Column(String(36), primary_key=True, default=novo_id)
    user_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    birthday = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    cpf_cnpj = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ProdutoDB(Base):
    """Produto do catálogo"""

    __tablename__ = "produtos"

    id = Column(String(36), primary_key=True, default=novo_id)
    user_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cost_price = Column(Numeric(12, 2), default=0, nullable=False)
    sale_price = Column(Numeric(12, 2), default=0, nullable=False)
    unit_type = Column(String(20), default="unit", nullable=False)  # kg | unit | cento
    photo_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
