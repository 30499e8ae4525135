"""
Modelo SQLAlchemy para lançamentos financeiros
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Date, Numeric, ForeignKey, Text

from confeitaria.models.base import Base
from confeitaria.models.cadastro import novo_id


class TransacaoDB(Base):
    """Receita ou despesa"""

    __tablename__ = "transacoes"

    id = Column(String(36), primary_key=True, default=novo_id)
    user_id = Column(String(100), nullable=False, index=True)
    order_id = Column(String(36), ForeignKey("pedidos.id", ondelete="SET NULL"), nullable=True, index=True)

    type = Column(String(20), nullable=False)  # income | expense
    category = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    description = Column(Text, nullable=True)  # "Categoria - texto" (registros antigos)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
