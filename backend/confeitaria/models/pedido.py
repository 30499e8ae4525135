"""
Modelos SQLAlchemy para pedidos e itens
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Numeric, ForeignKey, Text
)
from sqlalchemy.orm import relationship

from confeitaria.models.base import Base
from confeitaria.models.cadastro import novo_id


class PedidoDB(Base):
    """Pedido de um cliente"""

    __tablename__ = "pedidos"

    id = Column(String(36), primary_key=True, default=novo_id)
    user_id = Column(String(100), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clientes.id", ondelete="SET NULL"), nullable=True)

    # Cópia do cliente no momento do pedido
    client_name = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)

    order_number = Column(Integer, nullable=True, index=True)  # Sequencial por usuário
    status = Column(String(50), default="quote", nullable=False)  # quote, awaiting_deposit, in_production, ready, delivered, cancelled

    delivery_date = Column(Date, nullable=True)
    delivery_time = Column(String(10), nullable=True)
    delivery_address = Column(Text, nullable=True)
    delivery_fee = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)

    # Pagamento
    deposit_paid = Column(Boolean, default=False, nullable=False)
    deposit_amount = Column(Numeric(12, 2), nullable=True)
    full_payment_received = Column(Boolean, default=False, nullable=False)
    payment_method = Column(String(20), nullable=True)  # pix | credit_card | link
    payment_fee = Column(Numeric(12, 2), default=0, nullable=False)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relacionamento
    items = relationship(
        "PedidoItemDB",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoItemDB.position",
    )


class PedidoItemDB(Base):
    """Linha do pedido (nome e preço copiados do produto)"""

    __tablename__ = "pedido_itens"

    id = Column(String(36), primary_key=True, default=novo_id)
    order_id = Column(String(36), ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(36), ForeignKey("produtos.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, default=0, nullable=False)

    product_name = Column(String(255), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    unit_type = Column(String(20), default="unit", nullable=False)
    is_gift = Column(Boolean, default=False, nullable=False)

    # Relacionamento
    pedido = relationship("PedidoDB", back_populates="items")
