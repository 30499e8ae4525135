"""
Modelos SQLAlchemy
"""

from confeitaria.models.base import Base
from confeitaria.models.cadastro import ClienteDB, ProdutoDB
from confeitaria.models.pedido import PedidoDB, PedidoItemDB
from confeitaria.models.transacao import TransacaoDB

__all__ = [
    "Base",
    "ClienteDB",
    "ProdutoDB",
    "PedidoDB",
    "PedidoItemDB",
    "TransacaoDB",
]
