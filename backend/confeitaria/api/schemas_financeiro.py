"""
Schemas Pydantic para API financeira
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from confeitaria.core.models import TransactionType


class TransacaoCreate(BaseModel):
    """
    Schema para criação de transação.

    Use `category` + `note`. `description` no formato "Categoria - texto" é
    aceito para clientes antigos.
    """

    type: TransactionType
    amount: Decimal = Field(gt=0)
    date: Optional[str] = None
    category: Optional[str] = None
    note: Optional[str] = None
    description: Optional[str] = None
    order_id: Optional[str] = None
