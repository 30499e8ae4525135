"""
Schemas Pydantic para API de clientes e produtos
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from confeitaria.core.models import UnitType


class ClienteCreate(BaseModel):
    """Schema para criação de cliente"""

    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[str] = None  # YYYY-MM-DD ou DD/MM/YYYY; inválido vira vazio
    address: Optional[str] = None
    cpf_cnpj: Optional[str] = None


class ProdutoCreate(BaseModel):
    """Schema para criação de produto"""

    name: str = Field(min_length=1)
    description: Optional[str] = None
    cost_price: Decimal = Field(default=Decimal("0"), ge=0)
    sale_price: Decimal = Field(default=Decimal("0"), ge=0)
    unit_type: UnitType = UnitType.UNIT
    photo_url: Optional[str] = None
