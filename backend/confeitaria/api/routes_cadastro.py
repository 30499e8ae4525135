"""
Rotas FastAPI para clientes e produtos
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from confeitaria.api.deps import get_user_id
from confeitaria.api.schemas_cadastro import ClienteCreate, ProdutoCreate
from confeitaria.core.models import Client, Product
from confeitaria.db import get_db
from confeitaria.services.cadastro import service

logger = logging.getLogger(__name__)

clientes_router = APIRouter(prefix="/clientes", tags=["clientes"])
produtos_router = APIRouter(prefix="/produtos", tags=["produtos"])


@clientes_router.get("", response_model=List[Client])
def listar_clientes(
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Lista clientes do usuário (ordem alfabética)."""
    return service.load_clients(db, user_id)


@clientes_router.post("", response_model=Client, status_code=201)
def criar_cliente(
    payload: ClienteCreate,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return service.create_client(db, user_id, payload.model_dump())


@clientes_router.delete("/{client_id}", status_code=204)
def deletar_cliente(
    client_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Exclui cliente; pedidos ficam com a cópia do nome."""
    try:
        service.delete_client(db, user_id, client_id)
    except service.RecordNotFound:
        raise HTTPException(status_code=404, detail="Cliente não encontrado")


@produtos_router.get("", response_model=List[Product])
def listar_produtos(
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return service.load_products(db, user_id)


@produtos_router.post("", response_model=Product, status_code=201)
def criar_produto(
    payload: ProdutoCreate,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return service.create_product(db, user_id, payload.model_dump())


@produtos_router.delete("/{product_id}", status_code=204)
def deletar_produto(
    product_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        service.delete_product(db, user_id, product_id)
    except service.RecordNotFound:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
