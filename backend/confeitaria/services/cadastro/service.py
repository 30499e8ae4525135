"""
Serviço de cadastro: clientes e produtos
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from confeitaria.core.erros import require_user
from confeitaria.core.models import Client, Product
from confeitaria.models import ClienteDB, PedidoDB, ProdutoDB

logger = logging.getLogger(__name__)


class RecordNotFound(LookupError):
    """Cadastro inexistente para o usuário"""


def row_to_client(row: ClienteDB) -> Client:
    return Client(
        id=row.id,
        name=row.name,
        phone=row.phone,
        email=row.email,
        birthday=row.birthday,
        address=row.address,
        cpf_cnpj=row.cpf_cnpj,
        created_at=row.created_at,
    )


def row_to_product(row: ProdutoDB) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description,
        cost_price=row.cost_price or 0,
        sale_price=row.sale_price or 0,
        unit_type=row.unit_type,
        photo_url=row.photo_url,
    )


# Clientes

def load_clients(db: Session, user_id: Optional[str]) -> List[Client]:
    user_id = require_user(user_id)
    rows = db.query(ClienteDB).filter(ClienteDB.user_id == user_id).order_by(ClienteDB.name).all()
    return [row_to_client(r) for r in rows]


def create_client(db: Session, user_id: Optional[str], data: Dict[str, Any]) -> Client:
    user_id = require_user(user_id)
    # Valida pelo registro (aniversário inválido vira None)
    client = Client(id="novo", **data)
    row = ClienteDB(
        user_id=user_id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        birthday=client.birthday,
        address=client.address,
        cpf_cnpj=client.cpf_cnpj,
    )
    db.add(row)
    db.flush()
    db.refresh(row)
    logger.info(f"Cliente {row.id} criado para usuário {user_id}")
    return row_to_client(row)


def delete_client(db: Session, user_id: Optional[str], client_id: str) -> None:
    """
    Exclui o cliente. Pedidos continuam existindo com a cópia de nome/telefone
    e client_id nulo.
    """
    user_id = require_user(user_id)
    row = db.query(ClienteDB).filter(ClienteDB.id == client_id, ClienteDB.user_id == user_id).first()
    if row is None:
        raise RecordNotFound(f"Cliente {client_id} não encontrado")

    desvinculados = (
        db.query(PedidoDB)
        .filter(PedidoDB.user_id == user_id, PedidoDB.client_id == client_id)
        .update({PedidoDB.client_id: None}, synchronize_session=False)
    )
    db.delete(row)
    db.flush()
    logger.info(f"Cliente {client_id} excluído ({desvinculados} pedidos desvinculados)")


# Produtos

def load_products(db: Session, user_id: Optional[str]) -> List[Product]:
    user_id = require_user(user_id)
    rows = db.query(ProdutoDB).filter(ProdutoDB.user_id == user_id).order_by(ProdutoDB.name).all()
    return [row_to_product(r) for r in rows]


def create_product(db: Session, user_id: Optional[str], data: Dict[str, Any]) -> Product:
    user_id = require_user(user_id)
    product = Product(id="novo", **data)
    row = ProdutoDB(
        user_id=user_id,
        name=product.name,
        description=product.description,
        cost_price=product.cost_price,
        sale_price=product.sale_price,
        unit_type=product.unit_type.value,
        photo_url=product.photo_url,
    )
    db.add(row)
    db.flush()
    db.refresh(row)
    logger.info(f"Produto {row.id} criado para usuário {user_id}")
    return row_to_product(row)


def delete_product(db: Session, user_id: Optional[str], product_id: str) -> None:
    """Exclui o produto; itens de pedidos antigos mantêm nome e preço copiados."""
    user_id = require_user(user_id)
    row = db.query(ProdutoDB).filter(ProdutoDB.id == product_id, ProdutoDB.user_id == user_id).first()
    if row is None:
        raise RecordNotFound(f"Produto {product_id} não encontrado")
    db.delete(row)
    db.flush()
    logger.info(f"Produto {product_id} excluído")
