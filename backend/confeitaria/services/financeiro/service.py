"""
Serviço financeiro: lançamentos e relatórios do usuário
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from confeitaria.core.erros import require_user
from confeitaria.core.models import Transaction
from confeitaria.models import TransacaoDB
from confeitaria.services.cadastro.service import load_products
from confeitaria.services.financeiro.categorias import compose_description, validate_category
from confeitaria.services.financeiro.motor import (
    DashboardIndicators,
    FinancialSummary,
    MonthComparison,
    aggregate,
    dashboard_indicators,
    month_comparison,
)
from confeitaria.services.financeiro.periodo import MonthSelector, Period
from confeitaria.services.pedidos.service import load_orders, row_to_transaction

logger = logging.getLogger(__name__)


class TransactionNotFound(LookupError):
    """Lançamento inexistente para o usuário"""


def load_transactions(db: Session, user_id: Optional[str]) -> List[Transaction]:
    user_id = require_user(user_id)
    rows = (
        db.query(TransacaoDB)
        .filter(TransacaoDB.user_id == user_id)
        .order_by(TransacaoDB.date.desc(), TransacaoDB.created_at.desc())
        .all()
    )
    return [row_to_transaction(r) for r in rows]


def create_transaction(db: Session, user_id: Optional[str], data: Dict[str, Any]) -> Transaction:
    """
    Registra receita/despesa.

    Categoria explícita é validada contra o vocabulário do tipo. Sem categoria,
    uma descrição no formato "Categoria - texto" é interpretada uma vez aqui.
    """
    user_id = require_user(user_id)
    tx = Transaction(user_id=user_id, **data)
    if data.get("category") is not None:
        validate_category(tx.category, tx.type)

    row = TransacaoDB(
        user_id=user_id,
        order_id=tx.order_id,
        type=tx.type.value,
        category=tx.category,
        note=tx.note,
        description=compose_description(tx.category, tx.note),
        amount=tx.amount,
        date=tx.date,
    )
    db.add(row)
    db.flush()
    db.refresh(row)
    logger.info(f"Transação {row.id} ({row.type}, {row.category or 'sem categoria'}) criada")
    return row_to_transaction(row)


def delete_transaction(db: Session, user_id: Optional[str], transaction_id: str) -> None:
    user_id = require_user(user_id)
    row = (
        db.query(TransacaoDB)
        .filter(TransacaoDB.id == transaction_id, TransacaoDB.user_id == user_id)
        .first()
    )
    if row is None:
        raise TransactionNotFound(f"Transação {transaction_id} não encontrada")
    db.delete(row)
    db.flush()


def financial_summary(
    db: Session,
    user_id: Optional[str],
    period: Period,
    today: date,
    selected_month: Optional[MonthSelector] = None,
) -> FinancialSummary:
    """Carrega os dados do usuário e agrega no período"""
    user_id = require_user(user_id)
    return aggregate(
        load_transactions(db, user_id),
        load_orders(db, user_id),
        load_products(db, user_id),
        period,
        today,
        selected_month=selected_month,
    )


def month_over_month(
    db: Session,
    user_id: Optional[str],
    today: date,
    selected_month: Optional[MonthSelector] = None,
) -> MonthComparison:
    user_id = require_user(user_id)
    return month_comparison(load_transactions(db, user_id), today, selected_month)


def dashboard(db: Session, user_id: Optional[str]) -> DashboardIndicators:
    user_id = require_user(user_id)
    return dashboard_indicators(load_orders(db, user_id))
