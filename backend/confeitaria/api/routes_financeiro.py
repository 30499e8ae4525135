"""
Rotas FastAPI para lançamentos e relatórios financeiros
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from confeitaria.api.deps import get_today, get_user_id
from confeitaria.api.schemas_financeiro import TransacaoCreate
from confeitaria.core.models import Transaction
from confeitaria.db import get_db
from confeitaria.services.financeiro import service
from confeitaria.services.financeiro.motor import (
    DashboardIndicators,
    FinancialSummary,
    MonthComparison,
)
from confeitaria.services.financeiro.periodo import MonthSelector, Period

logger = logging.getLogger(__name__)

transacoes_router = APIRouter(prefix="/transacoes", tags=["transacoes"])
financeiro_router = APIRouter(prefix="/financeiro", tags=["financeiro"])


def _mes_selecionado(month: Optional[int], year: Optional[int], today: date) -> Optional[MonthSelector]:
    if month is None:
        return None
    return MonthSelector(month=month, year=year or today.year)


@transacoes_router.get("", response_model=List[Transaction])
def listar_transacoes(
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Lista transações (mais recentes primeiro)."""
    return service.load_transactions(db, user_id)


@transacoes_router.post("", response_model=Transaction, status_code=201)
def criar_transacao(
    payload: TransacaoCreate,
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    data = payload.model_dump()
    if not data.get("date"):
        data["date"] = today
    return service.create_transaction(db, user_id, data)


@transacoes_router.delete("/{transaction_id}", status_code=204)
def deletar_transacao(
    transaction_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        service.delete_transaction(db, user_id, transaction_id)
    except service.TransactionNotFound:
        raise HTTPException(status_code=404, detail="Transação não encontrada")


@financeiro_router.get("/resumo", response_model=FinancialSummary)
def resumo_financeiro(
    period: Period = Period.MONTH,
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Resumo do período: receitas, despesas, categorias, lucro bruto e rankings.

    `month`/`year` selecionam um mês específico e têm precedência sobre `period`.
    """
    return service.financial_summary(
        db, user_id, period, today, _mes_selecionado(month, year, today)
    )


@financeiro_router.get("/comparativo", response_model=MonthComparison)
def comparativo_mensal(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    user_id: Optional[str] = Depends(get_user_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """Mês selecionado (ou atual) contra o anterior."""
    return service.month_over_month(db, user_id, today, _mes_selecionado(month, year, today))


@financeiro_router.get("/dashboard", response_model=DashboardIndicators)
def indicadores(
    user_id: Optional[str] = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return service.dashboard(db, user_id)
