"""
Testes do classificador de urgência
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import datetime, timedelta

from confeitaria.services.pedidos.urgencia import (
    URGENCY_DISPLAY,
    UrgencyTier,
    classify_urgency,
)
from fabricas import HOJE


def test_faixas_por_dias():
    """Dias até a entrega -> faixa"""
    esperado = {
        -5: UrgencyTier.OVERDUE,
        -1: UrgencyTier.OVERDUE,
        0: UrgencyTier.TODAY,
        1: UrgencyTier.TOMORROW,
        2: UrgencyTier.SOON,
        3: UrgencyTier.SOON,
        4: UrgencyTier.NORMAL,
        10: UrgencyTier.NORMAL,
    }
    for dias, tier in esperado.items():
        urgencia = classify_urgency(HOJE + timedelta(days=dias), HOJE)
        assert urgencia.tier == tier, f"{dias} dias deveria ser {tier}"
        assert urgencia.days_until == dias


def test_sem_data():
    urgencia = classify_urgency(None, HOJE)
    assert urgencia.tier == UrgencyTier.NONE
    assert urgencia.days_until is None
    assert urgencia.label == ""


def test_ignora_horario():
    """Entrega amanhã cedo continua sendo 'amanhã' às 23h de hoje"""
    agora = datetime(2025, 3, 12, 23, 0)
    entrega = datetime(2025, 3, 13, 1, 0)
    assert classify_urgency(entrega, agora).tier == UrgencyTier.TOMORROW


def test_rotulos():
    assert classify_urgency(HOJE - timedelta(days=2), HOJE).label == "Atrasado"
    assert classify_urgency(HOJE, HOJE).label == "Hoje!"
    assert classify_urgency(HOJE + timedelta(days=1), HOJE).label == "Amanhã"
    assert classify_urgency(HOJE + timedelta(days=3), HOJE).label == "3 dias"
    assert classify_urgency(HOJE + timedelta(days=8), HOJE).label == "8 dias"


def test_tabela_cobre_todas_as_faixas():
    assert set(URGENCY_DISPLAY) == set(UrgencyTier)
    assert classify_urgency(HOJE, HOJE).severity == "critical"
    assert classify_urgency(HOJE + timedelta(days=2), HOJE).severity == "warning"
    assert classify_urgency(HOJE + timedelta(days=5), HOJE).severity == "normal"
