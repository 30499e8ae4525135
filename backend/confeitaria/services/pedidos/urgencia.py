"""
Classificação de urgência de entrega

Fonte única de verdade para "quão perto está a entrega": listas de pedidos,
painéis e notificações consomem o mesmo resultado.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from confeitaria.core.datas import days_between


class UrgencyTier(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    SOON = "soon"
    NORMAL = "normal"
    NONE = "none"


class Urgency(BaseModel):
    tier: UrgencyTier
    days_until: Optional[int] = None

    @property
    def label(self) -> str:
        return urgency_label(self)

    @property
    def severity(self) -> Optional[str]:
        return URGENCY_DISPLAY[self.tier]["severity"]


# Tabela estática de exibição por faixa
URGENCY_DISPLAY = {
    UrgencyTier.OVERDUE: {
        "label": "Atrasado",
        "severity": "critical",
        "css_class": "bg-red-500/50 text-red-900 dark:text-red-100",
    },
    UrgencyTier.TODAY: {
        "label": "Hoje!",
        "severity": "critical",
        "css_class": "bg-red-500/50 text-red-900 dark:text-red-100",
    },
    UrgencyTier.TOMORROW: {
        "label": "Amanhã",
        "severity": "critical",
        "css_class": "bg-red-500/50 text-red-900 dark:text-red-100",
    },
    UrgencyTier.SOON: {
        "label": "{dias} dias",
        "severity": "warning",
        "css_class": "bg-amber-500/50 text-amber-900 dark:text-amber-100",
    },
    UrgencyTier.NORMAL: {
        "label": "{dias} dias",
        "severity": "normal",
        "css_class": "bg-muted text-muted-foreground",
    },
    UrgencyTier.NONE: {
        "label": "",
        "severity": None,
        "css_class": "",
    },
}


def classify_urgency(
    delivery_date: Optional[Union[date, datetime]],
    today: Union[date, datetime],
) -> Urgency:
    """
    Classifica a data de entrega em relação a `today`.

    Ordem de avaliação (primeira regra que casar):
    sem data -> none; antes de hoje -> overdue; hoje -> today;
    1 dia -> tomorrow; 2 a 3 dias -> soon; mais de 3 -> normal.
    """
    if delivery_date is None:
        return Urgency(tier=UrgencyTier.NONE, days_until=None)

    dias = days_between(today, delivery_date)

    if dias < 0:
        tier = UrgencyTier.OVERDUE
    elif dias == 0:
        tier = UrgencyTier.TODAY
    elif dias == 1:
        tier = UrgencyTier.TOMORROW
    elif dias <= 3:
        tier = UrgencyTier.SOON
    else:
        tier = UrgencyTier.NORMAL

    return Urgency(tier=tier, days_until=dias)


def urgency_label(urgency: Urgency) -> str:
    template = URGENCY_DISPLAY[urgency.tier]["label"]
    return template.format(dias=urgency.days_until)
