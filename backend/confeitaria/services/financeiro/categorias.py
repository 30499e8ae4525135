"""
Categorias de transações

Vocabulário fixo por tipo e compatibilidade com o formato legado
"Categoria - texto livre" gravado na descrição.
"""

import logging
from typing import Optional, Tuple

from confeitaria.core.erros import CategoryValidationError

logger = logging.getLogger(__name__)

DELIMITADOR = " - "
OUTROS = "Outros"

EXPENSE_CATEGORIES = (
    "Insumos",
    "Embalagens",
    "Combustível",
    "Equipamentos",
    "Marketing",
    "Aluguel",
    OUTROS,
)

INCOME_CATEGORIES = (
    "Sinal",
    "Pagamento Final",
    "Venda Avulsa",
    OUTROS,
)

CATEGORIES_BY_TYPE = {
    "expense": EXPENSE_CATEGORIES,
    "income": INCOME_CATEGORIES,
}

ALL_CATEGORIES = tuple(dict.fromkeys(EXPENSE_CATEGORIES + INCOME_CATEGORIES))


def _tipo(transaction_type) -> Optional[str]:
    if transaction_type is None:
        return None
    return getattr(transaction_type, "value", transaction_type)


def categories_for(transaction_type) -> Tuple[str, ...]:
    """Categorias válidas para o tipo; sem tipo, a união dos dois vocabulários."""
    tipo = _tipo(transaction_type)
    if tipo is None:
        return ALL_CATEGORIES
    return CATEGORIES_BY_TYPE.get(tipo, ())


def parse_description(
    description: Optional[str],
    transaction_type=None,
) -> Tuple[Optional[str], Optional[str]]:
    """
    Separa "Categoria - texto" em (categoria, texto).

    Só reconhece a categoria se o prefixo antes do primeiro " - " estiver no
    vocabulário do tipo. Caso contrário devolve (None, descrição original).

    Exemplos:
        "Insumos - Farinha" -> ("Insumos", "Farinha")
        "Aluguel mensal"    -> (None, "Aluguel mensal")
    """
    if not description:
        return None, description

    idx = description.find(DELIMITADOR)
    if idx > 0:
        categoria = description[:idx]
        texto = description[idx + len(DELIMITADOR):]
        if categoria in categories_for(transaction_type):
            return categoria, texto

    return None, description


def bucket_for(category: Optional[str], transaction_type) -> str:
    """Categoria usada na agregação: desconhecida ou ausente vai para "Outros"."""
    if category and category in categories_for(transaction_type):
        return category
    return OUTROS


def validate_category(category: Optional[str], transaction_type) -> Optional[str]:
    """
    Valida categoria explícita na gravação.
    None é aceito (transação sem categoria).
    """
    if category is None:
        return None
    if category not in categories_for(transaction_type):
        raise CategoryValidationError(
            f"Categoria '{category}' inválida para transação do tipo '{_tipo(transaction_type)}'"
        )
    return category


def compose_description(category: Optional[str], note: Optional[str]) -> str:
    """Monta a descrição no formato legado, para quem ainda lê só esse campo."""
    note = (note or "").strip()
    if category:
        return f"{category}{DELIMITADOR}{note}" if note else category
    return note
