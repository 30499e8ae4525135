"""
Taxonomia de erros do motor
"""

from typing import Optional

from pydantic import BaseModel


class ConfeitariaError(Exception):
    """Erro base do motor"""


class ValidationError(ConfeitariaError, ValueError):
    """Argumento inválido informado pelo chamador"""


class DepositValidationError(ValidationError):
    """Sinal <= 0 ou maior que o total do pedido"""


class InvalidTransitionError(ValidationError):
    """Transição de status fora da tabela permitida (modo estrito)"""


class CategoryValidationError(ValidationError):
    """Categoria explícita fora do vocabulário do tipo de transação"""


class PreconditionError(ConfeitariaError):
    """Chamada sem contexto obrigatório (ex.: usuário não informado)"""


class DataIntegrityWarning(BaseModel):
    """
    Irregularidade não fatal encontrada nos dados.

    O cálculo continua (produto ausente custa 0, data inválida sai do período)
    e o aviso volta junto com o resultado.
    """

    code: str  # MISSING_PRODUCT, INVALID_DATE, TOTAL_MISMATCH
    message: str
    ref_id: Optional[str] = None


def require_user(user_id: Optional[str]) -> str:
    """Garante contexto de usuário antes de consultar ou agregar dados."""
    if user_id is None or not str(user_id).strip():
        raise PreconditionError("Contexto de usuário ausente")
    return str(user_id).strip()
