"""
Configurações da aplicação
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configurações da aplicação carregadas do .env"""

    # Ambiente
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Database (SQLite local por padrão)
    database_url: str = "sqlite:///./data/confeitaria.db"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"  # Separado por vírgula

    # Paths
    data_dir: Path = Path("./data")

    # Fuso usado pela camada HTTP para definir "hoje"
    timezone: str = "America/Sao_Paulo"

    # Regras de negócio ajustáveis
    default_deposit_percentage: float = 0.5  # Sinal padrão de 50%
    birthday_lookahead_days: int = 0  # 0 = só aniversários do dia
    product_ranking_limit: int = 6  # Produtos exibidos antes do "Outros"
    top_products_limit: int = 5
    order_number_start: int = 1

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Instância global de settings
settings = Settings()


def ensure_directories():
    """Cria os diretórios necessários se não existirem"""
    settings.data_dir.mkdir(parents=True, exist_ok=True)
