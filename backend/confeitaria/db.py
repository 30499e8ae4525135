"""
Configuração do banco de dados SQLAlchemy
"""

import logging
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, StaticPool
from confeitaria.core.config import settings, ensure_directories
from confeitaria.models.base import Base

# Importa modelos para garantir registro no metadata
from confeitaria.models import (
    ClienteDB, ProdutoDB, PedidoDB, PedidoItemDB, TransacaoDB
)  # noqa: F401
from confeitaria.services.financeiro.categorias import parse_description

logger = logging.getLogger(__name__)


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Habilita WAL mode e chaves estrangeiras no SQLite"""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str):
    """
    Cria engine com as configurações de SQLite quando aplicável.
    Banco em memória usa StaticPool (uma conexão só, compartilhada).
    """
    connect_args = {}
    poolclass = None

    if "sqlite" in database_url:
        connect_args = {
            "check_same_thread": False,
            "timeout": 20.0
        }
        # NullPool evita locks; em memória cada conexão nova seria um banco vazio
        poolclass = StaticPool if ":memory:" in database_url else NullPool

    eng = create_engine(
        database_url,
        connect_args=connect_args,
        poolclass=poolclass,
        pool_pre_ping=True,
        echo=False
    )

    if "sqlite" in database_url:
        event.listen(eng, "connect", _set_sqlite_pragma)

    return eng


engine = build_engine(settings.database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Cria todas as tabelas no banco de dados e executa migrações"""
    bind = bind or engine
    if "sqlite" in str(bind.url) and ":memory:" not in str(bind.url):
        ensure_directories()
    Base.metadata.create_all(bind=bind)
    _migrate_transaction_categories(bind)


def _migrate_transaction_categories(bind):
    """
    Migração automática: bancos antigos guardavam a categoria só na descrição
    ("Insumos - Farinha"). Adiciona as colunas category/note e preenche a
    partir da descrição, uma única vez.
    """
    inspector = inspect(bind)
    if 'transacoes' not in inspector.get_table_names():
        return

    columns = {col['name'] for col in inspector.get_columns('transacoes')}

    try:
        with bind.begin() as conn:  # begin() faz commit automático
            if 'category' not in columns:
                conn.execute(text("ALTER TABLE transacoes ADD COLUMN category VARCHAR(100)"))
            if 'note' not in columns:
                conn.execute(text("ALTER TABLE transacoes ADD COLUMN note TEXT"))

            pendentes = conn.execute(text(
                "SELECT id, type, description FROM transacoes "
                "WHERE category IS NULL AND note IS NULL AND description IS NOT NULL"
            )).fetchall()

            for row in pendentes:
                category, note = parse_description(row.description, row.type)
                conn.execute(
                    text("UPDATE transacoes SET category = :category, note = :note WHERE id = :id"),
                    {"category": category, "note": note, "id": row.id},
                )

            if pendentes:
                logger.info(f"Migração: {len(pendentes)} transações com categoria extraída da descrição")
    except SQLAlchemyError as e:
        logger.error(f"Erro na migração de categorias: {e}", exc_info=True)
        raise


def get_db() -> Session:
    """
    Dependency para obter sessão do banco de dados.
    Usar com Depends(get_db) no FastAPI.

    Faz commit ao final da requisição e rollback em caso de erro.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Erro na sessão do banco: {e}", exc_info=True)
        raise
    finally:
        db.close()
