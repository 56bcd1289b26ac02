from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from core.config import settings

logger = logging.getLogger(__name__)

# Schema das tabelas no PostgreSQL
SCHEMA = "fiscal"

# ============================================================
# CONFIGURAÇÃO DO SQLAlchemy
# ============================================================

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError(
        "A variável DATABASE_URL não está definida.\n"
        "O arquivo .env deve conter: DATABASE_URL=postgresql://..."
    )

engine_options = {
    "pool_pre_ping": True,  # Verifica conexão antes de usar
    "echo": False,          # Mude para True para ver queries SQL
}

if DATABASE_URL.startswith("sqlite"):
    # SQLite não tem schemas: as tabelas ficam no banco principal
    engine_options["execution_options"] = {"schema_translate_map": {SCHEMA: None}}
    engine_options["connect_args"] = {"check_same_thread": False}
else:
    engine_options["pool_size"] = 10      # Pool de conexões
    engine_options["max_overflow"] = 20   # Conexões extras quando necessário

# Cria o engine do banco
engine = create_engine(DATABASE_URL, **engine_options)

# Cria a sessão
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base para os modelos
Base = declarative_base()

# ============================================================
# DEPENDENCY INJECTION para FastAPI
# ============================================================

def get_db():
    """
    Cria uma sessão do banco de dados para cada requisição.
    Fecha automaticamente após o uso.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db):
    """insert() do dialeto da sessão, com suporte a ON CONFLICT (PostgreSQL ou SQLite)."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert

# ============================================================
# FUNÇÃO AUXILIAR PARA TESTAR CONEXÃO
# ============================================================

def test_connection():
    """Testa se a conexão com o banco está funcionando"""
    try:
        with engine.connect():
            logger.info("Conexao com o banco de dados OK!")
            return True
    except Exception as e:
        logger.error(f"Erro ao conectar no banco: {e}")
        return False


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    test_connection()
