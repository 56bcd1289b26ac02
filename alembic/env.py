from logging.config import fileConfig
import logging

from sqlalchemy import engine_from_config, pool
from alembic import context

# ============================================================
# ORDEM CORRETA: Primeiro importa os models, DEPOIS pega Base
# ============================================================

# 1. PRIMEIRO: Importa os models (registra as tabelas no metadata)
from models import Company, FiscalData, CompanyPassword  # noqa: F401

# 2. DEPOIS: Importa Base e o schema
from db import Base, SCHEMA
from core.config import settings

# ============================================================

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

# URL vem do .env / ambiente, não do alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata


# ============================================================
# FILTRO: SOMENTE schema = fiscal
# ============================================================
def include_object(object, name, type_, reflected, compare_to):
    if type_ == "table":
        return object.schema == SCHEMA
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=True,
        include_object=include_object,
        version_table_schema=SCHEMA,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # A tabela alembic_version fica no schema fiscal, que precisa existir antes
        connection.exec_driver_sql(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")
        connection.commit()

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=True,
            include_object=include_object,
            version_table_schema=SCHEMA,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


logger.info(
    "Tabelas no metadata: %s",
    ", ".join(f"{t.schema}.{t.name}" for t in target_metadata.tables.values()),
)

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
