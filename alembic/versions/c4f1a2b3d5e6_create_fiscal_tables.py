"""create fiscal tables

Revision ID: c4f1a2b3d5e6
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c4f1a2b3d5e6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _valor(nome: str) -> sa.Column:
    return sa.Column(nome, sa.Numeric(precision=15, scale=2), nullable=False, server_default='0')


def upgrade() -> None:
    """Upgrade schema - Empresas, dados fiscais e senhas."""

    op.execute("CREATE SCHEMA IF NOT EXISTS fiscal")

    # Empresas
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('cnpj', sa.String(length=20), nullable=True),
        sa.Column('sem_movimento', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('segmento', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        schema='fiscal'
    )
    op.create_index('ix_fiscal_companies_id', 'companies', ['id'], unique=False, schema='fiscal')
    op.create_index('ix_fiscal_companies_name', 'companies', ['name'], unique=False, schema='fiscal')
    op.create_index('ix_fiscal_companies_cnpj', 'companies', ['cnpj'], unique=False, schema='fiscal')

    # Dados fiscais: um registro por empresa e período
    op.create_table(
        'fiscal_data',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('period', sa.String(length=100), nullable=False),
        _valor('rbt12'),
        _valor('entrada'),
        _valor('saida'),
        _valor('imposto'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['fiscal.companies.id']),
        sa.PrimaryKeyConstraint('id'),
        schema='fiscal'
    )
    op.create_index('ix_fiscal_fiscal_data_id', 'fiscal_data', ['id'], unique=False, schema='fiscal')
    op.create_index('ix_fiscal_fiscal_data_company_id', 'fiscal_data', ['company_id'], unique=False, schema='fiscal')
    op.create_index(
        'ix_fiscal_data_company_period', 'fiscal_data', ['company_id', 'period'], unique=True, schema='fiscal'
    )

    # Senhas de acesso (no máximo uma por empresa)
    op.create_table(
        'company_passwords',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('company_id', sa.Integer(), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['fiscal.companies.id']),
        sa.PrimaryKeyConstraint('id'),
        schema='fiscal'
    )
    op.create_index('ix_fiscal_company_passwords_id', 'company_passwords', ['id'], unique=False, schema='fiscal')
    op.create_index(
        'ix_fiscal_company_passwords_company_id', 'company_passwords', ['company_id'], unique=True, schema='fiscal'
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_fiscal_company_passwords_company_id', table_name='company_passwords', schema='fiscal')
    op.drop_index('ix_fiscal_company_passwords_id', table_name='company_passwords', schema='fiscal')
    op.drop_table('company_passwords', schema='fiscal')

    op.drop_index('ix_fiscal_data_company_period', table_name='fiscal_data', schema='fiscal')
    op.drop_index('ix_fiscal_fiscal_data_company_id', table_name='fiscal_data', schema='fiscal')
    op.drop_index('ix_fiscal_fiscal_data_id', table_name='fiscal_data', schema='fiscal')
    op.drop_table('fiscal_data', schema='fiscal')

    op.drop_index('ix_fiscal_companies_cnpj', table_name='companies', schema='fiscal')
    op.drop_index('ix_fiscal_companies_name', table_name='companies', schema='fiscal')
    op.drop_index('ix_fiscal_companies_id', table_name='companies', schema='fiscal')
    op.drop_table('companies', schema='fiscal')
