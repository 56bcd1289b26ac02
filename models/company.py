# models/company.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


def situacao_label(sem_movimento: bool) -> str:
    """Rótulo exibido na lista: paralisada e sem movimento são o mesmo estado gravado."""
    return "SM" if sem_movimento else "Ativa"


class Company(Base):
    """Modelo de Empresa."""

    __tablename__ = "companies"
    __table_args__ = {"schema": SCHEMA}

    # Colunas
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    # Somente dígitos; não é único (importação usa como chave quando presente)
    cnpj = Column(String(20), nullable=True, index=True)
    sem_movimento = Column(Boolean, default=False, server_default="0", nullable=False)
    segmento = Column(String(100), nullable=True)

    # Timestamps - padrão snake_case
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    # ============================================================
    # RELACIONAMENTOS
    # ============================================================

    # 1 empresa → N períodos fiscais (exclusão feita pelo service, sem cascade no banco)
    fiscal_data = relationship(
        "FiscalData",
        back_populates="company",
        passive_deletes=True,
    )

    # 1 empresa → 0/1 senha
    password = relationship(
        "CompanyPassword",
        back_populates="company",
        uselist=False,
        passive_deletes=True,
    )

    @property
    def situacao(self) -> str:
        return situacao_label(self.sem_movimento)

    @property
    def protegida(self) -> bool:
        """Empresa com senha definida exige liberação para exibir os dados fiscais."""
        return self.password is not None

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}', cnpj='{self.cnpj}')>"
