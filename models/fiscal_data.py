# models/fiscal_data.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


def _valor():
    return Column(Numeric(15, 2, asdecimal=False), default=0, server_default="0", nullable=False)


class FiscalData(Base):
    """Modelo de Dados Fiscais (um registro por empresa e período)"""
    __tablename__ = "fiscal_data"
    __table_args__ = (
        Index(
            "ix_fiscal_data_company_period",
            "company_id",
            "period",
            unique=True
        ),
        {"schema": SCHEMA}
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    company_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.companies.id"),
        nullable=False,
        index=True
    )

    # Texto livre (ex: "Janeiro/2024", "01/2024", "2024-01")
    period = Column(String(100), nullable=False)

    rbt12 = _valor()
    entrada = _valor()
    saida = _valor()
    imposto = _valor()

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # ================= RELACIONAMENTOS =================

    company = relationship(
        "Company",
        back_populates="fiscal_data"
    )

    def __repr__(self):
        return (
            f"<FiscalData(id={self.id}, company_id={self.company_id}, "
            f"period='{self.period}')>"
        )
