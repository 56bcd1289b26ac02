# models/company_password.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db import Base, SCHEMA


class CompanyPassword(Base):
    """Senha de acesso aos dados fiscais de uma empresa (no máximo uma por empresa)."""

    __tablename__ = "company_passwords"
    __table_args__ = {"schema": SCHEMA}

    # Colunas principais
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.companies.id"),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relacionamentos
    company = relationship(
        "Company",
        back_populates="password",
    )

    def __repr__(self):
        return f"<CompanyPassword(id={self.id}, company_id={self.company_id})>"
