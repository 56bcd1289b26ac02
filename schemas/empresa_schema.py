from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import datetime

from .dados_fiscais_schema import FiscalDataOut


def _limpar_nome(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Nome da empresa é obrigatório")
    return v


class CompanyBase(BaseModel):
    name: str = Field(..., max_length=255)
    cnpj: Optional[str] = Field(None, max_length=20)
    sem_movimento: bool = False
    segmento: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _limpar_nome(v)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    cnpj: Optional[str] = Field(None, max_length=20)
    segmento: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return _limpar_nome(v)


SituacaoLabel = Literal["ativa", "paralisada", "paralizada", "sem_movimento"]


class SituacaoUpdate(BaseModel):
    """Altera a situação: pelo booleano ou pelo rótulo exibido na tela."""
    sem_movimento: Optional[bool] = None
    situacao: Optional[SituacaoLabel] = None

    @model_validator(mode="after")
    def validate_situacao(self):
        if self.sem_movimento is None and self.situacao is None:
            raise ValueError("Informe sem_movimento ou situacao")
        return self


class LatestFiscalData(BaseModel):
    period: str
    rbt12: float = 0
    entrada: float = 0
    saida: float = 0
    imposto: float = 0

    model_config = {"from_attributes": True}


class CompanyOut(BaseModel):
    id: int
    name: str
    cnpj: Optional[str] = None
    sem_movimento: bool
    segmento: Optional[str] = None
    situacao: str  # "Ativa" ou "SM"
    protegida: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CompanyWithLatestOut(CompanyOut):
    latest_fiscal_data: Optional[LatestFiscalData] = None


class CompanyDetailOut(CompanyOut):
    fiscal_data: List[FiscalDataOut] = []
