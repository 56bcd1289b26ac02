from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class FiscalDataBase(BaseModel):
    period: str = Field(..., max_length=100)
    rbt12: Optional[float] = 0
    entrada: Optional[float] = 0
    saida: Optional[float] = 0
    imposto: Optional[float] = 0

    @field_validator("period")
    @classmethod
    def validate_period(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Período é obrigatório")
        return v

    # Valores ausentes são gravados como 0
    @field_validator("rbt12", "entrada", "saida", "imposto")
    @classmethod
    def default_zero(cls, v):
        return v or 0.0


class FiscalDataCreate(FiscalDataBase):
    company_id: int


class FiscalDataUpdate(FiscalDataBase):
    """Edição sobrescreve o registro inteiro."""
    pass


class FiscalDataOut(BaseModel):
    id: int
    company_id: int
    period: str
    rbt12: float
    entrada: float
    saida: float
    imposto: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TotaisFiscais(BaseModel):
    rbt12: float = 0
    entrada: float = 0
    saida: float = 0
    imposto: float = 0


class FiscalDataListOut(BaseModel):
    """Registros de uma empresa com totais e anos disponíveis para filtro."""
    registros: List[FiscalDataOut]
    totais: TotaisFiscais
    anos_disponiveis: List[str]
