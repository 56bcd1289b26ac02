"""
Schemas para o Dashboard.
"""
from pydantic import BaseModel
from typing import List


class EstatisticasFiscais(BaseModel):
    """Estatisticas gerais do dashboard."""
    total_empresas: int
    empresas_ativas: int
    empresas_sem_movimento: int
    empresas_protegidas: int
    total_registros: int  # somente registros visiveis (sem senha ou liberados)
    entrada: float
    saida: float
    imposto: float


class EvolucaoPeriodo(BaseModel):
    """Totais de todas as empresas visiveis em um periodo."""
    period: str
    entrada: float
    saida: float
    imposto: float
    empresas: int


class EvolucaoEmpresaPeriodo(BaseModel):
    """Ponto da serie de uma empresa."""
    period: str
    rbt12: float
    entrada: float
    saida: float
    imposto: float
    saldo: float  # entrada - saida


class DashboardResponse(BaseModel):
    """Response completo do dashboard."""
    estatisticas: EstatisticasFiscais
    evolucao: List[EvolucaoPeriodo]
