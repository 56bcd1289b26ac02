"""
Service para o Dashboard e demais visões derivadas dos dados fiscais.

As visões são recalculadas a cada consulta a partir das tabelas; não há cache.
"""
import logging
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session, selectinload

from middleware.auth import CompanyAccess
from models import Company, FiscalData, CompanyPassword
from schemas.dashboard_schema import (
    EstatisticasFiscais,
    EvolucaoPeriodo,
    EvolucaoEmpresaPeriodo,
    DashboardResponse,
)
from tools.periodos import ordenar_por_periodo

logger = logging.getLogger(__name__)


def ultimo_registro(registros: Iterable[FiscalData]) -> Optional[FiscalData]:
    """Registro com o período mais recente (None se não houver registros)."""
    ordenados = ordenar_por_periodo(registros, lambda r: r.period, decrescente=True)
    return ordenados[0] if ordenados else None


def empresas_protegidas(db: Session) -> Set[int]:
    """IDs das empresas que exigem senha."""
    return {company_id for (company_id,) in db.query(CompanyPassword.company_id).all()}


class DashboardService:
    """Service para visões agregadas dos dados fiscais."""

    def _registros_visiveis(self, db: Session, acesso: CompanyAccess) -> List[FiscalData]:
        """Registros de empresas sem senha ou liberadas na sessão."""
        protegidas = empresas_protegidas(db)
        registros = db.query(FiscalData).all()
        return [
            r for r in registros
            if r.company_id not in protegidas or acesso.pode_acessar(r.company_id)
        ]

    def empresas_com_ultimo_periodo(
        self, db: Session
    ) -> List[Tuple[Company, Optional[FiscalData]]]:
        """Cada empresa (ordem alfabética) com o seu registro mais recente."""
        empresas = (
            db.query(Company)
            .options(selectinload(Company.fiscal_data), selectinload(Company.password))
            .order_by(Company.name)
            .all()
        )
        return [(empresa, ultimo_registro(empresa.fiscal_data)) for empresa in empresas]

    def evolucao_geral(self, db: Session, acesso: CompanyAccess) -> List[EvolucaoPeriodo]:
        """Totais por período de todas as empresas visíveis, em ordem cronológica."""
        grupos = {}
        empresas_por_periodo = {}

        for r in self._registros_visiveis(db, acesso):
            grupo = grupos.setdefault(
                r.period,
                {"period": r.period, "entrada": 0.0, "saida": 0.0, "imposto": 0.0},
            )
            grupo["entrada"] += r.entrada or 0
            grupo["saida"] += r.saida or 0
            grupo["imposto"] += r.imposto or 0
            empresas_por_periodo.setdefault(r.period, set()).add(r.company_id)

        ordenados = ordenar_por_periodo(grupos.values(), lambda g: g["period"])
        return [
            EvolucaoPeriodo(**g, empresas=len(empresas_por_periodo[g["period"]]))
            for g in ordenados
        ]

    def evolucao_empresa(self, db: Session, company_id: int) -> List[EvolucaoEmpresaPeriodo]:
        """Série de uma empresa em ordem cronológica, com saldo = entrada - saída."""
        registros = db.query(FiscalData).filter(FiscalData.company_id == company_id).all()

        return [
            EvolucaoEmpresaPeriodo(
                period=r.period,
                rbt12=r.rbt12 or 0,
                entrada=r.entrada or 0,
                saida=r.saida or 0,
                imposto=r.imposto or 0,
                saldo=(r.entrada or 0) - (r.saida or 0),
            )
            for r in ordenar_por_periodo(registros, lambda r: r.period)
        ]

    def estatisticas(self, db: Session, acesso: CompanyAccess) -> EstatisticasFiscais:
        """Contagens de empresas e somatórios dos registros visíveis."""
        empresas = db.query(Company.id, Company.sem_movimento).all()
        sem_movimento = sum(1 for _, sm in empresas if sm)

        registros = self._registros_visiveis(db, acesso)

        return EstatisticasFiscais(
            total_empresas=len(empresas),
            empresas_ativas=len(empresas) - sem_movimento,
            empresas_sem_movimento=sem_movimento,
            empresas_protegidas=len(empresas_protegidas(db)),
            total_registros=len(registros),
            entrada=sum(r.entrada or 0 for r in registros),
            saida=sum(r.saida or 0 for r in registros),
            imposto=sum(r.imposto or 0 for r in registros),
        )

    def get_dashboard(self, db: Session, acesso: CompanyAccess) -> DashboardResponse:
        """Retorna todos os dados do dashboard."""
        return DashboardResponse(
            estatisticas=self.estatisticas(db, acesso),
            evolucao=self.evolucao_geral(db, acesso),
        )
