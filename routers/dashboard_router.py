"""
Router para endpoints do Dashboard.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from middleware.auth import CompanyAccess, get_company_access
from schemas.dashboard_schema import DashboardResponse, EstatisticasFiscais, EvolucaoPeriodo
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = logging.getLogger(__name__)


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """
    Retorna estatísticas e evolução mensal.

    Empresas protegidas só entram nos totais quando liberadas pelo header X-Acesso-Empresa.
    """
    service = DashboardService()
    return service.get_dashboard(db=db, acesso=acesso)


@router.get("/estatisticas", response_model=EstatisticasFiscais)
def get_estatisticas(
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    return DashboardService().estatisticas(db, acesso)


@router.get("/evolucao", response_model=List[EvolucaoPeriodo])
def get_evolucao(
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Totais por período, em ordem cronológica."""
    return DashboardService().evolucao_geral(db, acesso)
