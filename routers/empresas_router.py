from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Literal, Optional

from db import get_db
from middleware.auth import CompanyAccess, get_company_access, garantir_acesso
from schemas.empresa_schema import (
    CompanyCreate,
    CompanyUpdate,
    SituacaoUpdate,
    CompanyOut,
    CompanyWithLatestOut,
    CompanyDetailOut,
)
from schemas.dados_fiscais_schema import FiscalDataOut
from schemas.dashboard_schema import EvolucaoEmpresaPeriodo
from schemas.senha_schema import MensagemResponse
from services.empresa_service import (
    listar_empresas_com_ultimo_periodo,
    periodos_recentes,
    obter_empresa,
    criar_empresa,
    atualizar_empresa,
    resolver_situacao,
    atualizar_situacao,
    deletar_empresa,
)
from services.dados_fiscais_service import listar_dados_fiscais
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/empresas", tags=["Empresas"])


@router.get("/", response_model=List[CompanyWithLatestOut])
def listar(
    busca: Optional[str] = Query(None, description="Parte do nome ou do CNPJ"),
    situacao: Optional[str] = Query(None, description="todas, ativa, paralisada, sem_movimento"),
    rbt12_min: Optional[float] = None,
    rbt12_max: Optional[float] = None,
    periodo: Optional[str] = Query(None, description="Período mais recente (igualdade exata)"),
    ordenar_por: str = Query("nome", description="nome, cnpj, rbt12, entrada, saida, imposto, periodo"),
    direcao: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    """Empresas com o período mais recente de cada uma."""
    return listar_empresas_com_ultimo_periodo(
        db,
        busca=busca,
        situacao=situacao,
        rbt12_min=rbt12_min,
        rbt12_max=rbt12_max,
        periodo=periodo,
        ordenar_por=ordenar_por,
        direcao=direcao,
    )


@router.get("/periodos", response_model=List[str])
def listar_periodos(db: Session = Depends(get_db)):
    """Opções do filtro de período da lista (mais recente primeiro)."""
    return periodos_recentes(db)


@router.post("/", response_model=CompanyOut, status_code=201)
def criar(empresa: CompanyCreate, db: Session = Depends(get_db)):
    return criar_empresa(db, empresa.model_dump())


@router.get("/{company_id}", response_model=CompanyDetailOut)
def obter(
    company_id: int,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Empresa com os dados fiscais (mais recente primeiro). Exige liberação se protegida."""
    empresa = obter_empresa(db, company_id)
    garantir_acesso(db, company_id, acesso)

    detalhe = CompanyDetailOut.model_validate(empresa)
    detalhe.fiscal_data = [
        FiscalDataOut.model_validate(r) for r in listar_dados_fiscais(db, company_id)
    ]
    return detalhe


@router.put("/{company_id}", response_model=CompanyOut)
def atualizar(company_id: int, dados: CompanyUpdate, db: Session = Depends(get_db)):
    return atualizar_empresa(db, company_id, dados.model_dump(exclude_unset=True))


@router.patch("/{company_id}/situacao", response_model=CompanyOut)
def alterar_situacao(company_id: int, dados: SituacaoUpdate, db: Session = Depends(get_db)):
    sem_movimento = resolver_situacao(dados.sem_movimento, dados.situacao)
    return atualizar_situacao(db, company_id, sem_movimento)


@router.delete("/{company_id}", response_model=MensagemResponse)
def excluir(company_id: int, db: Session = Depends(get_db)):
    return deletar_empresa(db, company_id)


@router.get("/{company_id}/evolucao", response_model=List[EvolucaoEmpresaPeriodo])
def evolucao(
    company_id: int,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Série da empresa em ordem cronológica, com saldo por período."""
    obter_empresa(db, company_id)
    garantir_acesso(db, company_id, acesso)
    return DashboardService().evolucao_empresa(db, company_id)
