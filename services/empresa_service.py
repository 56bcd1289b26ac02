import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models import Company, FiscalData, CompanyPassword
from services.dashboard_service import DashboardService
from tools.periodos import parse_period
from tools.planilha import limpar_cnpj

logger = logging.getLogger(__name__)

SITUACOES_SEM_MOVIMENTO = ("paralisada", "paralizada", "sem_movimento")

CAMPOS_ORDENACAO = ("nome", "cnpj", "rbt12", "entrada", "saida", "imposto", "periodo")


def obter_empresa(db: Session, company_id: int) -> Company:
    empresa = db.query(Company).filter(Company.id == company_id).first()
    if not empresa:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Empresa não encontrada")
    return empresa


def criar_empresa(db: Session, data: dict) -> Company:
    empresa = Company(
        name=data["name"].strip(),
        cnpj=limpar_cnpj(data.get("cnpj")),
        sem_movimento=bool(data.get("sem_movimento", False)),
        segmento=(data.get("segmento") or "").strip() or None,
    )
    db.add(empresa)
    db.commit()
    db.refresh(empresa)
    logger.info(f"Empresa criada: {empresa.id} - {empresa.name}")
    return empresa


def atualizar_empresa(db: Session, company_id: int, data: dict) -> Company:
    empresa = obter_empresa(db, company_id)

    if data.get("name") is not None:
        empresa.name = data["name"].strip()
    if "cnpj" in data:
        empresa.cnpj = limpar_cnpj(data["cnpj"])
    if "segmento" in data:
        empresa.segmento = (data["segmento"] or "").strip() or None

    db.commit()
    db.refresh(empresa)
    logger.info(f"Empresa atualizada: {empresa.id}")
    return empresa


def resolver_situacao(sem_movimento: Optional[bool], situacao: Optional[str]) -> bool:
    """
    Converte o rótulo da tela no booleano gravado.

    "paralisada" e "sem_movimento" são exibidos separadamente, mas gravados
    como o mesmo estado (sem_movimento = True).
    """
    if situacao is not None:
        return situacao in SITUACOES_SEM_MOVIMENTO
    return bool(sem_movimento)


def atualizar_situacao(db: Session, company_id: int, sem_movimento: bool) -> Company:
    empresa = obter_empresa(db, company_id)
    empresa.sem_movimento = sem_movimento
    db.commit()
    db.refresh(empresa)
    logger.info(f"Situação da empresa {empresa.id}: sem_movimento={sem_movimento}")
    return empresa


def deletar_empresa(db: Session, company_id: int) -> dict:
    """
    Exclui a empresa e tudo o que depende dela.

    Ordem: dados fiscais → senha → empresa (o banco não tem cascade).
    """
    obter_empresa(db, company_id)

    removidos = db.query(FiscalData).filter(
        FiscalData.company_id == company_id
    ).delete(synchronize_session=False)

    db.query(CompanyPassword).filter(
        CompanyPassword.company_id == company_id
    ).delete(synchronize_session=False)

    db.query(Company).filter(Company.id == company_id).delete(synchronize_session=False)
    db.commit()

    logger.info(f"Empresa {company_id} excluída com {removidos} registro(s) fiscal(is)")
    return {"message": "A empresa e todos os seus dados fiscais foram removidos com sucesso."}


def _empresa_com_ultimo(empresa: Company, ultimo: Optional[FiscalData]) -> Dict[str, Any]:
    return {
        "id": empresa.id,
        "name": empresa.name,
        "cnpj": empresa.cnpj,
        "sem_movimento": empresa.sem_movimento,
        "segmento": empresa.segmento,
        "situacao": empresa.situacao,
        "protegida": empresa.protegida,
        "created_at": empresa.created_at,
        "updated_at": empresa.updated_at,
        "latest_fiscal_data": {
            "period": ultimo.period or "N/A",
            "rbt12": ultimo.rbt12 or 0,
            "entrada": ultimo.entrada or 0,
            "saida": ultimo.saida or 0,
            "imposto": ultimo.imposto or 0,
        } if ultimo else None,
    }


def _chave_ordenacao(campo: str):
    def chave(item: Dict[str, Any]):
        ultimo = item["latest_fiscal_data"] or {}
        if campo == "cnpj":
            return item["cnpj"] or ""
        if campo == "periodo":
            return parse_period(ultimo.get("period"))
        if campo in ("rbt12", "entrada", "saida", "imposto"):
            return ultimo.get(campo) or 0
        return item["name"].lower()
    return chave


def listar_empresas_com_ultimo_periodo(
    db: Session,
    busca: Optional[str] = None,
    situacao: Optional[str] = None,
    rbt12_min: Optional[float] = None,
    rbt12_max: Optional[float] = None,
    periodo: Optional[str] = None,
    ordenar_por: str = "nome",
    direcao: str = "asc",
) -> List[Dict[str, Any]]:
    """
    Lista de empresas com o período mais recente de cada uma.

    Filtros:
        busca: parte do nome (sem diferenciar maiúsculas) ou do CNPJ
        situacao: "todas", "ativa", "paralisada"/"paralizada"/"sem_movimento"
        rbt12_min / rbt12_max: faixa do RBT12 mais recente (sem dados = 0)
        periodo: período mais recente exatamente igual
    """
    itens = [
        _empresa_com_ultimo(empresa, ultimo)
        for empresa, ultimo in DashboardService().empresas_com_ultimo_periodo(db)
    ]

    if busca:
        termo = busca.strip().lower()
        digitos = limpar_cnpj(busca)
        itens = [
            i for i in itens
            if termo in i["name"].lower()
            or (i["cnpj"] and (termo in i["cnpj"] or (digitos and digitos in i["cnpj"])))
        ]

    if situacao and situacao != "todas":
        sem_movimento = situacao in SITUACOES_SEM_MOVIMENTO
        itens = [i for i in itens if i["sem_movimento"] == sem_movimento]

    def rbt12(item):
        return (item["latest_fiscal_data"] or {}).get("rbt12") or 0

    if rbt12_min is not None:
        itens = [i for i in itens if rbt12(i) >= rbt12_min]
    if rbt12_max is not None:
        itens = [i for i in itens if rbt12(i) <= rbt12_max]

    if periodo and periodo != "todos":
        itens = [
            i for i in itens
            if i["latest_fiscal_data"] and i["latest_fiscal_data"]["period"] == periodo
        ]

    campo = ordenar_por if ordenar_por in CAMPOS_ORDENACAO else "nome"
    return sorted(itens, key=_chave_ordenacao(campo), reverse=(direcao == "desc"))


def periodos_recentes(db: Session) -> List[str]:
    """Períodos mais recentes distintos entre as empresas (opções do filtro de período)."""
    periodos = {
        ultimo.period
        for _, ultimo in DashboardService().empresas_com_ultimo_periodo(db)
        if ultimo is not None
    }
    return sorted(periodos, key=parse_period, reverse=True)
