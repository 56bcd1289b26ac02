# services/dados_fiscais_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List, Optional
import logging

from models import FiscalData
from schemas.dados_fiscais_schema import TotaisFiscais
from tools.periodos import extrair_ano, parse_period
from services.empresa_service import obter_empresa

logger = logging.getLogger(__name__)

CAMPOS_ORDENACAO = ("period", "entrada", "saida", "imposto")


def listar_dados_fiscais(
    db: Session,
    company_id: int,
    periodo: Optional[str] = None,
    ano: Optional[str] = None,
    ordenar_por: str = "period",
    direcao: str = "desc",
) -> List[FiscalData]:
    """
    Registros fiscais de uma empresa.

    Args:
        periodo: trecho do texto do período (sem diferenciar maiúsculas)
        ano: ano com 4 dígitos ("todos" ou vazio = sem filtro)
        ordenar_por: period (cronológico), entrada, saida ou imposto
        direcao: asc ou desc (padrão: mais recente primeiro)
    """
    registros = db.query(FiscalData).filter(FiscalData.company_id == company_id).all()

    if periodo:
        termo = periodo.strip().lower()
        registros = [r for r in registros if termo in (r.period or "").lower()]

    if ano and ano != "todos":
        registros = [r for r in registros if extrair_ano(r.period) == ano]

    campo = ordenar_por if ordenar_por in CAMPOS_ORDENACAO else "period"
    if campo == "period":
        chave = lambda r: parse_period(r.period)
    else:
        chave = lambda r: getattr(r, campo) or 0

    return sorted(registros, key=chave, reverse=(direcao != "asc"))


def totais(registros: List[FiscalData]) -> TotaisFiscais:
    return TotaisFiscais(
        rbt12=sum(r.rbt12 or 0 for r in registros),
        entrada=sum(r.entrada or 0 for r in registros),
        saida=sum(r.saida or 0 for r in registros),
        imposto=sum(r.imposto or 0 for r in registros),
    )


def anos_disponiveis(registros: List[FiscalData]) -> List[str]:
    """Anos distintos encontrados nos períodos, do mais recente ao mais antigo."""
    anos = {extrair_ano(r.period) for r in registros}
    anos.discard(None)
    return sorted(anos, reverse=True)


def buscar_dado_fiscal(db: Session, fiscal_id: int) -> FiscalData:
    registro = db.query(FiscalData).filter(FiscalData.id == fiscal_id).first()
    if not registro:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registro fiscal não encontrado")
    return registro


def _periodo_duplicado(company_id: int, period: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Já existe um registro para o período '{period}' nesta empresa (empresa {company_id})",
    )


def criar_dado_fiscal(db: Session, data: dict) -> FiscalData:
    """Cria um período para a empresa. Período repetido retorna 409."""
    obter_empresa(db, data["company_id"])

    registro = FiscalData(**data)
    db.add(registro)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _periodo_duplicado(data["company_id"], data["period"])

    db.refresh(registro)
    logger.info(f"Registro fiscal criado: empresa {registro.company_id} - {registro.period}")
    return registro


def atualizar_dado_fiscal(db: Session, fiscal_id: int, data: dict) -> FiscalData:
    """Edição sobrescreve período e valores do registro."""
    registro = buscar_dado_fiscal(db, fiscal_id)

    for key, value in data.items():
        setattr(registro, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _periodo_duplicado(registro.company_id, data.get("period"))

    db.refresh(registro)
    logger.info(f"Registro fiscal {fiscal_id} atualizado")
    return registro


def deletar_dado_fiscal(db: Session, fiscal_id: int) -> None:
    registro = buscar_dado_fiscal(db, fiscal_id)
    db.delete(registro)
    db.commit()
    logger.info(f"Registro fiscal {fiscal_id} excluído")
