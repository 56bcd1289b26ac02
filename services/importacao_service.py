"""
Service de importação de dados fiscais a partir de planilhas.

Fluxo da importação geral (várias empresas):
1. Validação das linhas (LinhaBruta → LinhaImportacao); linhas sem empresa são ignoradas
2. Agrupamento por chave natural da empresa (CNPJ ou nome normalizado)
3. Atualização ou criação das empresas (commit próprio)
4. Upsert dos dados fiscais por (empresa, período) em uma única instrução

As etapas 3 e 4 não são atômicas: se a 4 falhar, as empresas da etapa 3
permanecem gravadas.
"""
import logging
import re
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from core.config import settings
from db import dialect_insert
from models import Company, FiscalData
from schemas.importacao_schema import ResultadoImportacao
from tools.planilha import (
    LinhaBruta,
    LinhaImportacao,
    validar_linha_empresa,
    validar_linha_periodo,
)
from services.empresa_service import obter_empresa

logger = logging.getLogger(__name__)


class NenhumRegistroValidoError(ValueError):
    """Nenhuma linha da planilha passou na validação; nada foi gravado."""


# =============================================================================
# CHAVE NATURAL DA EMPRESA
# =============================================================================

def chave_empresa(linha: LinhaImportacao) -> str:
    """CNPJ quando presente; senão o nome em minúsculas com espaços → '_'."""
    if linha.cnpj:
        return linha.cnpj
    return "empresa_" + re.sub(r"\s+", "_", linha.empresa.strip().lower())


def _buscar_empresa_existente(db: Session, linha: LinhaImportacao):
    if linha.cnpj:
        return (
            db.query(Company)
            .filter(Company.cnpj == linha.cnpj)
            .order_by(Company.id)
            .first()
        )
    return (
        db.query(Company)
        .filter(Company.name == linha.empresa, Company.cnpj.is_(None))
        .order_by(Company.id)
        .first()
    )


def _resolver_empresas(db: Session, validas: List[LinhaImportacao]) -> Tuple[Dict[str, int], int, int]:
    """
    Cria ou atualiza uma empresa por chave natural.

    A primeira linha de cada chave define nome, CNPJ e situação.

    Returns:
        (chave → company_id, empresas criadas, empresas atualizadas)
    """
    primeiras: Dict[str, LinhaImportacao] = {}
    for linha in validas:
        primeiras.setdefault(chave_empresa(linha), linha)

    empresas: Dict[str, Company] = {}
    criadas = 0
    atualizadas = 0

    for chave, linha in primeiras.items():
        empresa = _buscar_empresa_existente(db, linha)
        if empresa:
            empresa.name = linha.empresa
            empresa.cnpj = linha.cnpj
            empresa.sem_movimento = linha.sem_movimento
            atualizadas += 1
        else:
            empresa = Company(
                name=linha.empresa,
                cnpj=linha.cnpj,
                sem_movimento=linha.sem_movimento,
            )
            db.add(empresa)
            criadas += 1
        empresas[chave] = empresa

    db.commit()

    ids = {chave: empresa.id for chave, empresa in empresas.items()}
    logger.info(f"Empresas processadas: {criadas} criada(s), {atualizadas} atualizada(s)")
    return ids, criadas, atualizadas


# =============================================================================
# UPSERT DOS DADOS FISCAIS
# =============================================================================

def _upsert_dados_fiscais(db: Session, registros: List[dict]) -> int:
    """
    Grava os registros com ON CONFLICT (company_id, period) DO UPDATE.

    Registros repetidos no mesmo lote são reduzidos ao último, pois o
    banco rejeita duas atualizações da mesma linha em uma instrução.
    """
    unicos: Dict[Tuple[int, str], dict] = {}
    for registro in registros:
        unicos[(registro["company_id"], registro["period"])] = registro

    if not unicos:
        return 0

    insert = dialect_insert(db)
    stmt = insert(FiscalData).values(list(unicos.values()))
    stmt = stmt.on_conflict_do_update(
        index_elements=["company_id", "period"],
        set_={
            "rbt12": stmt.excluded.rbt12,
            "entrada": stmt.excluded.entrada,
            "saida": stmt.excluded.saida,
            "imposto": stmt.excluded.imposto,
            "updated_at": func.now(),
        },
    )
    db.execute(stmt)
    db.commit()

    logger.info(f"Upsert de {len(unicos)} registro(s) fiscal(is)")
    return len(unicos)


# =============================================================================
# IMPORTAÇÕES
# =============================================================================

def import_rows(db: Session, linhas: List[LinhaBruta]) -> ResultadoImportacao:
    """
    Importação geral: cada linha traz empresa, período e valores.

    Raises:
        NenhumRegistroValidoError: nenhuma linha com empresa (antes de qualquer gravação)
    """
    validas = []
    for bruta in linhas:
        linha = validar_linha_empresa(bruta, settings.PERIODO_NAO_INFORMADO)
        if linha is not None:
            validas.append(linha)

    ignorados = len(linhas) - len(validas)
    logger.info(f"Linhas válidas: {len(validas)} / ignoradas: {ignorados}")

    if not validas:
        raise NenhumRegistroValidoError(
            "Nenhum registro válido encontrado na planilha. Verifique se a coluna 'Empresa' está preenchida."
        )

    ids, criadas, atualizadas = _resolver_empresas(db, validas)

    registros = [
        {
            "company_id": ids[chave_empresa(linha)],
            "period": linha.periodo,
            **linha.valores(),
        }
        for linha in validas
    ]
    _upsert_dados_fiscais(db, registros)

    return ResultadoImportacao(
        importados=len(validas),
        ignorados=ignorados,
        empresas_criadas=criadas,
        empresas_atualizadas=atualizadas,
    )


def import_company_periods(db: Session, company_id: int, linhas: List[LinhaBruta]) -> ResultadoImportacao:
    """
    Importação dos períodos de uma empresa já cadastrada.

    Linhas sem período são ignoradas; colunas de empresa/CNPJ, se houver, não são usadas.

    Raises:
        HTTPException 404: empresa inexistente
        NenhumRegistroValidoError: nenhuma linha com período
    """
    obter_empresa(db, company_id)

    validas = [linha for linha in map(validar_linha_periodo, linhas) if linha is not None]
    ignorados = len(linhas) - len(validas)
    logger.info(f"Empresa {company_id}: {len(validas)} linha(s) válida(s), {ignorados} ignorada(s)")

    if not validas:
        raise NenhumRegistroValidoError(
            "Nenhum registro válido encontrado na planilha. Verifique se a coluna 'Período' está preenchida."
        )

    _upsert_dados_fiscais(
        db,
        [
            {"company_id": company_id, "period": linha.periodo, **linha.valores()}
            for linha in validas
        ],
    )

    return ResultadoImportacao(importados=len(validas), ignorados=ignorados)
