# routers/dados_fiscais_router.py
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form, Query, Response
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from typing import Literal, Optional
import logging

from core.config import settings
from db import get_db
from middleware.auth import CompanyAccess, get_company_access, garantir_acesso
from schemas.dados_fiscais_schema import (
    FiscalDataCreate,
    FiscalDataUpdate,
    FiscalDataOut,
    FiscalDataListOut,
)
from schemas.importacao_schema import ResultadoImportacao
from schemas.senha_schema import MensagemResponse
from services.dados_fiscais_service import (
    listar_dados_fiscais,
    totais,
    anos_disponiveis,
    buscar_dado_fiscal,
    criar_dado_fiscal,
    atualizar_dado_fiscal,
    deletar_dado_fiscal,
)
from services.empresa_service import obter_empresa
from services.importacao_service import import_company_periods
from tools.planilha import (
    MIME_XLSX,
    ler_planilha,
    gerar_modelo_empresa,
    gerar_exportacao,
    nome_arquivo_seguro,
)

router = APIRouter(prefix="/dados-fiscais", tags=["Dados Fiscais"])
logger = logging.getLogger(__name__)


def resposta_xlsx(conteudo: bytes, nome_arquivo: str) -> Response:
    return Response(
        content=conteudo,
        media_type=MIME_XLSX,
        headers={"Content-Disposition": f'attachment; filename="{nome_arquivo}"'},
    )


async def ler_upload(file: UploadFile) -> bytes:
    """Conteúdo do arquivo enviado, respeitando o limite de tamanho."""
    conteudo = await file.read()
    limite = settings.IMPORT_MAX_FILE_MB * 1024 * 1024
    if len(conteudo) > limite:
        raise HTTPException(
            status_code=413,
            detail=f"Arquivo maior que o limite de {settings.IMPORT_MAX_FILE_MB} MB",
        )
    return conteudo


@router.get("/", response_model=FiscalDataListOut)
def listar(
    company_id: int,
    periodo: Optional[str] = Query(None, description="Parte do texto do período"),
    ano: Optional[str] = Query(None, description="Ano com 4 dígitos ou 'todos'"),
    ordenar_por: str = Query("period", description="period, entrada, saida, imposto"),
    direcao: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Registros de uma empresa com totais e anos disponíveis."""
    obter_empresa(db, company_id)
    garantir_acesso(db, company_id, acesso)

    registros = listar_dados_fiscais(
        db, company_id, periodo=periodo, ano=ano, ordenar_por=ordenar_por, direcao=direcao
    )
    todos = listar_dados_fiscais(db, company_id)

    return FiscalDataListOut(
        registros=[FiscalDataOut.model_validate(r) for r in registros],
        totais=totais(registros),
        anos_disponiveis=anos_disponiveis(todos),
    )


@router.get("/modelo")
def baixar_modelo():
    """Modelo .xlsx para importar os períodos de uma empresa."""
    return resposta_xlsx(gerar_modelo_empresa(), "modelo_dados_fiscais.xlsx")


@router.get("/exportar")
def exportar(
    company_id: int,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Exporta os dados fiscais da empresa (ordem cronológica + linha TOTAL)."""
    empresa = obter_empresa(db, company_id)
    garantir_acesso(db, company_id, acesso)

    registros = listar_dados_fiscais(db, company_id)
    conteudo = gerar_exportacao(empresa.name, empresa.cnpj, registros)

    logger.info(f"Exportação da empresa {company_id}: {len(registros)} registro(s)")
    return resposta_xlsx(conteudo, f"dados_fiscais_{nome_arquivo_seguro(empresa.name)}.xlsx")


@router.post("/importar", response_model=ResultadoImportacao)
async def importar(
    company_id: int = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    """Importa os períodos de uma empresa a partir de planilha (Período, RBT12, Entrada, Saída, Imposto)."""
    conteudo = await ler_upload(file)
    return await run_in_threadpool(
        _importar_periodos, db, company_id, acesso, conteudo, file.filename
    )


def _importar_periodos(
    db: Session,
    company_id: int,
    acesso: CompanyAccess,
    conteudo: bytes,
    nome_arquivo: str,
) -> ResultadoImportacao:
    obter_empresa(db, company_id)
    garantir_acesso(db, company_id, acesso)

    try:
        leitura = ler_planilha(conteudo, nome_arquivo)
        return import_company_periods(db, company_id, leitura.linhas)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/", response_model=FiscalDataOut, status_code=201)
def criar(
    dados: FiscalDataCreate,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    garantir_acesso(db, dados.company_id, acesso)
    return criar_dado_fiscal(db, dados.model_dump())


@router.put("/{fiscal_id}", response_model=FiscalDataOut)
def atualizar(
    fiscal_id: int,
    dados: FiscalDataUpdate,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    registro = buscar_dado_fiscal(db, fiscal_id)
    garantir_acesso(db, registro.company_id, acesso)
    return atualizar_dado_fiscal(db, fiscal_id, dados.model_dump())


@router.delete("/{fiscal_id}", response_model=MensagemResponse)
def excluir(
    fiscal_id: int,
    db: Session = Depends(get_db),
    acesso: CompanyAccess = Depends(get_company_access),
):
    registro = buscar_dado_fiscal(db, fiscal_id)
    garantir_acesso(db, registro.company_id, acesso)
    deletar_dado_fiscal(db, fiscal_id)
    return {"message": "Registro excluído com sucesso."}
