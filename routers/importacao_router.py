"""
Router da importação geral de dados fiscais (várias empresas por planilha).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from db import get_db
from routers.dados_fiscais_router import ler_upload, resposta_xlsx
from schemas.importacao_schema import ImportacaoLinhasRequest, ResultadoImportacao
from services.importacao_service import import_rows
from tools.planilha import ler_planilha, linhas_brutas, gerar_modelo_geral

router = APIRouter(prefix="/importacao", tags=["Importação"])
logger = logging.getLogger(__name__)


@router.post("/planilha", response_model=ResultadoImportacao)
async def importar_planilha(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """
    Importa planilha com as colunas Empresa, CNPJ, Período, RBT12, Entrada, Saída, Imposto
    (e opcionalmente Situação).

    Empresas são localizadas pelo CNPJ ou, sem CNPJ, pelo nome; as
    inexistentes são criadas. Períodos já gravados são sobrescritos.
    """
    logger.info(f"Importação de planilha: {file.filename}")
    conteudo = await ler_upload(file)
    return await run_in_threadpool(_importar_planilha, db, conteudo, file.filename)


def _importar_planilha(db: Session, conteudo: bytes, nome_arquivo: str) -> ResultadoImportacao:
    try:
        leitura = ler_planilha(conteudo, nome_arquivo)
        return import_rows(db, leitura.linhas)
    except ValueError as e:
        logger.warning(f"Importação rejeitada: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/linhas", response_model=ResultadoImportacao)
def importar_linhas(dados: ImportacaoLinhasRequest, db: Session = Depends(get_db)):
    """Mesma importação, com as linhas já lidas pelo cliente (cabeçalho → valor)."""
    try:
        return import_rows(db, linhas_brutas(dados.linhas))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/modelo")
def baixar_modelo():
    """Modelo .xlsx da importação geral."""
    return resposta_xlsx(gerar_modelo_geral(), "modelo_importacao.xlsx")
