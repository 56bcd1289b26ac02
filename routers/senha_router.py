from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.senha_schema import (
    SenhaDefinirRequest,
    SenhaVerificarRequest,
    AcessoEmpresaResponse,
    MensagemResponse,
)
from services.senha_service import definir_senha, remover_senha, verificar_senha

router = APIRouter(prefix="/empresas/{company_id}/senha", tags=["Senha da Empresa"])


@router.put("", response_model=MensagemResponse)
def definir(company_id: int, dados: SenhaDefinirRequest, db: Session = Depends(get_db)):
    """Define ou troca a senha de acesso aos dados fiscais da empresa."""
    definir_senha(db, company_id, dados.password)
    return {"message": "Senha definida com sucesso."}


@router.delete("", response_model=MensagemResponse)
def remover(company_id: int, db: Session = Depends(get_db)):
    remover_senha(db, company_id)
    return {"message": "Senha removida com sucesso."}


@router.post("/verificar", response_model=AcessoEmpresaResponse)
def verificar(company_id: int, dados: SenhaVerificarRequest, db: Session = Depends(get_db)):
    """
    Confere a senha e retorna o token de acesso.

    O cliente reenvia o token no header X-Acesso-Empresa (vários separados por vírgula).
    """
    return verificar_senha(db, company_id, dados.password)
