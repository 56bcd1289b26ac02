import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from core.config import settings
from db import dialect_insert
from core.security import (
    hash_password,
    verify_password,
    validate_password_strength,
    create_company_access_token,
)
from models import CompanyPassword
from schemas.senha_schema import AcessoEmpresaResponse
from services.empresa_service import obter_empresa

logger = logging.getLogger(__name__)


def definir_senha(db: Session, company_id: int, password: str) -> None:
    """
    Define ou troca a senha da empresa (upsert por company_id).

    Raises:
        HTTPException 404: empresa inexistente
        HTTPException 400: senha fora da política
    """
    empresa = obter_empresa(db, company_id)

    valida, mensagem = validate_password_strength(password)
    if not valida:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=mensagem)

    insert = dialect_insert(db)
    stmt = insert(CompanyPassword).values(
        company_id=company_id,
        password_hash=hash_password(password),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["company_id"],
        set_={"password_hash": stmt.excluded.password_hash, "updated_at": func.now()},
    )
    db.execute(stmt)
    db.commit()

    logger.info(f"Senha definida para a empresa {company_id} - {empresa.name}")


def remover_senha(db: Session, company_id: int) -> None:
    """Remove a proteção da empresa. 404 se a empresa não tiver senha."""
    obter_empresa(db, company_id)

    removidos = db.query(CompanyPassword).filter(
        CompanyPassword.company_id == company_id
    ).delete(synchronize_session=False)

    if not removidos:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Empresa não possui senha definida")

    db.commit()
    logger.info(f"Senha removida da empresa {company_id}")


def verificar_senha(db: Session, company_id: int, password: str) -> AcessoEmpresaResponse:
    """
    Confere a senha e devolve o token que libera a empresa.

    Raises:
        HTTPException 404: empresa inexistente ou sem senha
        HTTPException 401: senha incorreta
    """
    obter_empresa(db, company_id)

    registro = db.query(CompanyPassword).filter(
        CompanyPassword.company_id == company_id
    ).first()

    if not registro:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Empresa não possui senha definida")

    if not verify_password(password, registro.password_hash):
        logger.warning(f"Senha incorreta para a empresa {company_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Senha incorreta. Verifique a senha e tente novamente.",
        )

    return AcessoEmpresaResponse(
        access_token=create_company_access_token(company_id),
        expires_in=settings.COMPANY_ACCESS_EXPIRE_MINUTES * 60,
        company_id=company_id,
    )
