# middleware/auth.py
"""
Controle de acesso às empresas protegidas por senha.

A liberação de uma empresa é um token JWT (ver core.security) que o cliente
guarda e reenvia no header X-Acesso-Empresa. Não é uma barreira de
segurança forte: serve para não exibir os dados sem a senha ter sido
informada na sessão.
"""
from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Iterable, Optional, Set

from core.security import decode_company_access_token
from models import CompanyPassword

ACCESS_HEADER = "X-Acesso-Empresa"


class CompanyAccess:
    """Empresas liberadas na sessão atual (por ID)."""

    def __init__(self, company_ids: Iterable[int] = ()):
        self._company_ids: Set[int] = set(company_ids)

    @property
    def company_ids(self) -> Set[int]:
        return set(self._company_ids)

    def autorizar(self, company_id: int) -> None:
        self._company_ids.add(company_id)

    def revogar(self, company_id: int) -> None:
        self._company_ids.discard(company_id)

    def pode_acessar(self, company_id: int) -> bool:
        return company_id in self._company_ids

    def __repr__(self):
        return f"<CompanyAccess(company_ids={sorted(self._company_ids)})>"


def company_access_from_tokens(raw: Optional[str]) -> CompanyAccess:
    """Monta o CompanyAccess a partir de tokens separados por vírgula.

    Tokens inválidos ou expirados são ignorados.
    """
    acesso = CompanyAccess()
    if not raw:
        return acesso

    for token in raw.split(","):
        token = token.strip()
        if token.lower().startswith("bearer "):
            token = token[7:].strip()
        if not token:
            continue
        company_id = decode_company_access_token(token)
        if company_id is not None:
            acesso.autorizar(company_id)

    return acesso


async def get_company_access(
    x_acesso_empresa: Optional[str] = Header(default=None, alias=ACCESS_HEADER),
) -> CompanyAccess:
    """Dependency que retorna as empresas liberadas pelos tokens do request."""
    return company_access_from_tokens(x_acesso_empresa)


def empresa_protegida(db: Session, company_id: int) -> bool:
    return (
        db.query(CompanyPassword.id)
        .filter(CompanyPassword.company_id == company_id)
        .first()
        is not None
    )


def garantir_acesso(db: Session, company_id: int, acesso: CompanyAccess) -> None:
    """
    Garante que os dados fiscais da empresa podem ser exibidos.

    Raises:
        HTTPException 403: empresa com senha e não liberada
    """
    if acesso.pode_acessar(company_id):
        return

    if empresa_protegida(db, company_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Empresa protegida por senha. Informe a senha para acessar os dados.",
        )
