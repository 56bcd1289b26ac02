from pydantic import BaseModel, Field, model_validator


class SenhaDefinirRequest(BaseModel):
    """Definição (ou troca) da senha de uma empresa."""
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_confirmacao(self):
        if self.password != self.confirm_password:
            raise ValueError("As senhas não coincidem.")
        return self


class SenhaVerificarRequest(BaseModel):
    password: str = Field(..., min_length=1)


class AcessoEmpresaResponse(BaseModel):
    """Token que libera os dados de uma empresa protegida (header X-Acesso-Empresa)."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # segundos
    company_id: int


class MensagemResponse(BaseModel):
    message: str
