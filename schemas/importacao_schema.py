from pydantic import BaseModel, computed_field
from typing import Any, Dict, List


class ImportacaoLinhasRequest(BaseModel):
    """Linhas já extraídas da planilha: cabeçalho → valor."""
    linhas: List[Dict[str, Any]]


class ResultadoImportacao(BaseModel):
    importados: int
    ignorados: int
    empresas_criadas: int = 0
    empresas_atualizadas: int = 0

    @computed_field
    @property
    def mensagem(self) -> str:
        texto = f"{self.importados} registros importados com sucesso."
        if self.ignorados > 0:
            texto += f" {self.ignorados} registros foram ignorados por falta de dados essenciais."
        return texto
