from .empresa_schema import (
    CompanyCreate,
    CompanyUpdate,
    SituacaoUpdate,
    LatestFiscalData,
    CompanyOut,
    CompanyWithLatestOut,
    CompanyDetailOut,
)

from .dados_fiscais_schema import (
    FiscalDataCreate,
    FiscalDataUpdate,
    FiscalDataOut,
    TotaisFiscais,
    FiscalDataListOut,
)

from .senha_schema import (
    SenhaDefinirRequest,
    SenhaVerificarRequest,
    AcessoEmpresaResponse,
    MensagemResponse,
)

from .importacao_schema import (
    ImportacaoLinhasRequest,
    ResultadoImportacao,
)

from .dashboard_schema import (
    EstatisticasFiscais,
    EvolucaoPeriodo,
    EvolucaoEmpresaPeriodo,
    DashboardResponse,
)

__all__ = [
    "CompanyCreate",
    "CompanyUpdate",
    "SituacaoUpdate",
    "LatestFiscalData",
    "CompanyOut",
    "CompanyWithLatestOut",
    "CompanyDetailOut",

    "FiscalDataCreate",
    "FiscalDataUpdate",
    "FiscalDataOut",
    "TotaisFiscais",
    "FiscalDataListOut",

    # Senha
    "SenhaDefinirRequest",
    "SenhaVerificarRequest",
    "AcessoEmpresaResponse",
    "MensagemResponse",

    # Importação
    "ImportacaoLinhasRequest",
    "ResultadoImportacao",

    # Dashboard
    "EstatisticasFiscais",
    "EvolucaoPeriodo",
    "EvolucaoEmpresaPeriodo",
    "DashboardResponse",
]
