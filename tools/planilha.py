"""
Leitura e geração de planilhas de dados fiscais.

Este módulo concentra o tratamento das planilhas importadas/exportadas:
- Normalização de cabeçalhos (maiúsculas, acentos, espaços)
- Representação intermediária das linhas (LinhaBruta → LinhaImportacao)
- Parse de números em formato brasileiro e de CNPJ
- Geração de modelos e exportações em .xlsx

Nenhuma função de parse lança exceção para valores malformados: o valor
vira None (número/CNPJ) ou False (situação).
"""

import csv
import io
import re
import logging
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .periodos import ordenar_por_periodo

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURAÇÃO DE COLUNAS
# =============================================================================

# Campo interno → cabeçalhos aceitos (já normalizados)
ALIASES_COLUNAS: Dict[str, List[str]] = {
    "empresa": ["empresa", "nome", "nome_empresa", "razao_social"],
    "cnpj": ["cnpj"],
    "periodo": ["periodo", "competencia", "mes_ano"],
    "rbt12": ["rbt12", "rbt_12"],
    "entrada": ["entrada", "entradas"],
    "saida": ["saida", "saidas"],
    "imposto": ["imposto", "impostos"],
    "situacao": ["situacao", "status"],
}

CAMPO_POR_ALIAS: Dict[str, str] = {
    alias: campo
    for campo, aliases in ALIASES_COLUNAS.items()
    for alias in aliases
}

CAMPOS_NUMERICOS = ("rbt12", "entrada", "saida", "imposto")

SITUACOES_SEM_MOVIMENTO = {"paralisada", "paralizada", "sem movimento", "sem_movimento", "sm"}

EXTENSOES_ACEITAS = (".xlsx", ".xls", ".csv")

SEPARADORES_CSV = ";,\t|"

# Tamanho das colunas no banco (companies.name, companies.cnpj, fiscal_data.period)
TAMANHO_MAX_NOME = 255
TAMANHO_MAX_CNPJ = 20
TAMANHO_MAX_PERIODO = 100

COLUNAS_MODELO_EMPRESA = ["Período", "RBT12", "Entrada", "Saída", "Imposto"]
COLUNAS_MODELO_GERAL = ["Empresa", "CNPJ", "Período", "RBT12", "Entrada", "Saída", "Imposto"]

ROTULO_TOTAL = "TOTAL"

MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# TIPOS
# =============================================================================

@dataclass
class LinhaBruta:
    """Linha da planilha após resolver os cabeçalhos, sem nenhuma validação."""
    empresa: Any = None
    cnpj: Any = None
    periodo: Any = None
    rbt12: Any = None
    entrada: Any = None
    saida: Any = None
    imposto: Any = None
    situacao: Any = None


@dataclass
class LinhaImportacao:
    """Linha validada, pronta para as regras de importação."""
    periodo: str
    empresa: Optional[str] = None
    cnpj: Optional[str] = None
    rbt12: Optional[float] = None
    entrada: Optional[float] = None
    saida: Optional[float] = None
    imposto: Optional[float] = None
    sem_movimento: bool = False

    def valores(self) -> Dict[str, float]:
        """Valores numéricos com ausência convertida em 0 (forma persistida)."""
        return {campo: getattr(self, campo) or 0.0 for campo in CAMPOS_NUMERICOS}


@dataclass
class ResultadoLeitura:
    """Linhas lidas de um arquivo e os cabeçalhos que foram reconhecidos."""
    linhas: List[LinhaBruta]
    colunas_arquivo: List[str] = field(default_factory=list)
    colunas_mapeadas: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# FUNÇÕES DE NORMALIZAÇÃO
# =============================================================================

def _vazio(valor: Any) -> bool:
    if valor is None:
        return True
    if isinstance(valor, str):
        return not valor.strip()
    try:
        return bool(pd.isna(valor))
    except (TypeError, ValueError):
        return False


def _texto(valor: Any) -> str:
    """Converte valor de célula em texto sem espaços nas pontas ('' se vazio)."""
    if _vazio(valor):
        return ""
    if isinstance(valor, float) and valor.is_integer():
        valor = int(valor)
    return str(valor).strip()


def normalizar_cabecalho(nome: Any) -> str:
    """
    Normaliza o nome de uma coluna.

    Exemplos: "Período" → "periodo", "Saída" → "saida", "Razão Social" → "razao_social"
    """
    nome = str(nome).strip().lower()
    nome = unicodedata.normalize("NFKD", nome).encode("ascii", "ignore").decode("ascii")
    nome = re.sub(r"[\s\-]+", "_", nome)
    nome = re.sub(r"[^a-z0-9_]", "", nome)
    return nome.strip("_")


def mapear_colunas(colunas: Iterable[Any]) -> Dict[str, str]:
    """Retorna {coluna original: campo interno} para as colunas reconhecidas."""
    mapeamento = {}
    for coluna in colunas:
        campo = CAMPO_POR_ALIAS.get(normalizar_cabecalho(coluna))
        if campo:
            mapeamento[str(coluna)] = campo
    return mapeamento


def linhas_brutas(registros: Iterable[Mapping[str, Any]]) -> List[LinhaBruta]:
    """
    Converte registros cabeçalho→valor em LinhaBruta.

    Quando mais de uma coluna corresponde ao mesmo campo
    (ex: "Empresa" e "empresa"), vale o primeiro valor preenchido.
    """
    linhas = []
    for registro in registros:
        linha = LinhaBruta()
        for coluna, valor in registro.items():
            campo = CAMPO_POR_ALIAS.get(normalizar_cabecalho(coluna))
            if campo and _vazio(getattr(linha, campo)) and not _vazio(valor):
                setattr(linha, campo, valor)
        linhas.append(linha)
    return linhas


# =============================================================================
# FUNÇÕES DE PARSE
# =============================================================================

def parse_numero(valor: Any) -> Optional[float]:
    """
    Converte valores de célula em float.

    Formatos suportados:
    - R$ 1.234,56 (BR com milhar e símbolo)
    - 1234,56 (BR sem milhar)
    - 1,234.56 (separador decimal é o último que aparece)
    - 1.234.567 (vários pontos sem vírgula = milhar)
    - 1234,56- (negativo por sufixo)
    - (1.234,56) (negativo contábil, entre parênteses)

    Returns:
        float ou None quando vazio/inválido
    """
    if isinstance(valor, bool):
        return None

    if isinstance(valor, (int, float)):
        return None if pd.isna(valor) else float(valor)

    if _vazio(valor):
        return None

    s = re.sub(r"[^0-9,.\-()]", "", str(valor))

    negativo = False
    if len(s) > 2 and s.startswith("(") and s.endswith(")"):
        negativo = True
        s = s[1:-1]
    s = s.replace("(", "").replace(")", "")
    if not s:
        return None

    if len(s) > 1 and s.endswith("-"):
        negativo = True
        s = s[:-1]

    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        if s.count(",") > 1:
            s = s.replace(",", "")
        else:
            s = s.replace(",", ".")
    elif s.count(".") > 1:
        s = s.replace(".", "")

    try:
        numero = float(s)
    except ValueError:
        return None

    return -numero if negativo else numero


def limpar_cnpj(valor: Any) -> Optional[str]:
    """Mantém apenas os dígitos do CNPJ; vazio vira None."""
    digitos = re.sub(r"\D", "", _texto(valor))
    return digitos or None


def formatar_cnpj(cnpj: Optional[str]) -> str:
    """Formata CNPJ de 14 dígitos como 00.000.000/0000-00."""
    if not cnpj:
        return ""
    if len(cnpj) != 14 or not cnpj.isdigit():
        return cnpj
    return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:12]}-{cnpj[12:]}"


def parse_situacao(valor: Any) -> bool:
    """True quando a coluna de situação indica empresa paralisada / sem movimento."""
    texto = _texto(valor).lower()
    texto = unicodedata.normalize("NFKD", texto).encode("ascii", "ignore").decode("ascii")
    texto = re.sub(r"\s+", " ", texto)
    return texto in SITUACOES_SEM_MOVIMENTO


def _numeros(bruta: LinhaBruta) -> Dict[str, Optional[float]]:
    return {campo: parse_numero(getattr(bruta, campo)) for campo in CAMPOS_NUMERICOS}


def _periodo_cabe(periodo: str) -> bool:
    if len(periodo) > TAMANHO_MAX_PERIODO:
        logger.warning(f"Linha ignorada: período com mais de {TAMANHO_MAX_PERIODO} caracteres")
        return False
    return True


def validar_linha_empresa(bruta: LinhaBruta, periodo_padrao: str) -> Optional[LinhaImportacao]:
    """
    Valida uma linha da importação geral (empresa + período).

    Somente o nome da empresa é obrigatório; período ausente recebe `periodo_padrao`.
    Retorna None para linhas sem empresa ou com nome, CNPJ ou período
    maiores que as colunas do banco.
    """
    empresa = _texto(bruta.empresa)
    if not empresa:
        return None

    cnpj = limpar_cnpj(bruta.cnpj)
    periodo = _texto(bruta.periodo) or periodo_padrao

    if len(empresa) > TAMANHO_MAX_NOME:
        logger.warning(f"Linha ignorada: nome da empresa com mais de {TAMANHO_MAX_NOME} caracteres")
        return None
    if cnpj and len(cnpj) > TAMANHO_MAX_CNPJ:
        logger.warning(f"Linha ignorada: CNPJ com mais de {TAMANHO_MAX_CNPJ} dígitos ({empresa})")
        return None
    if not _periodo_cabe(periodo):
        return None

    return LinhaImportacao(
        empresa=empresa,
        cnpj=cnpj,
        periodo=periodo,
        sem_movimento=parse_situacao(bruta.situacao),
        **_numeros(bruta),
    )


def validar_linha_periodo(bruta: LinhaBruta) -> Optional[LinhaImportacao]:
    """
    Valida uma linha da importação de uma empresa já conhecida.

    O período é obrigatório; retorna None para linhas sem período
    ou com período maior que a coluna do banco.
    """
    periodo = _texto(bruta.periodo)
    if not periodo or not _periodo_cabe(periodo):
        return None

    return LinhaImportacao(periodo=periodo, **_numeros(bruta))


# =============================================================================
# LEITURA DE ARQUIVOS
# =============================================================================

def separador_csv(conteudo: bytes) -> str:
    """
    Separador do CSV detectado no cabeçalho, entre ; , tab e |.

    Arquivos de uma coluna só (ou cabeçalho sem separador reconhecível) usam ",".
    """
    cabecalho = conteudo.decode("utf-8-sig", errors="ignore").splitlines()[:1]
    if not cabecalho:
        return ","
    try:
        return csv.Sniffer().sniff(cabecalho[0], delimiters=SEPARADORES_CSV).delimiter
    except csv.Error:
        return ","


def ler_planilha(conteudo: bytes, nome_arquivo: str) -> ResultadoLeitura:
    """
    Lê a primeira aba de um arquivo Excel (ou um CSV) e resolve os cabeçalhos.

    Raises:
        ValueError: extensão não suportada ou arquivo ilegível
    """
    extensao = Path(nome_arquivo or "").suffix.lower()
    if extensao not in EXTENSOES_ACEITAS:
        raise ValueError(
            f"Formato de arquivo não suportado: '{nome_arquivo}'. "
            f"Envie um arquivo {', '.join(EXTENSOES_ACEITAS)}"
        )

    try:
        if extensao == ".csv":
            df = pd.read_csv(
                io.BytesIO(conteudo), dtype=str, sep=separador_csv(conteudo), encoding="utf-8-sig"
            )
        else:
            df = pd.read_excel(io.BytesIO(conteudo), sheet_name=0, dtype=str)
    except Exception as e:
        raise ValueError(f"Erro ao ler o arquivo: {e}") from e

    colunas = [str(c) for c in df.columns]
    mapeadas = mapear_colunas(colunas)

    logger.info(f"Registros lidos: {len(df)}")
    logger.info(f"Colunas do arquivo: {colunas}")
    logger.info(f"Colunas mapeadas: {mapeadas}")

    return ResultadoLeitura(
        linhas=linhas_brutas(df.to_dict(orient="records")),
        colunas_arquivo=colunas,
        colunas_mapeadas=mapeadas,
    )


# =============================================================================
# GERAÇÃO DE PLANILHAS
# =============================================================================

def _para_xlsx(df: pd.DataFrame, aba: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=aba, index=False)
    return buffer.getvalue()


def gerar_modelo_empresa() -> bytes:
    """Modelo de importação dos períodos de uma empresa."""
    df = pd.DataFrame(
        [
            ["Janeiro/2024", 100000, 50000, 30000, 5000],
            ["Fevereiro/2024", 120000, 60000, 35000, 6000],
        ],
        columns=COLUNAS_MODELO_EMPRESA,
    )
    return _para_xlsx(df, "Dados Fiscais")


def gerar_modelo_geral() -> bytes:
    """Modelo da importação geral (várias empresas)."""
    df = pd.DataFrame(
        [
            ["Empresa Exemplo Ltda", "12345678000190", "Janeiro/2024", 100000, 50000, 30000, 5000],
            ["Empresa Exemplo Ltda", "12345678000190", "Fevereiro/2024", 120000, 60000, 35000, 6000],
        ],
        columns=COLUNAS_MODELO_GERAL,
    )
    return _para_xlsx(df, "Dados Fiscais")


def montar_tabela_exportacao(
    empresa: str,
    cnpj: Optional[str],
    registros: Sequence[Any],
) -> pd.DataFrame:
    """
    Monta a tabela de exportação de uma empresa em ordem cronológica,
    com a linha TOTAL ao final (somatórios e campos identificadores em branco).

    Args:
        empresa: Nome da empresa
        cnpj: CNPJ (somente dígitos) ou None
        registros: Objetos com period, rbt12, entrada, saida, imposto
    """
    ordenados = ordenar_por_periodo(registros, lambda r: r.period)

    linhas = [
        [
            empresa,
            formatar_cnpj(cnpj),
            r.period,
            r.rbt12 or 0.0,
            r.entrada or 0.0,
            r.saida or 0.0,
            r.imposto or 0.0,
        ]
        for r in ordenados
    ]
    df = pd.DataFrame(linhas, columns=COLUNAS_MODELO_GERAL)

    total = {coluna: "" for coluna in COLUNAS_MODELO_GERAL}
    total["Empresa"] = ROTULO_TOTAL
    for coluna in ("RBT12", "Entrada", "Saída", "Imposto"):
        total[coluna] = float(df[coluna].sum()) if not df.empty else 0.0

    return pd.concat([df, pd.DataFrame([total], columns=COLUNAS_MODELO_GERAL)], ignore_index=True)


def gerar_exportacao(empresa: str, cnpj: Optional[str], registros: Sequence[Any]) -> bytes:
    """Exportação .xlsx dos dados fiscais de uma empresa."""
    return _para_xlsx(montar_tabela_exportacao(empresa, cnpj, registros), "Dados Fiscais")


def nome_arquivo_seguro(texto: str) -> str:
    """Nome de empresa em formato seguro para nome de arquivo."""
    texto = unicodedata.normalize("NFKD", texto or "").encode("ascii", "ignore").decode("ascii")
    texto = re.sub(r"\s+", "_", texto.strip())
    texto = re.sub(r"[^A-Za-z0-9_\-]", "", texto)
    return texto or "empresa"
