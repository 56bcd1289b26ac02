import io
from types import SimpleNamespace

import pandas as pd
import pytest

from tools.planilha import (
    COLUNAS_MODELO_EMPRESA,
    TAMANHO_MAX_CNPJ,
    TAMANHO_MAX_NOME,
    TAMANHO_MAX_PERIODO,
    LinhaBruta,
    formatar_cnpj,
    gerar_exportacao,
    gerar_modelo_empresa,
    ler_planilha,
    limpar_cnpj,
    linhas_brutas,
    mapear_colunas,
    montar_tabela_exportacao,
    nome_arquivo_seguro,
    normalizar_cabecalho,
    parse_numero,
    parse_situacao,
    separador_csv,
    validar_linha_empresa,
    validar_linha_periodo,
)


# =============================================================================
# NÚMEROS
# =============================================================================

@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("R$ 1.234,56", 1234.56),
        ("1234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("1.234.567", 1234567.0),
        ("1.234.567,89", 1234567.89),
        ("1000", 1000.0),
        ("-150,5", -150.5),
        ("150,50-", -150.5),
        ("(1.000,00)", -1000.0),
        ("(R$ 250,50)", -250.5),
        (2500, 2500.0),
        (12.5, 12.5),
        ("0", 0.0),
    ],
)
def test_parse_numero(valor, esperado):
    assert parse_numero(valor) == pytest.approx(esperado)


@pytest.mark.parametrize("valor", [None, "", "   ", "abc", "R$", "()", float("nan"), True])
def test_parse_numero_vazio_ou_invalido(valor):
    assert parse_numero(valor) is None


# =============================================================================
# CABEÇALHOS / CNPJ / SITUAÇÃO
# =============================================================================

def test_normalizar_cabecalho():
    assert normalizar_cabecalho("Período") == "periodo"
    assert normalizar_cabecalho(" SAÍDA ") == "saida"
    assert normalizar_cabecalho("Razão Social") == "razao_social"
    assert normalizar_cabecalho("RBT-12") == "rbt_12"


def test_mapear_colunas_ignora_desconhecidas():
    mapeadas = mapear_colunas(["Empresa", "CNPJ", "Competência", "Saídas", "Observação"])

    assert mapeadas == {
        "Empresa": "empresa",
        "CNPJ": "cnpj",
        "Competência": "periodo",
        "Saídas": "saida",
    }


def test_linhas_brutas_primeiro_valor_preenchido_vence():
    linhas = linhas_brutas([{"Empresa": "", "empresa": "Acme", "Nome": "Outra"}])

    assert linhas[0].empresa == "Acme"


def test_limpar_e_formatar_cnpj():
    assert limpar_cnpj("12.345.678/0001-90") == "12345678000190"
    assert limpar_cnpj("  ") is None
    assert limpar_cnpj(None) is None
    assert formatar_cnpj("12345678000190") == "12.345.678/0001-90"
    assert formatar_cnpj("123") == "123"
    assert formatar_cnpj(None) == ""


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("Paralisada", True),
        ("paralizada", True),
        ("Sem Movimento", True),
        ("SM", True),
        ("Ativa", False),
        (None, False),
        ("", False),
    ],
)
def test_parse_situacao(valor, esperado):
    assert parse_situacao(valor) is esperado


# =============================================================================
# VALIDAÇÃO DE LINHAS
# =============================================================================

def test_validar_linha_empresa_sem_nome_e_descartada():
    bruta = LinhaBruta(empresa="   ", periodo="Janeiro/2024", entrada="100")

    assert validar_linha_empresa(bruta, "Não informado") is None


def test_validar_linha_empresa_periodo_ausente_recebe_padrao():
    linha = validar_linha_empresa(LinhaBruta(empresa=" Acme "), "Não informado")

    assert linha.empresa == "Acme"
    assert linha.periodo == "Não informado"
    assert linha.entrada is None
    assert linha.valores() == {"rbt12": 0.0, "entrada": 0.0, "saida": 0.0, "imposto": 0.0}


def test_validar_linha_empresa_completa():
    bruta = LinhaBruta(
        empresa="Acme",
        cnpj="12.345.678/0001-90",
        periodo="Janeiro/2024",
        rbt12="R$ 1.234,56",
        entrada="1000",
        saida="",
        imposto="10,5",
        situacao="paralisada",
    )

    linha = validar_linha_empresa(bruta, "Não informado")

    assert linha.cnpj == "12345678000190"
    assert linha.rbt12 == pytest.approx(1234.56)
    assert linha.saida is None
    assert linha.sem_movimento is True
    assert linha.valores()["saida"] == 0.0


def test_validar_linha_periodo_exige_periodo():
    assert validar_linha_periodo(LinhaBruta(empresa="Acme", entrada="10")) is None

    linha = validar_linha_periodo(LinhaBruta(periodo="01/2024", entrada="10"))
    assert linha.periodo == "01/2024"
    assert linha.entrada == 10.0


@pytest.mark.parametrize(
    "bruta",
    [
        LinhaBruta(empresa="A" * (TAMANHO_MAX_NOME + 1), periodo="01/2024"),
        LinhaBruta(empresa="Acme", cnpj="1" * (TAMANHO_MAX_CNPJ + 1), periodo="01/2024"),
        LinhaBruta(empresa="Acme", periodo="P" * (TAMANHO_MAX_PERIODO + 1)),
    ],
    ids=["nome", "cnpj", "periodo"],
)
def test_validar_linha_empresa_valor_maior_que_a_coluna(bruta):
    assert validar_linha_empresa(bruta, "Não informado") is None


def test_validar_linha_empresa_no_limite_das_colunas():
    bruta = LinhaBruta(
        empresa="A" * TAMANHO_MAX_NOME,
        cnpj="1" * TAMANHO_MAX_CNPJ,
        periodo="P" * TAMANHO_MAX_PERIODO,
    )

    linha = validar_linha_empresa(bruta, "Não informado")

    assert len(linha.empresa) == TAMANHO_MAX_NOME
    assert len(linha.cnpj) == TAMANHO_MAX_CNPJ


def test_validar_linha_periodo_maior_que_a_coluna():
    assert validar_linha_periodo(LinhaBruta(periodo="P" * (TAMANHO_MAX_PERIODO + 1))) is None
    assert validar_linha_periodo(LinhaBruta(periodo="P" * TAMANHO_MAX_PERIODO)) is not None


# =============================================================================
# LEITURA E GERAÇÃO DE ARQUIVOS
# =============================================================================

def _xlsx(df: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def test_ler_planilha_xlsx():
    df = pd.DataFrame(
        {
            "EMPRESA": ["Acme", "Beta"],
            "Período": ["Janeiro/2024", "Fevereiro/2024"],
            "Entrada": ["1.000,00", "2000"],
        }
    )

    leitura = ler_planilha(_xlsx(df), "dados.xlsx")

    assert len(leitura.linhas) == 2
    assert leitura.linhas[0].empresa == "Acme"
    assert leitura.linhas[1].periodo == "Fevereiro/2024"
    assert leitura.colunas_mapeadas == {"EMPRESA": "empresa", "Período": "periodo", "Entrada": "entrada"}


def test_ler_planilha_csv_com_ponto_e_virgula():
    conteudo = "Empresa;Período;Imposto\nAcme;01/2024;1.234,56\n".encode("utf-8")

    leitura = ler_planilha(conteudo, "dados.csv")

    assert leitura.linhas[0].empresa == "Acme"
    assert parse_numero(leitura.linhas[0].imposto) == pytest.approx(1234.56)


@pytest.mark.parametrize(
    "cabecalho, esperado",
    [
        ("Empresa;Período;Imposto", ";"),
        ("Empresa,CNPJ,Período", ","),
        ("Empresa\tPeríodo", "\t"),
        ("Empresa|Período", "|"),
        ("Período", ","),
        ("Empresa", ","),
        ("", ","),
    ],
)
def test_separador_csv(cabecalho, esperado):
    assert separador_csv(f"{cabecalho}\nlinha\n".encode("utf-8")) == esperado


def test_ler_planilha_csv_uma_coluna():
    conteudo = "Período\nJaneiro/2024\nFevereiro/2024\n".encode("utf-8")

    leitura = ler_planilha(conteudo, "periodos.csv")

    assert leitura.colunas_arquivo == ["Período"]
    assert leitura.colunas_mapeadas == {"Período": "periodo"}
    assert [linha.periodo for linha in leitura.linhas] == ["Janeiro/2024", "Fevereiro/2024"]


def test_ler_planilha_extensao_invalida():
    with pytest.raises(ValueError):
        ler_planilha(b"qualquer coisa", "dados.pdf")


def test_ler_planilha_arquivo_corrompido():
    with pytest.raises(ValueError):
        ler_planilha(b"isto nao e um xlsx", "dados.xlsx")


def test_gerar_modelo_empresa():
    df = pd.read_excel(io.BytesIO(gerar_modelo_empresa()))

    assert list(df.columns) == COLUNAS_MODELO_EMPRESA
    assert list(df["Período"]) == ["Janeiro/2024", "Fevereiro/2024"]
    assert list(df["RBT12"]) == [100000, 120000]


def test_montar_tabela_exportacao_ordem_e_total():
    registros = [
        SimpleNamespace(period="Fevereiro/2024", rbt12=200.0, entrada=20.0, saida=5.0, imposto=2.0),
        SimpleNamespace(period="Janeiro/2024", rbt12=100.0, entrada=10.0, saida=None, imposto=1.0),
    ]

    df = montar_tabela_exportacao("Acme", "12345678000190", registros)

    assert list(df["Período"]) == ["Janeiro/2024", "Fevereiro/2024", ""]
    assert df.iloc[0]["CNPJ"] == "12.345.678/0001-90"

    total = df.iloc[-1]
    assert total["Empresa"] == "TOTAL"
    assert total["CNPJ"] == ""
    assert total["RBT12"] == 300.0
    assert total["Entrada"] == 30.0
    assert total["Saída"] == 5.0
    assert total["Imposto"] == 3.0


def test_gerar_exportacao_sem_registros_tem_apenas_total():
    df = pd.read_excel(io.BytesIO(gerar_exportacao("Acme", None, [])))

    assert len(df) == 1
    assert df.iloc[0]["Empresa"] == "TOTAL"
    assert df.iloc[0]["Entrada"] == 0


def test_nome_arquivo_seguro():
    assert nome_arquivo_seguro("Padaria São João Ltda.") == "Padaria_Sao_Joao_Ltda"
    assert nome_arquivo_seguro("") == "empresa"
