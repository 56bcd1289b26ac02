import pytest
from fastapi import HTTPException

from models import Company, FiscalData
from services.dados_fiscais_service import (
    anos_disponiveis,
    atualizar_dado_fiscal,
    criar_dado_fiscal,
    deletar_dado_fiscal,
    listar_dados_fiscais,
    totais,
)


@pytest.fixture()
def empresa(db):
    empresa = Company(name="Acme")
    db.add(empresa)
    db.commit()
    for period, entrada, imposto in [
        ("Janeiro/2024", 100.0, 10.0),
        ("Março/2024", 300.0, 5.0),
        ("Dezembro/2023", 50.0, 30.0),
        ("Fevereiro/2024", 200.0, 20.0),
    ]:
        db.add(FiscalData(company_id=empresa.id, period=period, entrada=entrada, imposto=imposto, rbt12=1.0))
    db.commit()
    return empresa


def test_listar_padrao_mais_recente_primeiro(db, empresa):
    registros = listar_dados_fiscais(db, empresa.id)

    assert [r.period for r in registros] == [
        "Março/2024",
        "Fevereiro/2024",
        "Janeiro/2024",
        "Dezembro/2023",
    ]


def test_listar_ordenado_por_valor(db, empresa):
    registros = listar_dados_fiscais(db, empresa.id, ordenar_por="imposto", direcao="asc")

    assert [r.imposto for r in registros] == [5.0, 10.0, 20.0, 30.0]


def test_listar_filtros(db, empresa):
    assert [r.period for r in listar_dados_fiscais(db, empresa.id, periodo="jan")] == ["Janeiro/2024"]
    assert len(listar_dados_fiscais(db, empresa.id, ano="2023")) == 1
    assert len(listar_dados_fiscais(db, empresa.id, ano="todos")) == 4


def test_totais_e_anos(db, empresa):
    registros = listar_dados_fiscais(db, empresa.id)

    resumo = totais(registros)
    assert resumo.entrada == 650.0
    assert resumo.imposto == 65.0
    assert resumo.rbt12 == 4.0
    assert anos_disponiveis(registros) == ["2024", "2023"]


def test_criar_dado_fiscal_valores_ausentes_viram_zero(db, empresa):
    registro = criar_dado_fiscal(
        db, {"company_id": empresa.id, "period": "Abril/2024", "rbt12": 0, "entrada": 10.0, "saida": 0, "imposto": 0}
    )

    assert registro.id is not None
    assert registro.saida == 0


def test_criar_dado_fiscal_periodo_repetido_retorna_409(db, empresa):
    with pytest.raises(HTTPException) as exc:
        criar_dado_fiscal(db, {"company_id": empresa.id, "period": "Janeiro/2024", "entrada": 1.0})

    assert exc.value.status_code == 409


def test_criar_dado_fiscal_empresa_inexistente(db):
    with pytest.raises(HTTPException) as exc:
        criar_dado_fiscal(db, {"company_id": 999, "period": "Janeiro/2024"})

    assert exc.value.status_code == 404


def test_atualizar_sobrescreve_registro(db, empresa):
    registro = listar_dados_fiscais(db, empresa.id, periodo="Janeiro")[0]

    atualizado = atualizar_dado_fiscal(
        db,
        registro.id,
        {"period": "Jan/2024", "rbt12": 0, "entrada": 1.0, "saida": 2.0, "imposto": 0},
    )

    assert atualizado.period == "Jan/2024"
    assert atualizado.entrada == 1.0
    assert atualizado.imposto == 0


def test_deletar_dado_fiscal(db, empresa):
    registro = listar_dados_fiscais(db, empresa.id)[0]

    deletar_dado_fiscal(db, registro.id)

    assert len(listar_dados_fiscais(db, empresa.id)) == 3
    with pytest.raises(HTTPException):
        deletar_dado_fiscal(db, registro.id)
