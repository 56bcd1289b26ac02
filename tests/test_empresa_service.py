import pytest
from fastapi import HTTPException

from models import Company, CompanyPassword, FiscalData
from services.empresa_service import (
    atualizar_empresa,
    atualizar_situacao,
    criar_empresa,
    deletar_empresa,
    listar_empresas_com_ultimo_periodo,
    obter_empresa,
    periodos_recentes,
    resolver_situacao,
)


@pytest.fixture()
def carteira(db):
    acme = criar_empresa(db, {"name": "Acme", "cnpj": "12.345.678/0001-90"})
    beta = criar_empresa(db, {"name": "beta comércio", "sem_movimento": True})
    zeta = criar_empresa(db, {"name": "Zeta"})

    db.add_all(
        [
            FiscalData(company_id=acme.id, period="Janeiro/2024", rbt12=500.0, entrada=10.0),
            FiscalData(company_id=acme.id, period="Fevereiro/2024", rbt12=900.0, entrada=20.0),
            FiscalData(company_id=beta.id, period="Dezembro/2023", rbt12=100.0, entrada=99.0),
        ]
    )
    db.commit()
    return acme, beta, zeta


def test_criar_empresa_limpa_cnpj(db):
    empresa = criar_empresa(db, {"name": "  Acme  ", "cnpj": "12.345.678/0001-90", "segmento": " "})

    assert empresa.name == "Acme"
    assert empresa.cnpj == "12345678000190"
    assert empresa.segmento is None
    assert empresa.situacao == "Ativa"
    assert empresa.protegida is False


def test_obter_empresa_inexistente(db):
    with pytest.raises(HTTPException) as exc:
        obter_empresa(db, 123)

    assert exc.value.status_code == 404
    assert exc.value.detail == "Empresa não encontrada"


def test_atualizar_empresa_parcial(db, carteira):
    acme, _, _ = carteira

    empresa = atualizar_empresa(db, acme.id, {"segmento": "Comércio"})

    assert empresa.segmento == "Comércio"
    assert empresa.cnpj == "12345678000190"


@pytest.mark.parametrize(
    "sem_movimento, situacao, esperado",
    [
        (None, "ativa", False),
        (None, "paralisada", True),
        (None, "paralizada", True),
        (None, "sem_movimento", True),
        (True, None, True),
        (False, None, False),
    ],
)
def test_resolver_situacao(sem_movimento, situacao, esperado):
    assert resolver_situacao(sem_movimento, situacao) is esperado


def test_atualizar_situacao(db, carteira):
    acme, _, _ = carteira

    empresa = atualizar_situacao(db, acme.id, True)

    assert empresa.sem_movimento is True
    assert empresa.situacao == "SM"


def test_deletar_empresa_remove_dependentes(db, carteira):
    acme, beta, _ = carteira
    db.add(CompanyPassword(company_id=acme.id, password_hash="x"))
    db.commit()
    acme_id = acme.id

    deletar_empresa(db, acme_id)

    assert db.query(Company).filter(Company.id == acme_id).first() is None
    assert db.query(FiscalData).filter(FiscalData.company_id == acme_id).count() == 0
    assert db.query(CompanyPassword).count() == 0
    assert db.query(FiscalData).count() == 1


def test_lista_com_ultimo_periodo(db, carteira):
    itens = listar_empresas_com_ultimo_periodo(db)

    assert [i["name"] for i in itens] == ["Acme", "beta comércio", "Zeta"]
    assert itens[0]["latest_fiscal_data"]["period"] == "Fevereiro/2024"
    assert itens[0]["latest_fiscal_data"]["rbt12"] == 900.0
    assert itens[2]["latest_fiscal_data"] is None


def test_lista_filtros(db, carteira):
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, busca="BETA")] == ["beta comércio"]
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, busca="12.345")] == ["Acme"]
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, situacao="paralisada")] == ["beta comércio"]
    assert len(listar_empresas_com_ultimo_periodo(db, situacao="ativa")) == 2
    assert len(listar_empresas_com_ultimo_periodo(db, situacao="todas")) == 3
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, rbt12_min=200)] == ["Acme"]
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, rbt12_max=100)] == ["beta comércio", "Zeta"]
    assert [i["name"] for i in listar_empresas_com_ultimo_periodo(db, periodo="Dezembro/2023")] == ["beta comércio"]


def test_lista_ordenacao(db, carteira):
    por_rbt12 = listar_empresas_com_ultimo_periodo(db, ordenar_por="rbt12", direcao="desc")
    assert [i["name"] for i in por_rbt12] == ["Acme", "beta comércio", "Zeta"]

    por_periodo = listar_empresas_com_ultimo_periodo(db, ordenar_por="periodo")
    assert [i["name"] for i in por_periodo] == ["Zeta", "beta comércio", "Acme"]

    por_nome_desc = listar_empresas_com_ultimo_periodo(db, direcao="desc")
    assert [i["name"] for i in por_nome_desc] == ["Zeta", "beta comércio", "Acme"]


def test_periodos_recentes(db, carteira):
    assert periodos_recentes(db) == ["Fevereiro/2024", "Dezembro/2023"]
