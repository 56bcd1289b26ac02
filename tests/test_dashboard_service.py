import pytest

from middleware.auth import CompanyAccess
from models import Company, CompanyPassword, FiscalData
from services.dashboard_service import DashboardService, ultimo_registro


@pytest.fixture()
def empresas(db):
    aberta = Company(name="Aberta")
    protegida = Company(name="Protegida", sem_movimento=True)
    vazia = Company(name="Vazia")
    db.add_all([aberta, protegida, vazia])
    db.commit()

    db.add_all(
        [
            FiscalData(company_id=aberta.id, period="Janeiro/2024", entrada=100.0, saida=40.0, imposto=10.0),
            FiscalData(company_id=aberta.id, period="Fevereiro/2024", entrada=200.0, saida=50.0, imposto=20.0),
            FiscalData(company_id=protegida.id, period="Janeiro/2024", entrada=1000.0, saida=0.0, imposto=100.0),
            CompanyPassword(company_id=protegida.id, password_hash="x"),
        ]
    )
    db.commit()
    return aberta, protegida, vazia


def test_ultimo_registro():
    assert ultimo_registro([]) is None
    registros = [FiscalData(period="01/2024"), FiscalData(period="Dezembro/2023"), FiscalData(period="2024-02")]
    assert ultimo_registro(registros).period == "2024-02"


def test_empresas_com_ultimo_periodo(db, empresas):
    resultado = DashboardService().empresas_com_ultimo_periodo(db)

    assert [(e.name, u.period if u else None) for e, u in resultado] == [
        ("Aberta", "Fevereiro/2024"),
        ("Protegida", "Janeiro/2024"),
        ("Vazia", None),
    ]
    assert resultado[1][0].protegida is True


def test_evolucao_geral_oculta_empresa_protegida(db, empresas):
    evolucao = DashboardService().evolucao_geral(db, CompanyAccess())

    assert [(p.period, p.entrada, p.empresas) for p in evolucao] == [
        ("Janeiro/2024", 100.0, 1),
        ("Fevereiro/2024", 200.0, 1),
    ]


def test_evolucao_geral_com_empresa_liberada(db, empresas):
    _, protegida, _ = empresas

    evolucao = DashboardService().evolucao_geral(db, CompanyAccess([protegida.id]))

    janeiro = evolucao[0]
    assert janeiro.period == "Janeiro/2024"
    assert janeiro.entrada == 1100.0
    assert janeiro.imposto == 110.0
    assert janeiro.empresas == 2


def test_evolucao_empresa_saldo(db, empresas):
    aberta, _, _ = empresas

    serie = DashboardService().evolucao_empresa(db, aberta.id)

    assert [p.period for p in serie] == ["Janeiro/2024", "Fevereiro/2024"]
    assert serie[0].saldo == 60.0
    assert serie[1].saldo == 150.0


def test_estatisticas(db, empresas):
    stats = DashboardService().estatisticas(db, CompanyAccess())

    assert stats.total_empresas == 3
    assert stats.empresas_ativas == 2
    assert stats.empresas_sem_movimento == 1
    assert stats.empresas_protegidas == 1
    assert stats.total_registros == 2
    assert stats.entrada == 300.0
    assert stats.imposto == 30.0


def test_company_access():
    acesso = CompanyAccess([1])
    acesso.autorizar(2)
    acesso.revogar(1)

    assert acesso.pode_acessar(2)
    assert not acesso.pode_acessar(1)
    assert acesso.company_ids == {2}
