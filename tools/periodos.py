"""
Interpretação de períodos fiscais em texto livre.

Os períodos são digitados ou importados em formatos variados
("Janeiro/2024", "jan/2024", "01/2024", "2024-01", "Janeiro 2024").
Este módulo converte o texto em um datetime comparável, usado apenas para
ordenação cronológica. Textos vazios ou irreconhecíveis viram EPOCA e
ficam no início de uma ordenação crescente.
"""

import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Iterable, List, Optional, TypeVar

from dateutil import parser as date_parser

EPOCA = datetime(1970, 1, 1)

ANO_MINIMO = 1900
ANO_MAXIMO = 2100

MESES = {
    "janeiro": 0, "fevereiro": 1, "março": 2, "marco": 2, "abril": 3,
    "maio": 4, "junho": 5, "julho": 6, "agosto": 7,
    "setembro": 8, "outubro": 9, "novembro": 10, "dezembro": 11,
    "jan": 0, "fev": 1, "mar": 2, "abr": 3, "mai": 4, "jun": 5,
    "jul": 6, "ago": 7, "set": 8, "out": 9, "nov": 10, "dez": 11,
}

# (regex, grupo do mês, grupo do ano)
_LETRAS = r"[^\W\d_]+"
PADROES = (
    # "janeiro/2024", "jan/2024"
    (re.compile(rf"^({_LETRAS})/(\d{{4}})$"), 1, 2),
    # "01/2024", "1/2024"
    (re.compile(r"^(\d{1,2})/(\d{4})$"), 1, 2),
    # "2024-01"
    (re.compile(r"^(\d{4})-(\d{1,2})$"), 2, 1),
    # "janeiro 2024", "jan 2024"
    (re.compile(rf"^({_LETRAS})\s+(\d{{4}})$"), 1, 2),
)

_ANO_REGEX = re.compile(r"\d{4}")

# Data base para o parse genérico: campos ausentes não dependem do dia atual
_DATA_PADRAO_FALLBACK = datetime(1970, 1, 1)

T = TypeVar("T")


def _resolver_mes(token: str) -> Optional[int]:
    """Retorna o mês (0-11) pelo nome/abreviação ou pelo número 1-12."""
    if token in MESES:
        return MESES[token]
    if token.isdigit():
        numero = int(token)
        if 1 <= numero <= 12:
            return numero - 1
    return None


def _parse_generico(texto: str) -> Optional[datetime]:
    try:
        data = date_parser.parse(texto, default=_DATA_PADRAO_FALLBACK)
    except (ValueError, OverflowError):
        return None
    if data.tzinfo is not None:
        data = data.astimezone(timezone.utc).replace(tzinfo=None)
    return data


@lru_cache(maxsize=4096)
def parse_period(texto: Optional[str]) -> datetime:
    """
    Converte o texto de um período fiscal em datetime (primeiro dia do mês).

    Ordem de tentativa:
    1. Padrões conhecidos (mês por nome ou número + ano entre 1900 e 2100)
    2. Parse genérico de data sobre o texto original
    3. EPOCA

    Nunca lança exceção.
    """
    if texto is None or not str(texto).strip():
        return EPOCA

    original = str(texto)
    normalizado = original.strip().lower()

    for regex, grupo_mes, grupo_ano in PADROES:
        match = regex.match(normalizado)
        if not match:
            continue

        ano = int(match.group(grupo_ano))
        if ano < ANO_MINIMO or ano > ANO_MAXIMO:
            continue

        mes = _resolver_mes(match.group(grupo_mes))
        if mes is None:
            continue

        return datetime(ano, mes + 1, 1)

    fallback = _parse_generico(original)
    if fallback is not None:
        return fallback

    return EPOCA


def extrair_ano(texto: Optional[str]) -> Optional[str]:
    """Primeiro grupo de 4 dígitos do período (ex: "Janeiro/2024" → "2024")."""
    if not texto:
        return None
    match = _ANO_REGEX.search(texto)
    return match.group(0) if match else None


def ordenar_por_periodo(
    itens: Iterable[T],
    chave: Callable[[T], Optional[str]],
    decrescente: bool = False,
) -> List[T]:
    """Ordena itens cronologicamente pelo período retornado por `chave`."""
    return sorted(itens, key=lambda item: parse_period(chave(item)), reverse=decrescente)
