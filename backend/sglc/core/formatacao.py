"""
Formatação de valores no padrão brasileiro (pt-BR)
"""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Numero = Union[Decimal, float, int, str]


def quantizar(valor: Numero) -> Decimal:
    """Converte para Decimal com duas casas (ROUND_HALF_UP)"""
    return Decimal(str(valor)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def formatar_numero(valor: Numero) -> str:
    """1500.5 -> '1.500,50'"""
    texto = f"{quantizar(valor):,.2f}"
    # Troca separadores do padrão en-US para pt-BR
    return texto.replace(",", "_").replace(".", ",").replace("_", ".")


def formatar_moeda(valor: Numero) -> str:
    """1500.5 -> 'R$ 1.500,50'"""
    return f"R$ {formatar_numero(valor)}"


def formatar_data(valor: Union[date, datetime, str]) -> str:
    """date(2025, 3, 15) ou '2025-03-15' -> '15/03/2025'"""
    if isinstance(valor, str):
        valor = date.fromisoformat(valor[:10])
    return valor.strftime("%d/%m/%Y")
