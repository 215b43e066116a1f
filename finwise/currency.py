"""
Currency Catalog

Static lookup of the currencies a profile can be set to.
Unknown codes render with DEFAULT_SYMBOL.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


DEFAULT_SYMBOL = "$"


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    symbol: str
    name: str


CURRENCIES: tuple[Currency, ...] = (
    Currency(code="USD", symbol="$", name="US Dollar"),
    Currency(code="EUR", symbol="€", name="Euro"),
    Currency(code="GBP", symbol="£", name="British Pound"),
    Currency(code="JPY", symbol="¥", name="Japanese Yen"),
    Currency(code="AUD", symbol="A$", name="Australian Dollar"),
    Currency(code="CAD", symbol="C$", name="Canadian Dollar"),
    Currency(code="CHF", symbol="Fr", name="Swiss Franc"),
    Currency(code="CNY", symbol="¥", name="Chinese Yuan"),
    Currency(code="INR", symbol="₹", name="Indian Rupee"),
    Currency(code="BRL", symbol="R$", name="Brazilian Real"),
)

_BY_CODE = {currency.code: currency for currency in CURRENCIES}


def find_currency(code: Optional[str]) -> Optional[Currency]:
    """Look up a catalog entry by exact code."""
    if not code:
        return None
    return _BY_CODE.get(code)


def get_currency_symbol(code: Optional[str]) -> str:
    """Symbol for a currency code, or DEFAULT_SYMBOL if it isn't in the catalog."""
    currency = find_currency(code)
    return currency.symbol if currency else DEFAULT_SYMBOL


def is_supported_currency(code: Optional[str]) -> bool:
    return find_currency(code) is not None
