"""Currency table and the per-session currency context.

The context is built once when a session starts and handed to whatever needs
a symbol; nothing reads the user's currency from module state.
"""

from dataclasses import dataclass

from spendflow.domain.amounts import format_money
from spendflow.domain.models import CurrencySymbol, Money


@dataclass(frozen=True)
class Currency:
    """Immutable currency description."""

    code: str
    symbol: CurrencySymbol
    name: str


def _currency(code: str, symbol: str, name: str) -> Currency:
    return Currency(code=code, symbol=CurrencySymbol(symbol), name=name)


CURRENCIES: dict[str, Currency] = {
    c.code: c
    for c in (
        _currency("GBP", "£", "British Pound"),
        _currency("USD", "$", "US Dollar"),
        _currency("EUR", "€", "Euro"),
        _currency("CAD", "C$", "Canadian Dollar"),
        _currency("AUD", "A$", "Australian Dollar"),
        _currency("JPY", "¥", "Japanese Yen"),
        _currency("CNY", "¥", "Chinese Yuan"),
        _currency("INR", "₹", "Indian Rupee"),
        _currency("BRL", "R$", "Brazilian Real"),
        _currency("MXN", "$", "Mexican Peso"),
        _currency("KRW", "₩", "South Korean Won"),
        _currency("SGD", "S$", "Singapore Dollar"),
        _currency("HKD", "HK$", "Hong Kong Dollar"),
        _currency("CHF", "CHF", "Swiss Franc"),
        _currency("SEK", "kr", "Swedish Krona"),
        _currency("NOK", "kr", "Norwegian Krone"),
        _currency("DKK", "kr", "Danish Krone"),
        _currency("PLN", "zł", "Polish Zloty"),
        _currency("CZK", "Kč", "Czech Koruna"),
        _currency("TRY", "₺", "Turkish Lira"),
        _currency("ZAR", "R", "South African Rand"),
        _currency("AED", "د.إ", "UAE Dirham"),
        _currency("ILS", "₪", "Israeli Shekel"),
    )
}

COUNTRY_CURRENCIES: dict[str, str] = {
    "GB": "GBP",
    "US": "USD",
    "DE": "EUR",
    "FR": "EUR",
    "IT": "EUR",
    "ES": "EUR",
    "NL": "EUR",
    "BE": "EUR",
    "AT": "EUR",
    "PT": "EUR",
    "IE": "EUR",
    "FI": "EUR",
    "GR": "EUR",
    "CA": "CAD",
    "AU": "AUD",
    "JP": "JPY",
    "CN": "CNY",
    "IN": "INR",
    "BR": "BRL",
    "MX": "MXN",
    "KR": "KRW",
    "SG": "SGD",
    "HK": "HKD",
    "CH": "CHF",
    "SE": "SEK",
    "NO": "NOK",
    "DK": "DKK",
    "PL": "PLN",
    "CZ": "CZK",
    "TR": "TRY",
    "ZA": "ZAR",
    "AE": "AED",
    "IL": "ILS",
}

DEFAULT_CURRENCY = CURRENCIES["GBP"]


@dataclass(frozen=True)
class CurrencyContext:
    """Immutable currency settings for one session."""

    currency: Currency = DEFAULT_CURRENCY
    country: str | None = None

    @property
    def symbol(self) -> CurrencySymbol:
        return self.currency.symbol


def get_currency(code: str | None) -> Currency:
    """Look up a currency by ISO code, falling back to GBP.

    Args:
        code: ISO 4217 code (case-insensitive).

    Returns:
        Matching Currency, or GBP if unknown.
    """
    if not code:
        return DEFAULT_CURRENCY
    return CURRENCIES.get(code.upper(), DEFAULT_CURRENCY)


def currency_for_country(country: str | None) -> Currency:
    """Pick the local currency for an ISO 3166 country code (GBP if unknown)."""
    if not country:
        return DEFAULT_CURRENCY
    return get_currency(COUNTRY_CURRENCIES.get(country.upper()))


def build_currency_context(code: str | None = None, country: str | None = None) -> CurrencyContext:
    """Create the session currency context.

    An explicit currency code wins; otherwise the country decides.

    Args:
        code: Preferred currency code, if the user set one.
        country: Country code, if known.

    Returns:
        CurrencyContext for the session.
    """
    currency = get_currency(code) if code else currency_for_country(country)
    return CurrencyContext(currency=currency, country=country.upper() if country else None)


def format_amount(amount: Money, context: CurrencyContext, include_sign: bool = False) -> str:
    """Format amount with the session's currency symbol."""
    return format_money(amount, context.symbol, include_sign=include_sign)
