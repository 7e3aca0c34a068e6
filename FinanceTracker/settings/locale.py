"""
Module for formatting amounts and dates for display using Babel.

"""
import datetime
import logging

from babel import Locale, numbers
from babel.core import UnknownLocaleError
from babel.dates import format_date

DEFAULT_LOCALE = 'en_US'


def _parse_locale(locale: str) -> Locale:
    try:
        return Locale.parse(locale or DEFAULT_LOCALE)
    except (ValueError, UnknownLocaleError):
        logging.warning(f'Unknown locale "{locale}", falling back to {DEFAULT_LOCALE}')
        return Locale.parse(DEFAULT_LOCALE)


def format_amount(value: float, symbol: str = '', locale: str = DEFAULT_LOCALE) -> str:
    """
    Format an amount with two decimals and prefix it with a currency symbol.

    Currency symbols are free-form, so the symbol is prepended rather than resolved
    through a currency code.

    Args:
        value (float): The numeric value to be formatted.
        symbol (str): Currency symbol, e.g. '$'.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted amount, e.g. '$1,234.50'.
    """
    formatted = numbers.format_decimal(value, format='#,##0.00', locale=_parse_locale(locale))
    return f'{symbol}{formatted}'


def format_percent(value: float, locale: str = DEFAULT_LOCALE) -> str:
    """Format a 0-100 progress value as a whole percentage."""
    return numbers.format_percent(value / 100.0, format='#,##0%', locale=_parse_locale(locale))


def format_iso_date(value: str, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format an ISO-8601 date or timestamp string as a short, locale-aware date.

    Returns the input unchanged when it cannot be parsed.
    """
    try:
        date = datetime.date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return value or ''
    return format_date(date, format='medium', locale=_parse_locale(locale))
