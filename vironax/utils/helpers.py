"""
Helper utilities
"""
from typing import Iterable


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero or negative"""
    if denominator is None or denominator <= 0:
        return default
    return numerator / denominator


def calculate_percentage_change(current: float, previous: float) -> float:
    """Percentage change vs previous; 0 when previous is not positive"""
    if previous is None or previous <= 0:
        return 0.0
    return ((current - previous) / previous) * 100


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence"""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def format_currency(amount: float, currency: str = "USD", decimals: int = 2, grouping: bool = True) -> str:
    """Format amount as currency; ``grouping=False`` drops the thousands separator"""
    symbols = {"USD": "$", "EUR": "€", "GBP": "£"}
    symbol = symbols.get(currency, f"{currency} ")
    separator = "," if grouping else ""
    return f"{symbol}{amount:{separator}.{decimals}f}"
