"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOL = "R$"


def format_currency(amount: Union[float, int], decimals: int = 2, include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        decimals: Number of decimal places (the financial dashboard uses 0)
        include_sign: Whether to include the currency symbol

    Returns:
        Formatted currency string (e.g., "R$ 1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        'R$ 1,234.56'
        >>> format_currency(1100, decimals=0)
        'R$ 1,100'
    """
    formatted = f"{amount:,.{decimals}f}"
    return f"{CURRENCY_SYMBOL} {formatted}" if include_sign else formatted


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown does not read them as LaTeX.

    Example:
        >>> escape_dollar_for_markdown('R$ 1,234.56')
        'R\\\\$ 1,234.56'
    """
    return text.replace("$", "\\$")


def format_currency_markdown(amount: Union[float, int], decimals: int = 2) -> str:
    return escape_dollar_for_markdown(format_currency(amount, decimals=decimals))


def format_signed_amount(amount: Union[float, int], is_income: bool) -> str:
    """Transaction amount with a leading + for income and - for expenses."""
    return f"{'+' if is_income else '-'} {format_currency(abs(amount))}"


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"
