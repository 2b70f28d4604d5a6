"""Display helpers for doint amounts."""

from decimal import Decimal

DOINT_SYMBOL = "Đ"


def display_doint(doints) -> str:
    """Format an amount of doints with the currency symbol, thousands commas and two decimals."""
    raw = f"{Decimal(doints):.2f}"
    whole, _, cents = raw.partition(".")

    grouped = ""
    for index, char in enumerate(reversed(whole)):
        grouped = (f",{char}" if (index + 1) % 3 == 0 else char) + grouped
    grouped = grouped.removeprefix(",")

    return f"{DOINT_SYMBOL}{grouped}.{cents}"