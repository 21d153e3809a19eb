# rotamax/formatting.py
"""Brazilian real formatting for report payloads (``R$ 1.234,56``)."""

from __future__ import annotations


def format_currency(amount: float) -> str:
    amount = float(amount or 0.0)
    sign = "-" if amount < 0 else ""
    whole, cents = f"{abs(amount):,.2f}".split(".")
    return f"{sign}R$ {whole.replace(',', '.')},{cents}"
