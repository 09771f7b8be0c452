"""Utility helpers for calculator modules."""

from __future__ import annotations


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)


def capped(amount: float, ceiling: float | None) -> float:
    """Return ``amount`` clamped to ``ceiling`` (uncapped when ``None``)."""

    if ceiling is None:
        return amount
    return min(amount, ceiling)
