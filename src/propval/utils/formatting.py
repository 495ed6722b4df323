from __future__ import annotations


def format_currency(value: float) -> str:
    """Whole-dollar US currency string, e.g. ``$1,234,568``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def confidence_label(confidence: float) -> str:
    if confidence >= 0.8:
        return "high"
    if confidence >= 0.6:
        return "medium"
    return "low"
