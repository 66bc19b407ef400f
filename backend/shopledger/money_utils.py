from __future__ import annotations


def format_cents(cents: int | None, symbol: str = "$") -> str:
    """Render integer cents for display, e.g. 12345 -> "$123.45"."""
    cents = int(cents or 0)
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{symbol}{whole:,}.{frac:02d}"
