# formatting.py
from datetime import date, datetime

CURRENCY_SYMBOL = "R$"
PLACEHOLDER = "-"


def format_cents(cents) -> str:
    """
    Integer cents -> pt-BR currency string, e.g. 123456 -> "R$ 1.234,56".
    Raises TypeError for non-numeric input (None, strings).
    """
    if isinstance(cents, bool) or not isinstance(cents, (int, float)):
        raise TypeError(f"cents must be a number, got {type(cents).__name__}")
    value = int(round(cents))
    sign = "-" if value < 0 else ""
    units, rest = divmod(abs(value), 100)
    # 1,234,567 -> 1.234.567
    grouped = f"{units:,}".replace(",", ".")
    return f"{sign}{CURRENCY_SYMBOL} {grouped},{rest:02d}"


def parse_date(value) -> date | datetime:
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        if len(raw) == 10:
            return date.fromisoformat(raw)
        return datetime.fromisoformat(raw)
    raise TypeError(f"Unsupported date value: {value!r}")


def format_date(value) -> str:
    # dd/mm/yyyy; the caller handles missing dates
    return parse_date(value).strftime("%d/%m/%Y")


def placeholder(value) -> str:
    if value is None:
        return PLACEHOLDER
    text = str(value).strip()
    return text or PLACEHOLDER
