from decimal import Decimal, ROUND_HALF_UP


def format_amount(amount) -> str:
    """Whole-won amount with thousands separators, e.g. ``1,234,500``."""
    if amount is None:
        return "0"
    amount = Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{amount:,}"


def format_currency(amount, unit: str = "KRW") -> str:
    return f"{unit} {format_amount(amount)}"


def format_quantity(quantity, unit_type: str = None) -> str:
    if quantity is None:
        return ""
    return f"{quantity:,} {unit_type}" if unit_type else f"{quantity:,}"
