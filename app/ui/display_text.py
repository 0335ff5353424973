from decimal import ROUND_HALF_UP, Decimal

_TWO_PLACES = Decimal("0.01")


def _fmt_coord(v: float) -> str:
    """
    Two decimal places, rounding halves away from zero on the shortest
    decimal form of the float: 12.345 -> '12.35', -0.5 -> '-0.50'.
    """
    return str(Decimal(repr(float(v))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def gen_callout_detail(point) -> str:
    """Callout detail text for a map point, e.g. 'x: 12.35, y: -0.50'."""
    return f"x: {_fmt_coord(point.x)}, y: {_fmt_coord(point.y)}"


def gen_selection_text(count: int) -> str:
    if count == 0:
        return "No features selected"
    if count == 1:
        return "1 feature selected"
    return f"{count} features selected"
