"""Price calculator — final local-currency (SYP) price of a product.

final = round_half_away_from_zero((cost_usd * rate + profit_syp) / 500) * 500

The per-unit ("ل.س.ج") price is the final price divided by 100. Since the
final price is always a multiple of 500 the division is exact; it is never
rounded on its own. Every function here is pure: the exchange rate is an
argument, never read from global state, so the live table and the export
renderer always agree.
"""

import math
import re
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pricelist.config import get_settings

settings = get_settings()

_NOT_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"[0-9]*[.]?[0-9]*")


def _field(product: Any, name: str) -> Any:
    if isinstance(product, Mapping):
        return product.get(name)
    return getattr(product, name, None)


def to_number(value: Any) -> float:
    """Coerce a stored numeric field to a finite float; anything else is 0."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_number(value: Any) -> float:
    """Parse user-typed text such as '4,74', '$ 1200' or '500 ل.س.ق'.

    Commas are decimal separators and every other character except digits
    and dots is dropped; the longest leading number is then read, so stray
    trailing dots are ignored. Unparseable input is 0, never an error.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return to_number(value)
    if value is None:
        return 0.0
    cleaned = _NOT_NUMERIC.sub("", str(value).replace(",", "."))
    prefix = _LEADING_NUMBER.match(cleaned).group()
    return to_number(prefix) if prefix.strip(".") else 0.0


def effective_cost(product: Any) -> float:
    """USD cost, falling back to the legacy carton cost; never negative."""
    cost = to_number(_field(product, "cost_usd")) or to_number(_field(product, "carton_usd"))
    return max(cost, 0.0)


def final_price(product: Any, rate: Any, rounding_step: int = settings.PRICE_ROUNDING_STEP) -> int:
    """Final SYP price rounded to the nearest rounding_step (500 by default)."""
    cost = Decimal(repr(effective_cost(product)))
    effective_rate = Decimal(repr(max(to_number(rate), 0.0)))
    profit = Decimal(repr(to_number(_field(product, "profit_syp"))))

    try:
        base = cost * effective_rate + profit
        steps = (base / rounding_step).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Magnitudes beyond the decimal context cannot be priced
        return 0
    return max(int(steps) * rounding_step, 0)


def per_unit_price(product: Any, rate: Any) -> int:
    return final_price(product, rate) // settings.PER_UNIT_DIVISOR


def case_price_usd(product: Any) -> float:
    return to_number(_field(product, "cost_usd")) * settings.CARTONS_PER_CASE


def wholesale_case_price_usd(product: Any) -> float:
    return to_number(_field(product, "wholesale_carton_usd")) * settings.CARTONS_PER_CASE


def _amount(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_cell(column_id: str, product: Any, rate: Any) -> str:
    """Display text of one table cell."""
    if column_id == "name":
        return str(_field(product, "name") or "")
    if column_id == "syp_final":
        return f"{final_price(product, rate):,}"
    if column_id == "cost_usd":
        return f"${effective_cost(product):.2f}"
    if column_id == "profit_syp":
        return _amount(to_number(_field(product, "profit_syp")))
    if column_id == "wholesale_carton_usd":
        return f"${to_number(_field(product, 'wholesale_carton_usd')):.2f}"
    if column_id == "lsg":
        return f"{per_unit_price(product, rate):,}"
    if column_id == "case_usd":
        return f"${case_price_usd(product):,.2f}"
    if column_id == "wholesale_case_usd":
        return f"${wholesale_case_price_usd(product):,.2f}"
    return ""
