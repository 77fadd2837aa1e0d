"""Helpers for turning typed form text into numbers.

Form fields show amounts in the vi-VN style: ``.`` groups thousands and ``,``
marks decimals (``1.250.000,5``).
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from orderdesk.domain.pricing_models import HUNDRED, ZERO, Numeric, to_decimal

_NON_NUMERIC = re.compile(r"[^\d.,]")


def parse_formatted_number(value: object, *, allow_negative: bool = False) -> Decimal:
    """Parse vi-VN formatted text, returning zero for anything unparsable.

    Non-string values are coerced directly, with ``inf`` and ``nan`` read as
    zero. A leading ``-`` is honoured only
    when ``allow_negative`` is set, so a lone ``"-"`` typed on the way to a
    negative number reads as zero.
    """
    if value is None:
        return ZERO
    if not isinstance(value, str):
        try:
            number = to_decimal(value)
        except (ValueError, TypeError, InvalidOperation):
            return ZERO
        return number if number.is_finite() else ZERO

    text = value.strip()
    negative = allow_negative and text.startswith("-")
    cleaned = _NON_NUMERIC.sub("", text)
    cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    if not cleaned or cleaned == ".":
        return ZERO
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return ZERO
    return -number if negative else number


def clamp_percent(value: Numeric) -> Decimal:
    """Clamp a percentage into the closed range [0, 100]; NaN reads as zero."""
    number = to_decimal(value)
    if number.is_nan() or number < ZERO:
        return ZERO
    if number > HUNDRED:
        return HUNDRED
    return number
