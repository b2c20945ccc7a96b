"""
Scalar value text.

Floats use the shortest representation that round-trips, switching to
exponent form when the decimal exponent is below -4 or at least 6
(``1e+06``, ``1.5e-07``), with ``+Inf``, ``-Inf`` and ``NaN`` for the
special values.
"""

from __future__ import annotations

import json
import math
from decimal import Decimal

_EXPONENT_LIMIT = 6


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_int(value: int) -> str:
    return int.__repr__(int(value))


def format_float(value: float) -> str:
    """Format a float in shortest %g form."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(float.__repr__(value)).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    while len(digits) > 1 and digits[0] == 0:
        digits.pop(0)
    text = "".join(str(d) for d in digits)
    # Position of the decimal point relative to the first digit
    point = len(digits) + exponent
    exp10 = point - 1

    if exp10 < -4 or exp10 >= _EXPONENT_LIMIT:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        body = f"{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
    elif point <= 0:
        body = "0." + "0" * -point + text
    elif point >= len(text):
        body = text + "0" * (point - len(text))
    else:
        body = text[:point] + "." + text[point:]
    return ("-" if sign else "") + body


def format_complex(value: complex) -> str:
    """Format a complex number as ``(re+imi)``."""
    value = complex(value)
    imag = format_float(value.imag)
    if not imag.startswith(("-", "+")):
        imag = "+" + imag
    return f"({format_float(value.real)}{imag}i)"


def quote_string(value: str) -> str:
    """Double-quote a string, escaping quotes, backslashes and control characters."""
    return json.dumps(value, ensure_ascii=False)


def bytes_literal(value: bytes | bytearray) -> tuple[str, str, str]:
    """Split the bytes literal of ``value`` into (opening, content, closing)."""
    text = repr(bytes(value))
    return text[:2], text[2:-1], text[-1:]
