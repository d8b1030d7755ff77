"""Value transformation functions for macros.

A macro may name one function after its field, with an optional argument:

    ~eTempOutside~Value~round~1~     -> "3.4"
    ~ePower~Value~round~-2~          -> "2300"
    ~nKitchen~Data~shorten~5~        -> first 5 characters

Numeric functions only touch values whose text looks like a number and pass
anything else through unchanged. Arithmetic runs on ``decimal.Decimal`` built
from the value's text, so rounding follows the digits shown rather than the
binary float behind them.
"""

import logging
from decimal import ROUND_CEILING, ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, Decimal, DecimalException
from enum import Enum

from sdtmacro.lookup import is_int_text, is_number_text

logger = logging.getLogger(__name__)

MIN_DECIMALS = -12
MAX_DECIMALS = 12
MAX_INTEGER_DIGITS = 28


class MacroFunction(Enum):
    """Functions accepted in the macro function slot."""

    ROUND = "round"
    TRUNCATE = "truncate"
    CEIL = "ceil"
    FLOOR = "floor"
    SHORTEN = "shorten"

    @classmethod
    def lookup(cls, name: str) -> "MacroFunction | None":
        """Return the function called ``name`` (exact, lowercase), or None."""
        try:
            return cls(name)
        except ValueError:
            return None


def _int_argument(argument: str | None) -> int:
    if argument is not None and is_int_text(argument):
        return int(argument)
    return 0


def _decimal_places(argument: str | None) -> int:
    return min(MAX_DECIMALS, max(MIN_DECIMALS, _int_argument(argument)))


def _quantize(text: str, places: int, rounding: str) -> str:
    """Round ``text`` to ``places`` decimals (negative: tens, hundreds, ...)."""
    result = Decimal(text).quantize(Decimal(1).scaleb(-places), rounding=rounding)
    if places > 0:
        return f"{result:.{places}f}"
    return str(int(result))


def _round(text: str, argument: str | None) -> str:
    places = _decimal_places(argument)
    if not is_number_text(text):
        return text
    return _quantize(text, places, ROUND_HALF_UP)


def _truncate(text: str, argument: str | None) -> str:
    places = _decimal_places(argument)
    if not is_number_text(text):
        return text
    return _quantize(text, places, ROUND_DOWN)


def _to_integer(text: str, rounding: str) -> str:
    """Round ``text`` to an integer, passing values too large to expand through."""
    value = Decimal(text)
    if value.is_finite() and value.adjusted() >= MAX_INTEGER_DIGITS:
        logger.warning("Value %r too large for integer rounding, left unchanged", text)
        return text
    return str(int(value.to_integral_value(rounding=rounding)))


def _ceil(text: str, argument: str | None) -> str:
    if not is_number_text(text):
        return text
    return _to_integer(text, ROUND_CEILING)


def _floor(text: str, argument: str | None) -> str:
    if not is_number_text(text):
        return text
    return _to_integer(text, ROUND_FLOOR)


def _shorten(text: str, argument: str | None) -> str:
    length = _int_argument(argument)
    if length <= 0:
        return text
    return text[:length]


_FUNCTIONS = {
    MacroFunction.ROUND: _round,
    MacroFunction.TRUNCATE: _truncate,
    MacroFunction.CEIL: _ceil,
    MacroFunction.FLOOR: _floor,
    MacroFunction.SHORTEN: _shorten,
}


def apply_function(text: str, function: MacroFunction | None, argument: str | None = None) -> str:
    """Apply a macro function to the rendered value text.

    Args:
        text: Value already converted to its display string
        function: Function to apply, or None for no transformation
        argument: Raw argument text from the macro (may be None)

    Returns:
        Transformed text, or ``text`` unchanged if the function does not apply
    """
    if function is None:
        return text
    try:
        return _FUNCTIONS[function](text, argument)
    except (DecimalException, ArithmeticError, ValueError) as e:
        logger.error("Error while applying macro function %s to %r: %s", function.value, text, e)
        return text
