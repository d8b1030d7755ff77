"""Macro substitution for display format strings.

Modules:
    - engine: Macro scanning and replacement
    - functions: round / truncate / ceil / floor / shorten
"""

from sdtmacro.macros.engine import (
    Macro,
    contains_macros,
    get_field_value,
    lookup_record,
    render,
)
from sdtmacro.macros.functions import MacroFunction, apply_function

__all__ = [
    "Macro",
    "contains_macros",
    "get_field_value",
    "lookup_record",
    "render",
    "MacroFunction",
    "apply_function",
]
