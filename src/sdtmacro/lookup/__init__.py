"""Lookup layer for SDT Macro Extender.

Modules:
    - table: Record / LookupTable model and value formatting
    - normalizer: JSON payload shapes -> LookupTable
    - merger: Last-writer-wins merge across sources
"""

from sdtmacro.lookup.table import (
    LookupTable,
    Record,
    is_int_text,
    is_number_text,
    stringify_value,
)
from sdtmacro.lookup.normalizer import (
    make_raw_record,
    normalize,
    sort_keys_numerically,
)
from sdtmacro.lookup.merger import merge

__all__ = [
    "LookupTable",
    "Record",
    "is_int_text",
    "is_number_text",
    "stringify_value",
    "make_raw_record",
    "normalize",
    "sort_keys_numerically",
    "merge",
]
