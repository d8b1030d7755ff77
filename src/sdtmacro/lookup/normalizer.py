"""Normalizer: decoded JSON payload -> LookupTable.

Accepted payload shapes, checked in order:

    {"result": [{"id": ..., "idx": ..., "Name": ..., <fields>}, ...]}
    {"raw": {"<key>": <value>, ...}}
    {"<key>": <value>, ...}            (raw root, containers skipped)

Anything else normalizes to ``None`` ("no data"), which callers must keep
distinct from an empty but valid table.
"""

import logging
from typing import Any, Iterable

from sdtmacro.lookup.table import LookupTable, Record, is_int_text, stringify_value

logger = logging.getLogger(__name__)

RESULT_KEY = "result"
RAW_KEY = "raw"
RAW_NAME_PREFIX = "Key_"


def sort_keys_numerically(keys: Iterable[str]) -> list[str]:
    """Sort keys with integers first (numerically), then the rest lexicographically.

    >>> sort_keys_numerically(["10", "b", "2", "a"])
    ['2', '10', 'a', 'b']
    """
    def sort_key(key: str) -> tuple[int, int, str]:
        if is_int_text(key):
            return (0, int(key), "")
        return (1, 0, key)

    return sorted(keys, key=sort_key)


def make_raw_record(key: str, value: Any) -> Record:
    """Synthesize a Record from one raw key/value pair."""
    record: Record = {"id": key}
    if is_int_text(key):
        record["idx"] = int(key)
    record["Name"] = f"{RAW_NAME_PREFIX}{key}"
    record["Value"] = value
    record["Data"] = stringify_value(value)
    return record


def normalize(data: Any) -> LookupTable | None:
    """Turn a decoded JSON document into a LookupTable.

    Args:
        data: Decoded JSON (any type)

    Returns:
        LookupTable (possibly empty), or None if the shape is not recognized
    """
    if not isinstance(data, dict):
        logger.debug("Unsupported payload type: %s", type(data).__name__)
        return None

    items: list[Any]
    if isinstance(data.get(RESULT_KEY), list):
        items = data[RESULT_KEY]
    elif isinstance(data.get(RAW_KEY), dict):
        raw = data[RAW_KEY]
        items = [make_raw_record(k, raw[k]) for k in sort_keys_numerically(raw)]
    elif RESULT_KEY not in data and RAW_KEY not in data:
        items = [
            make_raw_record(k, data[k])
            for k in sort_keys_numerically(data)
            if not isinstance(data[k], (dict, list))
        ]
    else:
        logger.debug("Payload has '%s'/'%s' of unexpected type", RESULT_KEY, RAW_KEY)
        return None

    table = LookupTable()
    for item in items:
        if isinstance(item, dict):
            table.add(item)
    return table
