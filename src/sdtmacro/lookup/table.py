"""Lookup tables built from fetched JSON.

A Record is one item of fetched data (a plain dict, original key casing kept).
A LookupTable indexes Records three ways: by ``id``, by integer ``idx`` and by
``Name``. The same Record object may sit in several indices at once.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any


Record = dict[str, Any]

INT_REGEX = re.compile(r"-?\d+")
NUM_REGEX = re.compile(r"[+-]?(?:\d+\.?\d*|\d*\.?\d+)(?:[eE][+-]?\d+)?")

COMPLEX_VALUE_PLACEHOLDER = "[complex value]"


def is_int_text(text: str) -> bool:
    """True if ``text`` is an optionally negative run of digits."""
    return INT_REGEX.fullmatch(text) is not None


def is_number_text(text: str) -> bool:
    """True if ``text`` looks like a decimal or scientific-notation number."""
    return NUM_REGEX.fullmatch(text) is not None


def stringify_value(value: Any) -> str:
    """Render a JSON value the way it appears in a display string.

    Booleans become ``true``/``false``, floats use up to 15 significant digits
    (so ``3.0`` renders as ``3`` and ``0.1 + 0.2`` as ``0.3``), containers are
    re-encoded as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format(value, ".15g")
    if isinstance(value, (dict, list)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError):
            return COMPLEX_VALUE_PLACEHOLDER
    return str(value)


@dataclass
class LookupTable:
    """Three independent indices over a set of Records."""

    by_id: dict[str, Record] = field(default_factory=dict)
    by_idx: dict[int, Record] = field(default_factory=dict)
    by_name: dict[str, Record] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        """True if any index holds at least one Record."""
        return bool(self.by_id or self.by_idx or self.by_name)

    def add(self, record: Record) -> None:
        """Index ``record`` under every lookup key it carries.

        Key fields are tried in exact case first, then one variant
        (``id``/``Id``, ``idx``/``Idx``, ``Name``/``name``). An ``idx`` that is
        not an integer is ignored for indexing.
        """
        record_id = _field_variant(record, "id", "Id")
        idx = _field_variant(record, "idx", "Idx")
        name = _field_variant(record, "Name", "name")

        if record_id is not None:
            self.by_id[stringify_value(record_id)] = record
        if idx is not None:
            idx_text = stringify_value(idx)
            if is_int_text(idx_text):
                self.by_idx[int(idx_text)] = record
        if name is not None:
            self.by_name[stringify_value(name)] = record

    def to_dict(self) -> dict[str, dict[str, Record]]:
        """Convert to a JSON-serializable dictionary (idx keys as strings)."""
        return {
            "by_id": dict(self.by_id),
            "by_idx": {str(k): v for k, v in self.by_idx.items()},
            "by_name": dict(self.by_name),
        }


def _field_variant(record: Record, *variants: str) -> Any:
    for name in variants:
        value = record.get(name)
        if value is not None:
            return value
    return None
