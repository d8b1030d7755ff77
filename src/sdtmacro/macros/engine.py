"""Macro engine: rewrite a display format string from a lookup table.

Macro grammar (``~`` is the only delimiter):

    ~e<id>~<field>~[<func>~[<arg>~]]      lookup by record id
    ~i<idx>~<field>~[<func>~[<arg>~]]     lookup by integer idx
    ~n<name>~<field>~[<func>~[<arg>~]]    lookup by Name (case-sensitive)

Scanning rules:
    - A candidate starts at ``~`` followed by ``e``, ``i`` or ``n``.
    - Key and field must both be closed by ``~``; otherwise the candidate is
      abandoned and scanning continues.
    - Text after the field counts as a function only if it is a known
      function name closed by ``~``. Unknown text stays literal and the macro
      ends at the field's closing ``~``:
          "~eTempA~Value~text~" -> "23.5text~"
    - After a known function, the next ``~``-closed text is its argument.
    - Unresolved macros (unknown record or field) are left as-is.
"""

import logging
import re
from dataclasses import dataclass

from sdtmacro.lookup import LookupTable, Record, is_int_text, stringify_value
from sdtmacro.macros.functions import MacroFunction, apply_function

logger = logging.getLogger(__name__)

DELIMITER = "~"
MACRO_TYPES = frozenset("ein")

# Cheap pre-check: at least one complete "~<type><key>~<field>~" candidate.
CANDIDATE_REGEX = re.compile(r"~[ein][^~]+~[^~]+~")


@dataclass
class Macro:
    """One parsed macro occurrence in a format string."""

    start: int
    end: int  # Index of the macro's final delimiter
    type: str
    key: str
    field: str
    function: MacroFunction | None = None
    argument: str | None = None

    def text(self, fmt: str) -> str:
        """The macro's literal span in ``fmt``."""
        return fmt[self.start:self.end + 1]


def contains_macros(fmt: str) -> bool:
    """True if ``fmt`` holds something shaped like a macro."""
    return CANDIDATE_REGEX.search(fmt) is not None


def lookup_record(table: LookupTable, macro_type: str, key: str) -> Record | None:
    """Resolve a macro key against the index selected by ``macro_type``."""
    if macro_type == "e":
        return table.by_id.get(key)
    if macro_type == "i":
        if not is_int_text(key):
            return None
        return table.by_idx.get(int(key))
    if macro_type == "n":
        return table.by_name.get(key)
    return None


def get_field_value(record: Record, field: str):
    """Return ``record[field]``, falling back to a case-insensitive match.

    A field holding ``None`` counts as absent.
    """
    if not field:
        return None
    if field in record:
        return record[field]

    wanted = field.lower()
    for name, value in record.items():
        if name.lower() == wanted:
            return value
    return None


def _parse_at(fmt: str, start: int) -> tuple[Macro | None, int]:
    """Try to parse a macro whose opening delimiter is at ``start``.

    Returns the macro (or None) and the position to resume scanning from
    when no macro could be parsed.
    """
    macro_type = fmt[start + 1:start + 2]
    if macro_type not in MACRO_TYPES:
        return None, start + 1

    key_end = fmt.find(DELIMITER, start + 2)
    if key_end < 0:
        return None, start + 1

    field_end = fmt.find(DELIMITER, key_end + 1)
    if field_end < 0:
        return None, key_end + 1

    macro = Macro(
        start=start,
        end=field_end,
        type=macro_type,
        key=fmt[start + 2:key_end],
        field=fmt[key_end + 1:field_end],
    )

    func_end = fmt.find(DELIMITER, field_end + 1)
    if func_end >= 0:
        function = MacroFunction.lookup(fmt[field_end + 1:func_end])
        if function is not None:
            macro.function = function
            macro.end = func_end

            arg_end = fmt.find(DELIMITER, func_end + 1)
            if arg_end >= 0:
                macro.argument = fmt[func_end + 1:arg_end]
                macro.end = arg_end

    return macro, macro.end + 1


def render(fmt: str, table: LookupTable | None) -> str:
    """Replace every resolvable macro in ``fmt`` with its value.

    Args:
        fmt: Display format string
        table: Aggregate to resolve macros against

    Returns:
        The rewritten string (``fmt`` unchanged when ``table`` is None)
    """
    if table is None or not fmt:
        return fmt

    out = fmt
    pos = 0
    replacements: list[str] = []

    while True:
        start = out.find(DELIMITER, pos)
        if start < 0:
            break

        macro, resume = _parse_at(out, start)
        if macro is None:
            pos = resume
            continue

        record = lookup_record(table, macro.type, macro.key)
        value = get_field_value(record, macro.field) if record is not None else None
        if value is None:
            pos = resume
            continue

        whole = macro.text(out)
        replacement = apply_function(stringify_value(value), macro.function, macro.argument)
        out = out[:macro.start] + replacement + out[macro.end + 1:]
        pos = macro.start + len(replacement)

        if logger.isEnabledFor(logging.DEBUG):
            replacements.append(f"{whole} -> {replacement}")

    if replacements:
        logger.debug("Macro replacements: %s", ", ".join(replacements))

    return out
