"""Merger: fold one LookupTable into a running aggregate.

Overwrite happens per index entry, never per field. A later source's Record
replaces an earlier Record stored under the same key in that index only, so
``by_id`` and ``by_idx`` may end up pointing at different Records.
"""

from sdtmacro.lookup.table import LookupTable


def merge(aggregate: LookupTable | None, table: LookupTable | None) -> None:
    """Copy every entry of ``table`` into ``aggregate`` (last writer wins)."""
    if aggregate is None or table is None or not table.has_data:
        return

    aggregate.by_id.update(table.by_id)
    aggregate.by_idx.update(table.by_idx)
    aggregate.by_name.update(table.by_name)
