"""
Decoder for the GaggiMate shot index (``index.bin``, signature ``SIDX``).

The index is a fixed-size header followed by fixed-width summary entries, one
per recorded shot. It is what the history list is built from; the full sample
stream of each shot lives in its own ``.slog`` file.
"""
from gaggimate.parsing.index.decode import (
    decode_index,
    index_to_shot_list,
    INDEX_ENTRY_SIZE,
    INDEX_HEADER_SIZE,
    INDEX_MAGIC,
)
from gaggimate.parsing.index.model import IndexData, IndexEntry, IndexHeader, ShotListItem

__all__ = [
    "decode_index",
    "index_to_shot_list",
    "INDEX_ENTRY_SIZE",
    "INDEX_HEADER_SIZE",
    "INDEX_MAGIC",
    "IndexData",
    "IndexEntry",
    "IndexHeader",
    "ShotListItem",
]
