"""
Decoder for the binary shot index (``index.bin``).

Layout, little-endian throughout::

    header (32 bytes)
        magic u32 @0 ("SIDX"), version u16 @4, entry_size u16 @6,
        entry_count u32 @8, next_id u32 @12
    entry (128 bytes each, immediately after the header)
        id u32 @0, timestamp u32 @4, duration u32 @8, volume u16 @12,
        rating u8 @14, flags u8 @15, profile_id[32] @16, profile_name[48] @48
"""
from __future__ import annotations

from gaggimate.core.binary import decode_cstring, get_bit, read_u8, read_u16, read_u32, scaled_or_none
from gaggimate.core.errors import FormatError, MagicMismatchError, TruncatedError, UnsupportedEntrySizeError
from gaggimate.parsing.index.model import IndexData, IndexEntry, IndexHeader, ShotListItem

INDEX_HEADER_SIZE = 32
INDEX_ENTRY_SIZE = 128
INDEX_MAGIC = 0x58444953  # "SIDX"

# Flag byte bits.
FLAG_COMPLETED_BIT = 0
FLAG_DELETED_BIT = 1
FLAG_HAS_NOTES_BIT = 2

VOLUME_SCALE = 10

PROFILE_ID_OFFSET = 16
PROFILE_ID_SIZE = 32
PROFILE_NAME_OFFSET = 48
PROFILE_NAME_SIZE = 48


def _decode_entry(data: bytes, base: int) -> IndexEntry:
    flags = read_u8(data, base + 15)
    completed = get_bit(flags, FLAG_COMPLETED_BIT)
    profile_id_start = base + PROFILE_ID_OFFSET
    profile_name_start = base + PROFILE_NAME_OFFSET
    return IndexEntry(
        id=read_u32(data, base),
        timestamp=read_u32(data, base + 4),
        duration=read_u32(data, base + 8),
        volume=scaled_or_none(read_u16(data, base + 12), VOLUME_SCALE),
        rating=read_u8(data, base + 14),
        flags=flags,
        profile_id=decode_cstring(data[profile_id_start: profile_id_start + PROFILE_ID_SIZE]),
        profile_name=decode_cstring(data[profile_name_start: profile_name_start + PROFILE_NAME_SIZE]),
        completed=completed,
        deleted=get_bit(flags, FLAG_DELETED_BIT),
        has_notes=get_bit(flags, FLAG_HAS_NOTES_BIT),
        incomplete=not completed,
    )


def decode_index(buffer: bytes) -> IndexData:
    """
    Decode a complete ``index.bin`` buffer.

    Args:
        buffer: The raw file contents. It is only read, never modified.

    Returns:
        The decoded header and entries in on-disk order.

    Raises:
        FormatError: The buffer is shorter than the 32-byte header.
        MagicMismatchError: The file does not start with the ``SIDX`` signature.
        UnsupportedEntrySizeError: The header declares an entry width other than 128.
        TruncatedError: The buffer cannot hold the declared number of entries.
    """
    data = bytes(buffer)
    if len(data) < INDEX_HEADER_SIZE:
        raise FormatError("Index file too small")

    magic = read_u32(data, 0)
    if magic != INDEX_MAGIC:
        raise MagicMismatchError("index", magic, INDEX_MAGIC)

    header = IndexHeader(
        magic=magic,
        version=read_u16(data, 4),
        entry_size=read_u16(data, 6),
        entry_count=read_u32(data, 8),
        next_id=read_u32(data, 12),
    )
    if header.entry_size != INDEX_ENTRY_SIZE:
        raise UnsupportedEntrySizeError(header.entry_size, INDEX_ENTRY_SIZE)

    expected_size = INDEX_HEADER_SIZE + header.entry_count * INDEX_ENTRY_SIZE
    if len(data) < expected_size:
        raise TruncatedError(len(data), expected_size)

    entries = tuple(
        _decode_entry(data, INDEX_HEADER_SIZE + i * INDEX_ENTRY_SIZE)
        for i in range(header.entry_count)
    )
    return IndexData(header=header, entries=entries)


def index_to_shot_list(index_data: IndexData) -> list[ShotListItem]:
    """
    Build the history list shown to callers.

    Deleted entries are dropped and the rest are ordered most recent first.
    ``sorted`` is stable, so shots sharing a timestamp keep their index order.
    """
    items = [
        ShotListItem(
            id=str(entry.id),
            profile=entry.profile_name,
            profile_id=entry.profile_id,
            timestamp=entry.timestamp,
            duration=entry.duration,
            # Sample counts live in the .slog file, not in the index.
            samples=0,
            volume=entry.volume,
            rating=entry.rating if entry.rating > 0 else None,
            incomplete=entry.incomplete,
        )
        for entry in index_data.entries
        if not entry.deleted
    ]
    return sorted(items, key=lambda item: item.timestamp, reverse=True)
