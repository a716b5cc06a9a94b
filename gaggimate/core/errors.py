"""
Exceptions raised while decoding GaggiMate history files.

Every decode failure is fatal for the buffer being decoded. A shot log whose
sample stream is shorter than its header promises is *not* an error: the
decoder returns the complete rows it found and flags the record as
``incomplete``.
"""
from __future__ import annotations


class ShotLogError(ValueError):
    """Base class for all history file decode failures."""
    pass


class FormatError(ShotLogError):
    """The buffer is too small for the header it must contain."""
    pass


class UnsupportedVersionError(FormatError):
    """The buffer is too small for the header width its version declares."""
    pass


class MagicMismatchError(ShotLogError):
    """The 4-byte signature does not identify the expected file type."""

    def __init__(self, kind: str, actual: int, expected: int) -> None:
        self.kind = kind
        self.actual = actual
        self.expected = expected
        super().__init__(f"Invalid {kind} magic: 0x{actual:x} (expected 0x{expected:x})")


class UnsupportedEntrySizeError(ShotLogError):
    """The index header declares an entry width this decoder does not implement."""

    def __init__(self, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(f"Unsupported entry size {actual} (expected {expected})")


class TruncatedError(ShotLogError):
    """The index file cannot hold the number of entries its header declares."""

    def __init__(self, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(f"Index file truncated: {actual} bytes (expected {expected})")
