from gaggimate.analysis import TransformedShot, analyze_shot
from gaggimate.clients import HistoryClient, HistoryRequestError
from gaggimate.config import Settings, get_settings
from gaggimate.core.errors import (
    FormatError,
    MagicMismatchError,
    ShotLogError,
    TruncatedError,
    UnsupportedEntrySizeError,
    UnsupportedVersionError,
)
from gaggimate.parsing import IndexData, ShotListItem, ShotRecord, decode_index, decode_shot, index_to_shot_list
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "TransformedShot",
    "analyze_shot",
    "HistoryClient",
    "HistoryRequestError",
    "Settings",
    "get_settings",
    "FormatError",
    "MagicMismatchError",
    "ShotLogError",
    "TruncatedError",
    "UnsupportedEntrySizeError",
    "UnsupportedVersionError",
    "IndexData",
    "ShotListItem",
    "ShotRecord",
    "decode_index",
    "decode_shot",
    "index_to_shot_list",
]

try:
    __version__ = version("gaggimate")
except PackageNotFoundError:
    __version__ = "0.0.0"
