"""
This package contains the decoders for the binary history files written by
the GaggiMate controller.

Sub-packages handle specific file formats:

- ``index``: The shot index (``index.bin``) summarizing recorded shots.
- ``shot``: Per-shot telemetry logs (``.slog``).
"""
from gaggimate.parsing.index import IndexData, ShotListItem, decode_index, index_to_shot_list
from gaggimate.parsing.shot import ShotRecord, decode_shot

__all__ = ["IndexData", "ShotListItem", "decode_index", "index_to_shot_list", "ShotRecord", "decode_shot"]
