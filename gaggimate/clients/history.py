"""
HTTP client for the shot history served by a GaggiMate controller.

The controller exposes its history files as static binaries under
``/api/history``: ``index.bin`` for the shot index and ``NNNNNN.slog`` (the
shot ID zero-padded to six digits) for each shot. Decoding and analysis are
delegated to ``gaggimate.parsing`` and ``gaggimate.analysis``.
"""
from __future__ import annotations

from typing import Optional

import requests

from gaggimate.analysis import TransformedShot, analyze_shot
from gaggimate.config import Settings, get_settings
from gaggimate.logging import create_logger, get_ring_handler
from gaggimate.parsing.index import ShotListItem, decode_index, index_to_shot_list
from gaggimate.parsing.shot import ShotRecord, decode_shot

SHOT_ID_WIDTH = 6


class HistoryRequestError(Exception):
    """Raised when the controller cannot be reached or answers with an error."""
    pass


class HistoryClient:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.logger = create_logger(ring_size=self.settings.log_ring_size, level=self.settings.log_level)

    @property
    def base_url(self) -> str:
        return self.settings.history_url

    def events(self) -> list[dict]:
        handler = get_ring_handler(self.logger)
        return handler.get_events() if handler else []

    # ---- helpers ----
    def _get_bytes(self, path: str) -> Optional[bytes]:
        url = f"{self.base_url}/{path}"
        try:
            response = requests.get(
                url=url,
                headers={"Accept": "application/octet-stream"},
                timeout=self.settings.request_timeout,
            )
        except requests.Timeout as exc:
            raise HistoryRequestError(f"Request timeout: No response from GaggiMate at {self.settings.host}") from exc
        except requests.RequestException as exc:
            raise HistoryRequestError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            self.logger.info("history_not_found", extra={"details": {"url": url}})
            return None
        if response.status_code != 200:
            raise HistoryRequestError(f"HTTP {response.status_code}: {response.reason}")
        self.logger.debug("history_fetched", extra={"details": {"url": url, "bytes": len(response.content)}})
        return response.content

    # ---- index ----
    def fetch_index_bytes(self) -> Optional[bytes]:
        return self._get_bytes("index.bin")

    def list_shots(self, limit: Optional[int] = None, offset: Optional[int] = None) -> list[ShotListItem]:
        """
        Fetch and decode the shot index, most recent shot first.

        A controller without an index yet has an empty history. ``offset`` is
        applied before ``limit``; non-positive values are ignored.
        """
        raw = self.fetch_index_bytes()
        if raw is None:
            self.logger.info("history_empty", extra={"details": {"host": self.settings.host}})
            return []
        shots = index_to_shot_list(decode_index(raw))
        if offset is not None and offset > 0:
            shots = shots[offset:]
        if limit is not None and limit > 0:
            shots = shots[:limit]
        return shots

    # ---- shots ----
    def fetch_shot_bytes(self, shot_id: str) -> Optional[bytes]:
        return self._get_bytes(f"{str(shot_id).zfill(SHOT_ID_WIDTH)}.slog")

    def fetch_shot(self, shot_id: str) -> Optional[ShotRecord]:
        raw = self.fetch_shot_bytes(shot_id)
        if raw is None:
            return None
        return decode_shot(raw, str(shot_id))

    def get_shot(self, shot_id: str, include_full_curve: bool = False) -> Optional[TransformedShot]:
        shot = self.fetch_shot(shot_id)
        if shot is None:
            return None
        return analyze_shot(shot, include_full_curve=include_full_curve)


__all__ = ["HistoryClient", "HistoryRequestError", "SHOT_ID_WIDTH"]
