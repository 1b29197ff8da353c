# src/hostswitch/profiles/state.py
"""Persisted state shared between single-shot runs.

Three small files in the cache directory stand in for process memory:

- ``last_check_epoch``: epoch seconds of the last SAFE sync attempt
- ``upstream_last_modified.txt``: the upstream ``Last-Modified`` header
- ``last_error.txt``: diagnostic text of the last failed apply

A missing file means the field is unset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hostswitch.errors import WriteFailed
from hostswitch.profiles.store import atomic_write

logger = logging.getLogger(__name__)

LAST_CHECK_FILE = "last_check_epoch"
UPSTREAM_LASTMOD_FILE = "upstream_last_modified.txt"
LAST_ERROR_FILE = "last_error.txt"


@dataclass
class SyncState:
    last_check: int = 0
    upstream_last_modified: Optional[str] = None
    last_error: Optional[str] = None

    def append_error(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        self.last_error = f"{self.last_error}\n{text}" if self.last_error else text

    def clear_error(self) -> None:
        self.last_error = None

    @property
    def last_error_line(self) -> Optional[str]:
        if not self.last_error:
            return None
        lines = [ln.strip() for ln in self.last_error.splitlines() if ln.strip()]
        return lines[-1] if lines else None


class StateStore:
    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def _path(self, name: str) -> Path:
        return self.cache_dir / name

    def _read_text(self, name: str) -> Optional[str]:
        try:
            text = self._path(name).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read %s: %s", name, e)
            return None
        text = text.strip()
        return text or None

    def load(self) -> SyncState:
        raw_epoch = self._read_text(LAST_CHECK_FILE)
        try:
            last_check = int(raw_epoch) if raw_epoch else 0
        except ValueError:
            logger.debug("Malformed %s: %r", LAST_CHECK_FILE, raw_epoch)
            last_check = 0

        return SyncState(
            last_check=last_check,
            upstream_last_modified=self._read_text(UPSTREAM_LASTMOD_FILE),
            last_error=self._read_text(LAST_ERROR_FILE),
        )

    def save(self, state: SyncState, *fields: str) -> None:
        """Persist ``state``. With ``fields`` given, only those fields are written."""
        values = {
            "last_check": (LAST_CHECK_FILE, str(state.last_check) if state.last_check else None),
            "upstream_last_modified": (UPSTREAM_LASTMOD_FILE, state.upstream_last_modified),
            "last_error": (LAST_ERROR_FILE, state.last_error),
        }
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            for field_name in fields or values:
                name, value = values[field_name]
                self._write(name, value)
        except OSError as e:
            raise WriteFailed(f"cannot save state in {self.cache_dir}: {e}") from e

    def _write(self, name: str, value: Optional[str]) -> None:
        path = self._path(name)
        if value is None:
            path.unlink(missing_ok=True)
            return
        atomic_write(path, f"{value}\n".encode("utf-8"))
