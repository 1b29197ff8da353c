# src/hostswitch/sync/remote.py
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from hostswitch.config import Settings
from hostswitch.errors import FetchFailed, WriteFailed
from hostswitch.profiles.state import StateStore, SyncState
from hostswitch.profiles.store import ProfileStore

logger = logging.getLogger(__name__)

DOWNLOAD_TMP = "SAFE.download.tmp"
CHUNK_SIZE = 64 * 1024


@dataclass
class SyncResult:
    due: bool
    fetched: bool = False
    changed: bool = False
    error: Optional[str] = None


class RemoteSync:
    """Keeps the SAFE profile in step with the upstream block list."""

    def __init__(
        self,
        settings: Settings,
        store: ProfileStore,
        state_store: StateStore,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.store = store
        self.state_store = state_store
        self.session = session or requests.Session()
        self.clock = clock

    @property
    def _tmp_path(self) -> Path:
        return self.settings.cache_dir / DOWNLOAD_TMP

    def _now(self) -> int:
        return int(self.clock())

    # -------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------
    def refresh_if_due(self) -> SyncResult:
        state = self.state_store.load()
        now = self._now()
        age = now - state.last_check
        if age < self.settings.check_interval_seconds:
            logger.debug("SAFE checked %ss ago; next check in %ss", age, self.settings.check_interval_seconds - age)
            return SyncResult(due=False)

        # Advance first so a failing upstream is not hammered by every refresh.
        state.last_check = now
        self.state_store.save(state, "last_check")

        try:
            changed = self._fetch_and_replace(state)
        except FetchFailed as e:
            self._log_fetch_failure(e)
            return SyncResult(due=True, error=str(e))

        return SyncResult(due=True, fetched=True, changed=changed)

    def force_refresh(self) -> bool:
        """Fetch SAFE now. Returns True when its content was replaced."""
        state = self.state_store.load()
        changed = False
        try:
            changed = self._fetch_and_replace(state)
        except FetchFailed as e:
            self._log_fetch_failure(e)
        finally:
            state.last_check = self._now()
            self.state_store.save(state, "last_check")
        return changed

    # -------------------------------------------------------------------
    # Fetch + conditional replace
    # -------------------------------------------------------------------
    def _fetch_and_replace(self, state: SyncState) -> bool:
        tmp = self._tmp_path
        try:
            last_modified = self._download(tmp)

            if last_modified:
                state.upstream_last_modified = last_modified
                self.state_store.save(state, "upstream_last_modified")

            try:
                new_body = tmp.read_bytes()
            except OSError as e:
                raise WriteFailed(f"cannot read {tmp}: {e}") from e

            safe_path = self.store.safe_path
            try:
                current = self.store.read(safe_path)
            except FileNotFoundError:
                current = None
            except OSError as e:
                raise WriteFailed(f"cannot read {safe_path}: {e}") from e

            if current == new_body:
                logger.debug("SAFE unchanged upstream (%d bytes)", len(new_body))
                return False

            self.store.write(safe_path, new_body)
            logger.info("✅ SAFE profile updated from %s (%d bytes)", self.settings.safe_url, len(new_body))
            return True
        finally:
            try:
                tmp.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove %s: %s", tmp, e)

    def _download(self, tmp: Path) -> Optional[str]:
        """GET the upstream list into ``tmp``; return its Last-Modified header, if any."""
        try:
            tmp.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteFailed(f"cannot create {tmp.parent}: {e}") from e

        try:
            with self.session.get(self.settings.safe_url, timeout=self.settings.fetch_timeout, stream=True) as r:
                r.raise_for_status()
                last_modified = r.headers.get("Last-Modified")
                self._write_body(r, tmp)
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise FetchFailed(f"HTTP {status_code} from {self.settings.safe_url}", status_code=status_code) from e
        except requests.RequestException as e:
            raise FetchFailed(f"cannot reach {self.settings.safe_url}: {e}") from e

        return last_modified.strip() if last_modified else None

    @staticmethod
    def _write_body(response: requests.Response, tmp: Path) -> None:
        try:
            with open(tmp, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise WriteFailed(f"cannot write {tmp}: {e}") from e

    @staticmethod
    def _log_fetch_failure(e: FetchFailed) -> None:
        kind = "upstream returned an error" if e.is_http_error else "network unreachable"
        logger.warning("⚠️ SAFE sync skipped (%s): %s", kind, e)


def describe(result: SyncResult) -> str:
    """Short human summary of a sync result, for the CLI."""
    if not result.due:
        return "not due"
    if result.error:
        return f"fetch failed: {result.error}"
    return "SAFE updated" if result.changed else "SAFE unchanged"
