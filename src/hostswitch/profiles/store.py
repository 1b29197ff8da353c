# src/hostswitch/profiles/store.py
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from hostswitch.config import SAFE_BASENAME, UNSAFE_BASENAME, Settings
from hostswitch.errors import ProfileMissing, WriteFailed

logger = logging.getLogger(__name__)

UNSAFE_DEFAULT = b"""##
# Minimal macOS hosts file
##
127.0.0.1 localhost
255.255.255.255 broadcasthost
::1 localhost
"""

SAFE_PLACEHOLDER = b"""# SAFE profile placeholder.
# It will be replaced by StevenBlack on first successful fetch.
127.0.0.1 localhost
"""

LABELS = {
    SAFE_BASENAME: ("safe", "SAFE (StevenBlack)"),
    UNSAFE_BASENAME: ("unsafe", "UNSAFE (minimal)"),
}


@dataclass(frozen=True)
class Profile:
    path: Path
    name: str
    kind: str
    label: str

    @property
    def is_safe(self) -> bool:
        return self.kind == "safe"

    @property
    def is_unsafe(self) -> bool:
        return self.kind == "unsafe"


def atomic_write(path: Path, content: bytes) -> None:
    """Replace ``path`` with ``content`` so readers see either the old or the new bytes."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class ProfileStore:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.profiles_dir = settings.profiles_dir

    @property
    def safe_path(self) -> Path:
        return self.settings.safe_path

    @property
    def unsafe_path(self) -> Path:
        return self.settings.unsafe_path

    def ensure_defaults(self) -> None:
        """Create the directories and the built-in profiles. Existing files are left alone."""
        try:
            self.profiles_dir.mkdir(parents=True, exist_ok=True)
            self.settings.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteFailed(f"cannot create {self.profiles_dir}: {e}") from e

        for path, body in ((self.unsafe_path, UNSAFE_DEFAULT), (self.safe_path, SAFE_PLACEHOLDER)):
            if not path.is_file():
                logger.info("Creating default profile %s", path.name)
                self.write(path, body)

    def list_profiles(self) -> Iterator[Profile]:
        """Regular, non-hidden files of the profiles directory, by file name.

        Each call returns a new generator, so the listing can be restarted.
        """
        try:
            entries = sorted(os.scandir(self.profiles_dir), key=lambda e: e.name)
        except FileNotFoundError:
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if not entry.is_file():
                continue
            yield self.profile_for(Path(entry.path))

    def profile_for(self, path: Path) -> Profile:
        path = Path(path)
        kind, label = LABELS.get(path.name, ("user", path.name))
        if path.parent != self.profiles_dir:
            kind, label = "user", path.name
        return Profile(path=path, name=path.name, kind=kind, label=label)

    def resolve(self, path) -> Optional[Path]:
        """Return ``path`` as a profile path if it names a regular file in the profiles dir."""
        try:
            return self.require(path)
        except ProfileMissing as e:
            logger.debug("Ignoring profile path: %s", e)
            return None

    def require(self, path) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.profiles_dir / candidate
        try:
            resolved_dir = self.profiles_dir.resolve()
            if candidate.parent.resolve() != resolved_dir:
                raise ProfileMissing(f"{path} is outside {self.profiles_dir}")
        except (OSError, ValueError) as e:
            raise ProfileMissing(f"{path}: {e}") from e
        if candidate.name.startswith(".") or not candidate.is_file():
            raise ProfileMissing(f"{path} is not a profile file")
        return self.profiles_dir / candidate.name

    def read(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write(self, path: Path, content: bytes) -> None:
        try:
            atomic_write(Path(path), content)
        except OSError as e:
            raise WriteFailed(f"cannot write {path}: {e}") from e
