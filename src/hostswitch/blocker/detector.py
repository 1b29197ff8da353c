# src/hostswitch/blocker/detector.py
import logging
from pathlib import Path
from typing import Optional

from hostswitch.profiles.store import Profile, ProfileStore

logger = logging.getLogger(__name__)


def _read_or_none(path: Path) -> Optional[bytes]:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None


def detect_active(store: ProfileStore, hosts_path: Path) -> Optional[Profile]:
    """
    Returns the first listed profile whose bytes equal the live hosts file,
    or None when the live file matches nothing (custom).

    If two profiles share the same content, the winner is simply the one that
    sorts first by file name; that choice carries no meaning.
    """
    live = _read_or_none(hosts_path)
    if live is None:
        return None

    for profile in store.list_profiles():
        if _read_or_none(profile.path) == live:
            return profile
    return None


def is_active(profile_path: Path, hosts_path: Path) -> bool:
    live = _read_or_none(hosts_path)
    return live is not None and _read_or_none(profile_path) == live
