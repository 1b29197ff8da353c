# src/hostswitch/blocker/backup_helper.py
from datetime import datetime
from pathlib import Path
from typing import Optional

BACKUP_PREFIX = "hosts.hostswitch.backup."


def backup_path_for(backup_dir: Path, now: Optional[datetime] = None) -> Path:
    """Timestamped destination for a pre-install copy of the hosts file.

    A numeric suffix is added when a backup from the same second already exists.
    """
    now = now or datetime.now()
    base = Path(backup_dir) / f"{BACKUP_PREFIX}{now:%Y%m%d%H%M%S}"
    path = base
    n = 1
    while path.exists():
        path = base.with_name(f"{base.name}.{n}")
        n += 1
    return path
