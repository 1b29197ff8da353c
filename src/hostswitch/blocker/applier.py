# src/hostswitch/blocker/applier.py
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from hostswitch.blocker.backup_helper import backup_path_for
from hostswitch.blocker.privilege import PrivilegedCommandError, PrivilegedRunner, SudoRunner
from hostswitch.config import Settings
from hostswitch.errors import ApplyError, BackupFailed, InstallFailed, PrivilegeDenied
from hostswitch.profiles.state import StateStore, SyncState

logger = logging.getLogger(__name__)


class Applier:
    """Backs up the live hosts file and installs a profile over it.

    Steps are not transactional. If the install fails, the backup made just
    before it stays on disk for manual recovery.
    """

    def __init__(
        self,
        settings: Settings,
        state_store: StateStore,
        runner: Optional[PrivilegedRunner] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.state_store = state_store
        self.runner = runner or SudoRunner()
        self.now = now

    def apply(self, profile_path: Path) -> Optional[Path]:
        """
        Install ``profile_path`` as the live hosts file.

        Returns the backup path, or None when the source is not a regular file
        (a silent no-op). Raises PrivilegeDenied, BackupFailed or InstallFailed;
        each failure is also appended to the persisted last error.
        """
        src = Path(profile_path)
        if not src.is_file():
            logger.info("Profile %s does not exist; nothing to apply", src)
            return None

        state = self.state_store.load()
        state.clear_error()
        self.state_store.save(state, "last_error")

        hosts_path = self.settings.hosts_path
        backup = backup_path_for(self.settings.backups_dir, self.now())

        self._step(state, PrivilegeDenied, self.runner.validate)
        self._step(state, BackupFailed, self.runner.copy, hosts_path, backup)
        logger.info("Backed up %s to %s", hosts_path, backup)
        self._step(state, InstallFailed, self.runner.install, src, hosts_path)

        state.clear_error()
        self.state_store.save(state, "last_error")
        logger.info("✅ Installed %s as %s", src.name, hosts_path)
        return backup

    def _step(self, state: SyncState, error_cls: type[ApplyError], fn, *args) -> None:
        try:
            fn(*args)
        except (PrivilegedCommandError, OSError) as e:
            diagnostic = str(e) or f"{error_cls.step} failed"
            state.append_error(diagnostic)
            self.state_store.save(state, "last_error")
            logger.error("❌ %s step failed: %s", error_cls.step, diagnostic)
            raise error_cls(diagnostic) from e
