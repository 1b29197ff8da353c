# src/hostswitch/blocker/privilege.py
"""Privileged file operations for installing a hosts file.

``SudoRunner`` shells out to ``sudo``; the applier only needs something with
``validate``, ``copy`` and ``install`` so tests can pass a runner that
works without root.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Protocol

from hostswitch.config import SYSTEM

logger = logging.getLogger(__name__)

ROOT_GROUP = "wheel" if SYSTEM == "Darwin" else "root"
INSTALL_MODE = "644"
INSTALL_TMP_NAME = ".hosts.hostswitch.tmp"


class PrivilegedCommandError(Exception):
    def __init__(self, argv: List[str], returncode: int, stderr: str):
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self.stderr or f"{' '.join(argv)} exited with {returncode}")


class PrivilegedRunner(Protocol):
    def validate(self) -> None: ...

    def copy(self, src: Path, dst: Path) -> None: ...

    def install(self, src: Path, dst: Path) -> None: ...


class SudoRunner:
    def __init__(self, sudo: str = "sudo"):
        self.sudo = sudo

    def _run(self, *args: str) -> None:
        argv = [self.sudo, *args]
        logger.debug("Running %s", " ".join(argv))
        try:
            proc = subprocess.run(argv, capture_output=True, text=True)
        except OSError as e:
            raise PrivilegedCommandError(argv, -1, str(e)) from e
        if proc.returncode != 0:
            raise PrivilegedCommandError(argv, proc.returncode, proc.stderr)

    def validate(self) -> None:
        """Refresh the sudo credential; may prompt and block until answered."""
        self._run("-v")

    def copy(self, src: Path, dst: Path) -> None:
        self._run("cp", "-p", str(src), str(dst))

    def install(self, src: Path, dst: Path) -> None:
        """Install ``src`` as root:<group> 0644 next to ``dst``, then rename it into place."""
        tmp = Path(dst).parent / INSTALL_TMP_NAME
        self._run("/usr/bin/install", "-m", INSTALL_MODE, "-o", "root", "-g", ROOT_GROUP, str(src), str(tmp))
        try:
            self._run("mv", "-f", str(tmp), str(dst))
        except PrivilegedCommandError:
            try:
                self._run("rm", "-f", str(tmp))
            except PrivilegedCommandError as e:
                logger.warning("Could not remove %s: %s", tmp, e)
            raise
