"""Error types raised by the profile store, the SAFE sync and the applier.

``FetchFailed`` is the only non-fatal one: the sync swallows it and tries
again on the next interval. ``ApplyError`` subclasses are fatal to the
current apply and are persisted as the last error for the menu to show.
"""

from __future__ import annotations

from typing import Optional


class HostSwitchError(Exception):
    """Base class for all hostswitch errors."""


class FetchFailed(HostSwitchError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_http_error(self) -> bool:
        return self.status_code is not None


class WriteFailed(HostSwitchError):
    """A local file could not be written (profile, state or temp download)."""


class ProfileMissing(HostSwitchError):
    """The requested profile path is not a regular file inside the profiles directory."""


class ApplyError(HostSwitchError):
    step = "apply"

    def __init__(self, diagnostic: str = ""):
        self.diagnostic = diagnostic.strip()
        super().__init__(self.diagnostic or f"{self.step} failed")


class PrivilegeDenied(ApplyError):
    step = "sudo"


class BackupFailed(ApplyError):
    step = "backup"


class InstallFailed(ApplyError):
    step = "install"
