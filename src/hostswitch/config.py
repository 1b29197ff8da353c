# src/hostswitch/config.py

import os
import platform
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

APP_ID = "xbar-hosts-switcher"

SYSTEM = platform.system()

HOSTS_PATH = Path("/etc/hosts")
SAFE_URL = "https://raw.githubusercontent.com/StevenBlack/hosts/master/hosts"

SAFE_BASENAME = "SAFE.hosts"
UNSAFE_BASENAME = "UNSAFE.hosts"

CHECK_INTERVAL_SECONDS = 6 * 60 * 60
FETCH_TIMEOUT_SECONDS = 30


class Settings(BaseModel):
    config_dir: Path
    cache_dir: Path
    hosts_path: Path = HOSTS_PATH
    backup_dir: Optional[Path] = None
    safe_url: str = SAFE_URL
    check_interval_seconds: int = Field(default=CHECK_INTERVAL_SECONDS, ge=0)
    fetch_timeout: float = Field(default=FETCH_TIMEOUT_SECONDS, gt=0)

    @property
    def profiles_dir(self) -> Path:
        return self.config_dir / "profiles"

    @property
    def backups_dir(self) -> Path:
        """Where pre-install copies of the hosts file go (next to it unless overridden)."""
        return self.backup_dir if self.backup_dir is not None else self.hosts_path.parent

    @property
    def safe_path(self) -> Path:
        return self.profiles_dir / SAFE_BASENAME

    @property
    def unsafe_path(self) -> Path:
        return self.profiles_dir / UNSAFE_BASENAME


def _xdg_dir(var: str, fallback: str) -> Path:
    base = os.getenv(var) or str(Path.home() / fallback)
    return Path(base) / APP_ID


def load_settings() -> Settings:
    """Build settings from the environment (and any .env picked up at import)."""
    values = {
        "config_dir": _xdg_dir("XDG_CONFIG_HOME", ".config"),
        "cache_dir": _xdg_dir("XDG_CACHE_HOME", ".cache"),
    }

    overrides = {
        "hosts_path": "HOSTSWITCH_HOSTS_PATH",
        "backup_dir": "HOSTSWITCH_BACKUP_DIR",
        "safe_url": "HOSTSWITCH_SAFE_URL",
        "check_interval_seconds": "HOSTSWITCH_CHECK_INTERVAL",
        "fetch_timeout": "HOSTSWITCH_FETCH_TIMEOUT",
    }
    for field_name, env_var in overrides.items():
        raw = os.getenv(env_var)
        if raw:
            values[field_name] = raw

    return Settings(**values)
