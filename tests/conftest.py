"""Shared fixtures: settings rooted in a temp dir, a fake HTTP session and a
fake privileged runner, so no test touches the network, sudo or /etc."""

import shutil
from pathlib import Path
from typing import List, Optional

import pytest
import requests

from hostswitch.config import Settings
from hostswitch.profiles.state import StateStore
from hostswitch.profiles.store import ProfileStore

LIVE_HOSTS = b"127.0.0.1 localhost\n0.0.0.0 custom.example\n"


class FakeResponse:
    def __init__(self, body: bytes = b"", status_code: int = 200, headers: Optional[dict] = None):
        self.body = body
        self.status_code = status_code
        self.headers = headers or {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]


class FakeSession:
    """Stand-in for requests.Session; answers every GET with the queued outcome."""

    def __init__(self, outcome=None):
        self.outcome = outcome if outcome is not None else FakeResponse(b"")
        self.calls: List[str] = []

    def get(self, url, timeout=None, stream=False):
        self.calls.append(url)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeRunner:
    """Does what SudoRunner does with plain file copies; can be told to fail a step."""

    def __init__(self, fail: Optional[str] = None, message: str = "sudo: a password is required"):
        self.fail = fail
        self.message = message
        self.calls: List[str] = []

    def _maybe_fail(self, step: str) -> None:
        self.calls.append(step)
        if self.fail == step:
            raise OSError(self.message)

    def validate(self) -> None:
        self._maybe_fail("validate")

    def copy(self, src: Path, dst: Path) -> None:
        self._maybe_fail("copy")
        shutil.copy2(src, dst)

    def install(self, src: Path, dst: Path) -> None:
        self._maybe_fail("install")
        tmp = Path(dst).parent / ".hosts.install.tmp"
        shutil.copyfile(src, tmp)
        tmp.chmod(0o644)
        tmp.replace(dst)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    etc = tmp_path / "etc"
    etc.mkdir()
    hosts = etc / "hosts"
    hosts.write_bytes(LIVE_HOSTS)
    return Settings(
        config_dir=tmp_path / "config",
        cache_dir=tmp_path / "cache",
        hosts_path=hosts,
        safe_url="https://example.invalid/hosts",
    )


@pytest.fixture
def store(settings: Settings) -> ProfileStore:
    s = ProfileStore(settings)
    s.ensure_defaults()
    return s


@pytest.fixture
def state_store(settings: Settings) -> StateStore:
    return StateStore(settings.cache_dir)
