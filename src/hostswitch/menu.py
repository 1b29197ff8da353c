# src/hostswitch/menu.py
"""xbar / SwiftBar menu output.

Each profile line carries an action that re-invokes this program with the
profile path encoded as a url-safe base64 token, so paths with spaces or
quotes survive the plugin's parameter passing.
"""

from __future__ import annotations

import base64
import binascii
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from hostswitch.profiles.store import Profile

SEPARATOR = "---"
UNKNOWN = "unknown"


@dataclass
class MenuData:
    active: Optional[Profile]
    blocked_count: int
    profiles: Sequence[Profile]
    active_paths: Sequence[Path]
    last_error: Optional[str]
    hosts_path: Path
    safe_path: Path
    upstream_last_modified: Optional[str]


def encode_token(path: Path) -> str:
    return base64.urlsafe_b64encode(str(path).encode("utf-8")).decode("ascii")


def decode_token(token: str) -> Optional[Path]:
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        return Path(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None


def mtime_human(path: Path) -> str:
    try:
        return f"{datetime.fromtimestamp(Path(path).stat().st_mtime):%Y-%m-%d %H:%M}"
    except OSError:
        return UNKNOWN


def title_for(active: Optional[Profile]) -> str:
    if active is None:
        return "⚙️ CUSTOM"
    if active.is_safe:
        return "✅ SAFE"
    if active.is_unsafe:
        return "❌ UNSAFE"
    return f"🧩 {active.name}"


def action(*params: str, refresh: bool) -> str:
    argv = [sys.executable, "-m", "hostswitch", *params]
    parts = [f"shell={argv[0]}"]
    parts += [f"param{i}={p}" for i, p in enumerate(argv[1:], start=1)]
    parts += ["terminal=false", f"refresh={'true' if refresh else 'false'}"]
    return " ".join(parts)


def render_menu(data: MenuData) -> List[str]:
    lines = [title_for(data.active), SEPARATOR]
    lines += [f"Blocked domains: {data.blocked_count}", SEPARATOR]

    if data.last_error:
        lines += [f"⚠️ Last error: {data.last_error}", SEPARATOR]

    active_paths = set(data.active_paths)
    for profile in data.profiles:
        prefix = "✓" if profile.path in active_paths else ""
        lines.append(f"{prefix} {profile.label} | {action('apply', encode_token(profile.path), refresh=True)}")

    lines += [
        SEPARATOR,
        f"{data.hosts_path} last modified: {mtime_human(data.hosts_path)}",
        f"SAFE profile last synced: {mtime_human(data.safe_path)}",
        f"StevenBlack upstream last modified: {data.upstream_last_modified or UNKNOWN}",
        SEPARATOR,
        f"Open active hosts file | {action('open-active', refresh=False)}",
        f"Open profiles folder | {action('open-profiles', refresh=False)}",
    ]
    return lines
