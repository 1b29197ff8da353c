# src/hostswitch/blocker/counter.py
from pathlib import Path
from typing import Iterable, Iterator

# Addresses a hosts entry uses to sink a domain.
BLOCKING_IPS = {"0.0.0.0", "127.0.0.1"}
# Stock loopback names that are not blocks.
IGNORED_HOSTS = {"localhost", "broadcasthost"}


def iter_blocked_hosts(lines: Iterable[str]) -> Iterator[str]:
    """Yield every host name listed under a blocking address (duplicates included)."""
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        ip, *names = stripped.split()
        if ip not in BLOCKING_IPS:
            continue

        for token in names:
            host, comment, _ = token.partition("#")
            host = "".join(host.split())
            if host and host not in IGNORED_HOSTS:
                yield host
            if comment:
                break


def count_blocked(path: Path) -> int:
    """Number of distinct blocked domains in a hosts-format file; 0 if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return len(set(iter_blocked_hosts(f)))
    except OSError:
        return 0
