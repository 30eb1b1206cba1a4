"""Process-local locks keyed by resolved file path."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import Iterator

_LOCKS: dict[str, Lock] = {}
_LOCKS_GUARD = Lock()


def _lock_for(path: Path) -> Lock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, Lock())


@contextmanager
def locked_path(path: Path) -> Iterator[None]:
    """Serialize access to one file across every store instance in this process."""
    with _lock_for(path):
        yield
