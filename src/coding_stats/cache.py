from __future__ import annotations

import dataclasses
import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

DEFAULT_TTL_S = 3600.0


@dataclasses.dataclass
class _Entry(Generic[T]):
    data: T
    stored_at: float


class MemoryCache(Generic[T]):
    """
    Time-boxed in-process cache. Owned and passed around explicitly by the caller;
    entries older than the TTL given to `get` are dropped on access.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}

    def get(self, key: str, ttl_s: float = DEFAULT_TTL_S) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > ttl_s:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: T) -> None:
        self._entries[key] = _Entry(data=data, stored_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def generate_cache_key(
    owner: str,
    repo: str,
    *,
    since: str = "",
    until: str = "",
    authors: list[str] | None = None,
    exclude_bots: bool = True,
    exclude_merge_commits: bool = False,
    session_timeout_min: float = 45,
    first_commit_bonus_min: float = 15,
    timezone: str = "UTC",
) -> str:
    parts = [
        f"{owner}/{repo}",
        since or "",
        until or "",
        ",".join(authors or []),
        "true" if exclude_bots else "false",
        "true" if exclude_merge_commits else "false",
        _num(session_timeout_min),
        _num(first_commit_bonus_min),
        timezone or "UTC",
    ]
    return "|".join(parts)


def _num(v: float) -> str:
    f = float(v)
    return str(int(f)) if f.is_integer() else str(f)
