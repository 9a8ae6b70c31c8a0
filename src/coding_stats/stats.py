from __future__ import annotations

import dataclasses
import datetime as dt
from typing import Callable

from .aggregate import aggregate_by_author, aggregate_by_day, calculate_totals
from .cache import DEFAULT_TTL_S, MemoryCache, generate_cache_key
from .filters import should_include_commit
from .github import DEFAULT_API_URL, fetch_github_commits, parse_repo_input
from .identity import AuthorMatcher
from .models import (
    DEFAULT_FIRST_COMMIT_BONUS_MIN,
    DEFAULT_SESSION_TIMEOUT_MIN,
    DEFAULT_TIMEZONE,
    RepoStats,
    SessionConfig,
)
from .sessions import build_sessions
from .timeutil import get_zone, to_iso_instant
from .transform import commit_from_github, commit_sample

# GitHub caps page size at 100; larger values make a full page look short.
MAX_PER_PAGE = 100


@dataclasses.dataclass
class StatsOptions:
    session_timeout_min: float = DEFAULT_SESSION_TIMEOUT_MIN
    first_commit_bonus_min: float = DEFAULT_FIRST_COMMIT_BONUS_MIN
    since: str | dt.datetime | None = None
    until: str | dt.datetime | None = None
    authors: list[str] = dataclasses.field(default_factory=list)
    exclude_bots: bool = True
    exclude_merge_commits: bool = False
    timezone: str = DEFAULT_TIMEZONE
    github_token: str = ""
    per_page: int = 100
    max_pages: int | None = None
    cache: str = "memory"  # "memory" | "none"
    cache_ttl_s: float = DEFAULT_TTL_S
    api_url: str = DEFAULT_API_URL
    include_raw_sample: bool = False

    def validate(self) -> None:
        if self.session_timeout_min < 0:
            raise ValueError(f"session_timeout_min must be >= 0, got: {self.session_timeout_min!r}")
        if self.first_commit_bonus_min < 0:
            raise ValueError(f"first_commit_bonus_min must be >= 0, got: {self.first_commit_bonus_min!r}")
        if not 1 <= self.per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}, got: {self.per_page!r}")
        if self.cache not in ("memory", "none"):
            raise ValueError(f"cache must be 'memory' or 'none', got: {self.cache!r}")
        get_zone(self.timezone)

    @property
    def session_config(self) -> SessionConfig:
        return SessionConfig(
            session_timeout_min=self.session_timeout_min,
            first_commit_bonus_min=self.first_commit_bonus_min,
            timezone=self.timezone,
        )


def _period_value(value: str | dt.datetime | None) -> str | None:
    if value is None or value == "":
        return None
    return to_iso_instant(value)


def get_repo_stats(
    repo: str | None = None,
    *,
    url: str | None = None,
    options: StatsOptions | None = None,
    cache: MemoryCache[RepoStats] | None = None,
    on_page: Callable[[int, int], None] | None = None,
) -> RepoStats:
    """
    Fetch a repository's commit history and summarize it as coding sessions.

    Sequence: fetch -> filter -> normalize -> build sessions -> aggregate.
    When a cache is given (and `options.cache` is "memory") results are looked up
    and stored under a key built from the repository and every option that
    changes the result.
    """
    if options is None:
        options = StatsOptions()
    options.validate()

    owner, name = parse_repo_input(repo, url=url)
    since = _period_value(options.since)
    until = _period_value(options.until)

    use_cache = cache is not None and options.cache == "memory"
    key = generate_cache_key(
        owner,
        name,
        since=since or "",
        until=until or "",
        authors=list(options.authors),
        exclude_bots=options.exclude_bots,
        exclude_merge_commits=options.exclude_merge_commits,
        session_timeout_min=options.session_timeout_min,
        first_commit_bonus_min=options.first_commit_bonus_min,
        timezone=options.timezone,
    )
    if options.include_raw_sample:
        key += "|raw"
    if use_cache:
        hit = cache.get(key, options.cache_ttl_s)
        if hit is not None:
            return hit

    raw = fetch_github_commits(
        owner,
        name,
        token=options.github_token,
        since=since or "",
        until=until or "",
        per_page=options.per_page,
        max_pages=options.max_pages,
        api_url=options.api_url,
        on_page=on_page,
    )

    matcher = AuthorMatcher.from_list(options.authors)
    included = [
        c
        for c in raw
        if should_include_commit(
            c,
            exclude_bots=options.exclude_bots,
            exclude_merge_commits=options.exclude_merge_commits,
            authors=matcher,
        )
    ]
    commits = [commit_from_github(c) for c in included]

    config = options.session_config
    sessions = build_sessions(commits, config)

    result = RepoStats(
        repo=f"{owner}/{name}",
        since=since,
        until=until,
        config=config,
        totals=calculate_totals(sessions),
        per_author=aggregate_by_author(sessions),
        per_day=aggregate_by_day(sessions),
        commit_sample=commit_sample(commits, included) if options.include_raw_sample else None,
    )

    if use_cache:
        cache.set(key, result)
    return result
