from __future__ import annotations

import dataclasses

from .models import Commit, Session, SessionConfig
from .timeutil import diff_in_minutes, parse_instant, round2, to_iso_date


def group_commits_by_author(commits: list[Commit]) -> dict[str, tuple[list[Commit], str | None]]:
    grouped: dict[str, list[Commit]] = {}
    logins: dict[str, str | None] = {}
    for c in commits:
        grouped.setdefault(c.author, []).append(c)
        if not logins.get(c.author) and c.author_login:
            logins[c.author] = c.author_login
    return {author: (items, logins.get(author)) for author, items in grouped.items()}


def _with_aware_timestamp(c: Commit) -> Commit:
    # Naive timestamps are UTC, as in parse_instant.
    if c.timestamp.tzinfo is not None:
        return c
    return dataclasses.replace(c, timestamp=parse_instant(c.timestamp))


def build_sessions(commits: list[Commit], config: SessionConfig | None = None) -> list[Session]:
    """
    Group commits into per-author sessions. A commit joins the open session
    when it is at most `session_timeout_min` after the session's last commit;
    otherwise it starts a new one. Sessions are emitted in chronological order
    per author, with no ordering across authors.
    """
    if config is None:
        config = SessionConfig()
    timeout = config.session_timeout_min

    sessions: list[Session] = []
    for author, (items, login) in group_commits_by_author(commits).items():
        ordered = sorted((_with_aware_timestamp(c) for c in items), key=lambda c: c.timestamp)

        current: list[Commit] = []
        for c in ordered:
            if current and diff_in_minutes(c.timestamp, current[-1].timestamp) > timeout:
                sessions.append(create_session(current, author, login, config))
                current = []
            current.append(c)

        if current:
            sessions.append(create_session(current, author, login, config))
    return sessions


def create_session(commits: list[Commit], author: str, author_login: str | None, config: SessionConfig) -> Session:
    start = commits[0].timestamp
    end = commits[-1].timestamp

    if len(commits) == 1:
        duration = config.first_commit_bonus_min
    else:
        duration = diff_in_minutes(end, start) + config.first_commit_bonus_min

    avg_gap: float | None = None
    max_gap: float | None = None
    if len(commits) > 1:
        gaps = [diff_in_minutes(commits[i].timestamp, commits[i - 1].timestamp) for i in range(1, len(commits))]
        avg_gap = round2(sum(gaps) / len(gaps))
        max_gap = round2(max(gaps))

    return Session(
        author=author,
        author_login=author_login,
        commits=tuple(commits),
        start_time=start,
        end_time=end,
        duration_minutes=duration,
        date=to_iso_date(start, config.timezone),
        avg_minutes_between_commits=avg_gap,
        max_minutes_between_commits=max_gap,
    )
