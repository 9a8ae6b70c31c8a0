from __future__ import annotations

import datetime as dt
import math

from .models import AggregateStats, AuthorStats, DayStats, Session
from .timeutil import round2, utc_day_name


def calculate_aggregate_stats(sessions: list[Session]) -> AggregateStats:
    """Rollup shared by the global totals and every per-author entry."""
    total_minutes = sum(s.duration_minutes for s in sessions)
    total_hours = total_minutes / 60
    sessions_count = len(sessions)
    total_commits = sum(s.commit_count for s in sessions)
    dev_days = len({s.date for s in sessions})
    longest = max((s.duration_minutes / 60 for s in sessions), default=0.0)

    avg_gap, max_gap = commit_gap_stats(sessions)
    return AggregateStats(
        total_hours=round2(total_hours),
        sessions_count=sessions_count,
        dev_days=dev_days,
        total_commits=total_commits,
        avg_commits_per_session=round2(total_commits / sessions_count) if sessions_count else 0.0,
        avg_sessions_per_day=round2(sessions_count / dev_days) if dev_days else 0.0,
        longest_session_hours=round2(longest),
        avg_session_hours=round2(total_hours / sessions_count) if sessions_count else 0.0,
        most_productive_day_of_week=most_productive_day_of_week(sessions),
        longest_streak_days=longest_streak_days(sessions),
        min_time_between_sessions_min=min_time_between_sessions(sessions),
        avg_minutes_between_commits=avg_gap,
        max_minutes_between_commits=max_gap,
    )


def calculate_totals(sessions: list[Session]) -> AggregateStats:
    return calculate_aggregate_stats(sessions)


def aggregate_by_author(sessions: list[Session]) -> list[AuthorStats]:
    grouped: dict[str, list[Session]] = {}
    logins: dict[str, str | None] = {}
    for s in sessions:
        grouped.setdefault(s.author, []).append(s)
        if not logins.get(s.author) and s.author_login:
            logins[s.author] = s.author_login

    out: list[AuthorStats] = []
    for author, items in grouped.items():
        st = calculate_aggregate_stats(items)
        out.append(AuthorStats(**vars(st), author=author, author_login=logins.get(author)))
    # sorted() is stable, so equal totals keep first-seen order.
    return sorted(out, key=lambda a: -a.total_hours)


def aggregate_by_day(sessions: list[Session]) -> list[DayStats]:
    days: dict[str, DayStats] = {}
    for s in sessions:
        day = days.get(s.date)
        if day is None:
            day = days[s.date] = DayStats(date=s.date)
        day.total_hours += s.duration_minutes / 60
        day.sessions_count += 1
        day.total_commits += s.commit_count
        if s.author not in day.authors:
            day.authors.append(s.author)
    return [days[k] for k in sorted(days)]


def most_productive_day_of_week(sessions: list[Session]) -> str | None:
    if not sessions:
        return None

    # Weekday of the stored (UTC) instant; not re-localized to the session timezone.
    hours_by_day: dict[str, float] = {}
    for s in sessions:
        name = utc_day_name(s.start_time)
        hours_by_day[name] = hours_by_day.get(name, 0.0) + s.duration_minutes / 60

    best_day = "Sunday"
    best_hours = 0.0
    for name, hours in hours_by_day.items():
        if hours > best_hours:
            best_hours = hours
            best_day = name
    return best_day


def longest_streak_days(sessions: list[Session]) -> int:
    if not sessions:
        return 0
    dates = [dt.date.fromisoformat(d) for d in sorted({s.date for s in sessions})]

    longest = 1
    current = 1
    for prev, cur in zip(dates, dates[1:]):
        if (cur - prev).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def min_time_between_sessions(sessions: list[Session]) -> float | None:
    """Smallest positive gap between an author's consecutive sessions, in minutes."""
    if len(sessions) < 2:
        return None

    by_author: dict[str, list[Session]] = {}
    for s in sessions:
        by_author.setdefault(s.author, []).append(s)

    best = math.inf
    for items in by_author.values():
        if len(items) < 2:
            continue
        ordered = sorted(items, key=lambda s: s.end_time)
        for prev, cur in zip(ordered, ordered[1:]):
            gap = (cur.start_time - prev.end_time).total_seconds() / 60
            if gap > 0:
                best = min(best, gap)

    if best == math.inf:
        return None
    return round2(best)


def commit_gap_stats(sessions: list[Session]) -> tuple[float | None, float | None]:
    # Each session's average stands in for all of its gaps (commit_count - 1 copies).
    gaps: list[float] = []
    maxima: list[float] = []
    for s in sessions:
        if s.avg_minutes_between_commits is None:
            continue
        gaps.extend([s.avg_minutes_between_commits] * (s.commit_count - 1))
        if s.max_minutes_between_commits is not None:
            maxima.append(s.max_minutes_between_commits)

    if not gaps:
        return None, None
    avg = round2(sum(gaps) / len(gaps))
    mx = round2(max(maxima)) if maxima else None
    return avg, mx
