from __future__ import annotations

import dataclasses
import datetime as dt

DEFAULT_SESSION_TIMEOUT_MIN = 45
DEFAULT_FIRST_COMMIT_BONUS_MIN = 15
DEFAULT_TIMEZONE = "UTC"

STATS_ERROR_CODES = (
    "INVALID_REPO",
    "NOT_FOUND",
    "RATE_LIMIT",
    "NETWORK",
    "UNAUTHORIZED",
    "UNSUPPORTED_PRIVATE_REPO",
    "UNKNOWN",
)


class StatsError(RuntimeError):
    def __init__(self, code: str, message: str, details: object = None) -> None:
        super().__init__(message)
        self.code = code if code in STATS_ERROR_CODES else "UNKNOWN"
        self.message = message
        self.details = details


def _drop_none(d: dict[str, object]) -> dict[str, object]:
    return {k: v for k, v in d.items() if v is not None}


@dataclasses.dataclass(frozen=True)
class Commit:
    sha: str
    author: str
    timestamp: dt.datetime
    message: str = ""
    author_login: str | None = None
    is_merge: bool = False
    is_bot: bool = False


@dataclasses.dataclass(frozen=True)
class SessionConfig:
    session_timeout_min: float = DEFAULT_SESSION_TIMEOUT_MIN
    first_commit_bonus_min: float = DEFAULT_FIRST_COMMIT_BONUS_MIN
    timezone: str = DEFAULT_TIMEZONE


@dataclasses.dataclass(frozen=True)
class Session:
    author: str
    commits: tuple[Commit, ...]
    start_time: dt.datetime
    end_time: dt.datetime
    duration_minutes: float
    date: str  # YYYY-MM-DD of start_time in the configured timezone
    author_login: str | None = None
    avg_minutes_between_commits: float | None = None
    max_minutes_between_commits: float | None = None

    @property
    def commit_count(self) -> int:
        return len(self.commits)


@dataclasses.dataclass
class AggregateStats:
    total_hours: float = 0.0
    sessions_count: int = 0
    dev_days: int = 0
    total_commits: int = 0
    avg_commits_per_session: float = 0.0
    avg_sessions_per_day: float = 0.0
    longest_session_hours: float = 0.0
    avg_session_hours: float = 0.0
    most_productive_day_of_week: str | None = None
    longest_streak_days: int = 0
    min_time_between_sessions_min: float | None = None
    avg_minutes_between_commits: float | None = None
    max_minutes_between_commits: float | None = None

    def as_dict(self) -> dict[str, object]:
        return _drop_none(
            {
                "totalHours": self.total_hours,
                "sessionsCount": self.sessions_count,
                "devDays": self.dev_days,
                "totalCommits": self.total_commits,
                "avgCommitsPerSession": self.avg_commits_per_session,
                "avgSessionsPerDay": self.avg_sessions_per_day,
                "longestSessionHours": self.longest_session_hours,
                "avgSessionHours": self.avg_session_hours,
                "mostProductiveDayOfWeek": self.most_productive_day_of_week,
                "longestStreakDays": self.longest_streak_days,
                "minTimeBetweenSessionsMin": self.min_time_between_sessions_min,
                "avgMinutesBetweenCommits": self.avg_minutes_between_commits,
                "maxMinutesBetweenCommits": self.max_minutes_between_commits,
            }
        )


@dataclasses.dataclass
class AuthorStats(AggregateStats):
    author: str = ""
    author_login: str | None = None

    def as_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"author": self.author}
        if self.author_login is not None:
            out["authorLogin"] = self.author_login
        out.update(super().as_dict())
        return out


@dataclasses.dataclass
class DayStats:
    date: str
    total_hours: float = 0.0
    sessions_count: int = 0
    total_commits: int = 0
    authors: list[str] = dataclasses.field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "totalHours": self.total_hours,
            "sessionsCount": self.sessions_count,
            "totalCommits": self.total_commits,
            "authors": list(self.authors),
        }


@dataclasses.dataclass
class RepoStats:
    repo: str
    since: str | None
    until: str | None
    config: SessionConfig
    totals: AggregateStats
    per_author: list[AuthorStats]
    per_day: list[DayStats]
    commit_sample: list[dict[str, str]] | None = None

    def as_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "repo": self.repo,
            "period": _drop_none({"since": self.since, "until": self.until}),
            "config": {
                "sessionTimeoutMin": self.config.session_timeout_min,
                "firstCommitBonusMin": self.config.first_commit_bonus_min,
                "timezone": self.config.timezone,
            },
            "totals": self.totals.as_dict(),
            "perAuthor": [a.as_dict() for a in self.per_author],
            "perDay": [d.as_dict() for d in self.per_day],
        }
        if self.commit_sample is not None:
            out["raw"] = {"commitSample": [dict(c) for c in self.commit_sample]}
        return out
