from __future__ import annotations

import datetime as dt

from coding_stats.models import Commit, SessionConfig
from coding_stats.sessions import build_sessions, group_commits_by_author
from coding_stats.timeutil import parse_instant

CFG = SessionConfig(session_timeout_min=45, first_commit_bonus_min=15, timezone="UTC")


def _commit(author: str, ts: str, sha: str, login: str | None = None) -> Commit:
    return Commit(sha=sha, author=author, author_login=login, timestamp=parse_instant(ts), message="Test commit")


def test_empty_input_gives_no_sessions() -> None:
    assert build_sessions([], CFG) == []


def test_single_commit_session_gets_bonus() -> None:
    sessions = build_sessions([_commit("alice", "2024-01-15T14:00:00Z", "sha1")], CFG)
    assert len(sessions) == 1
    s = sessions[0]
    assert s.duration_minutes == 15
    assert s.start_time == s.end_time
    assert s.date == "2024-01-15"
    assert s.avg_minutes_between_commits is None
    assert s.max_minutes_between_commits is None


def test_two_commits_30_minutes_apart() -> None:
    sessions = build_sessions(
        [
            _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
            _commit("alice", "2024-01-15T14:30:00Z", "sha2"),
        ],
        CFG,
    )
    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 45
    assert sessions[0].commit_count == 2
    assert sessions[0].avg_minutes_between_commits == 30.0
    assert sessions[0].max_minutes_between_commits == 30.0


def test_gap_equal_to_timeout_stays_in_session() -> None:
    sessions = build_sessions(
        [
            _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
            _commit("alice", "2024-01-15T14:45:00Z", "sha2"),
        ],
        CFG,
    )
    assert len(sessions) == 1
    assert sessions[0].commit_count == 2
    assert sessions[0].duration_minutes == 60


def test_gap_over_timeout_splits() -> None:
    sessions = build_sessions(
        [
            _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
            _commit("alice", "2024-01-15T14:46:00Z", "sha2"),
        ],
        CFG,
    )
    assert len(sessions) == 2
    assert [s.commit_count for s in sessions] == [1, 1]
    assert [s.duration_minutes for s in sessions] == [15, 15]


def test_gap_is_measured_from_last_commit_not_session_start() -> None:
    commits = [
        _commit("alice", "2024-01-15T10:00:00Z", "sha1"),
        _commit("alice", "2024-01-15T10:40:00Z", "sha2"),
        _commit("alice", "2024-01-15T11:20:00Z", "sha3"),
        _commit("alice", "2024-01-15T12:00:00Z", "sha4"),
    ]
    sessions = build_sessions(commits, CFG)
    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 120 + 15


def test_out_of_order_input_is_sorted() -> None:
    commits = [
        _commit("alice", "2024-01-15T16:00:00Z", "sha3"),
        _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("alice", "2024-01-15T14:30:00Z", "sha2"),
    ]
    original = list(commits)
    sessions = build_sessions(commits, CFG)
    assert commits == original
    assert len(sessions) == 2
    assert [c.sha for c in sessions[0].commits] == ["sha1", "sha2"]
    assert [c.sha for c in sessions[1].commits] == ["sha3"]
    assert sessions[0].start_time == parse_instant("2024-01-15T14:00:00Z")
    assert sessions[0].end_time == parse_instant("2024-01-15T14:30:00Z")


def test_authors_never_share_a_session() -> None:
    commits = [
        _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("bob", "2024-01-15T14:10:00Z", "sha2"),
        _commit("alice", "2024-01-15T14:20:00Z", "sha3"),
        _commit("bob", "2024-01-15T14:30:00Z", "sha4"),
    ]
    sessions = build_sessions(commits, CFG)
    assert len(sessions) == 2
    for s in sessions:
        assert {c.author for c in s.commits} == {s.author}
    by_author = {s.author: s for s in sessions}
    assert by_author["alice"].duration_minutes == 20 + 15
    assert by_author["bob"].duration_minutes == 20 + 15


def test_identical_timestamps_merge_with_zero_gap() -> None:
    commits = [
        _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("alice", "2024-01-15T14:00:00Z", "sha2"),
    ]
    sessions = build_sessions(commits, CFG)
    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 15
    assert sessions[0].avg_minutes_between_commits == 0.0
    assert sessions[0].max_minutes_between_commits == 0.0


def test_session_crossing_local_midnight_uses_start_day() -> None:
    cfg = SessionConfig(session_timeout_min=45, first_commit_bonus_min=15, timezone="America/New_York")
    commits = [
        _commit("alice", "2024-01-16T04:50:00Z", "sha1"),  # 23:50 EST on the 15th
        _commit("alice", "2024-01-16T05:10:00Z", "sha2"),  # 00:10 EST on the 16th
    ]
    sessions = build_sessions(commits, cfg)
    assert len(sessions) == 1
    assert sessions[0].date == "2024-01-15"
    assert sessions[0].duration_minutes == 35

    utc_sessions = build_sessions(commits, CFG)
    assert utc_sessions[0].date == "2024-01-16"


def test_commit_gap_metrics_are_rounded() -> None:
    commits = [
        _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("alice", "2024-01-15T14:00:20Z", "sha2"),
        _commit("alice", "2024-01-15T14:00:40Z", "sha3"),
        _commit("alice", "2024-01-15T14:10:40Z", "sha4"),
    ]
    s = build_sessions(commits, CFG)[0]
    # gaps: 1/3, 1/3, 10 minutes
    assert s.avg_minutes_between_commits == 3.56
    assert s.max_minutes_between_commits == 10.0


def test_author_login_taken_from_first_commit_that_has_one() -> None:
    commits = [
        _commit("Alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("Alice", "2024-01-15T14:10:00Z", "sha2", login="alice"),
        _commit("Alice", "2024-01-15T18:00:00Z", "sha3", login="alice-other"),
    ]
    sessions = build_sessions(commits, CFG)
    assert len(sessions) == 2
    assert all(s.author_login == "alice" for s in sessions)

    grouped = group_commits_by_author(commits)
    assert list(grouped) == ["Alice"]
    assert grouped["Alice"][1] == "alice"


def test_custom_timeout_and_bonus() -> None:
    commits = [
        _commit("alice", "2024-01-15T14:00:00Z", "sha1"),
        _commit("alice", "2024-01-15T14:35:00Z", "sha2"),
    ]
    assert len(build_sessions(commits, SessionConfig(session_timeout_min=30))) == 2
    sessions = build_sessions(commits, SessionConfig(session_timeout_min=40, first_commit_bonus_min=0))
    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 35


def test_default_config() -> None:
    sessions = build_sessions([_commit("alice", "2024-01-15T14:00:00Z", "sha1")])
    assert sessions[0].duration_minutes == 15
    assert sessions[0].date == "2024-01-15"


def test_partition_is_maximal() -> None:
    base = dt.datetime(2024, 3, 1, 8, 0, tzinfo=dt.timezone.utc)
    offsets = [0, 10, 55, 101, 102, 200, 246, 300, 301, 347]
    commits = [
        Commit(sha=f"sha{i}", author="alice" if i % 3 else "bob", timestamp=base + dt.timedelta(minutes=m))
        for i, m in enumerate(offsets)
    ]
    sessions = build_sessions(commits, CFG)
    assert sum(s.commit_count for s in sessions) == len(commits)

    for author in ("alice", "bob"):
        mine = sorted((s for s in sessions if s.author == author), key=lambda s: s.start_time)
        for s in mine:
            stamps = [c.timestamp for c in s.commits]
            assert stamps == sorted(stamps)
            for a, b in zip(stamps, stamps[1:]):
                assert (b - a).total_seconds() / 60 <= 45
        for prev, cur in zip(mine, mine[1:]):
            assert (cur.start_time - prev.end_time).total_seconds() / 60 > 45


def test_naive_timestamps_are_treated_as_utc() -> None:
    commits = [
        Commit(sha="a1", author="alice", timestamp=dt.datetime(2024, 1, 15, 14, 0)),
        Commit(sha="a2", author="alice", timestamp=parse_instant("2024-01-15T14:30:00Z")),
        Commit(sha="a3", author="alice", timestamp=dt.datetime(2024, 1, 15, 16, 0)),
    ]
    sessions = build_sessions(commits, CFG)
    assert [s.commit_count for s in sessions] == [2, 1]
    assert sessions[0].duration_minutes == 45
    assert sessions[0].start_time == dt.datetime(2024, 1, 15, 14, 0, tzinfo=dt.timezone.utc)
    assert all(c.timestamp.tzinfo is not None for s in sessions for c in s.commits)
