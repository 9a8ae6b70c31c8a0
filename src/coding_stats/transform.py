from __future__ import annotations

from .filters import is_likely_bot, is_merge_commit, raw_author_login, raw_author_name
from .models import Commit
from .timeutil import parse_instant


def commit_from_github(gh_commit: dict) -> Commit:
    """Map a GitHub REST commit record to a Commit; the login wins over the raw author name."""
    name = raw_author_name(gh_commit)
    login = raw_author_login(gh_commit)
    info = gh_commit.get("commit") or {}
    author = info.get("author") or {}
    return Commit(
        sha=str(gh_commit.get("sha") or ""),
        author=login or name,
        author_login=login,
        timestamp=parse_instant(str(author.get("date") or "")),
        message=str(info.get("message") or ""),
        is_merge=is_merge_commit(gh_commit),
        is_bot=is_likely_bot(name, login),
    )


def commit_sample(commits: list[Commit], gh_commits: list[dict], limit: int = 10) -> list[dict[str, str]]:
    names = {str(c.get("sha") or ""): raw_author_name(c) for c in gh_commits}
    out: list[dict[str, str]] = []
    for c in commits[:limit]:
        row = {"sha": c.sha, "date": c.timestamp.isoformat()}
        if c.author_login:
            row["authorLogin"] = c.author_login
        name = names.get(c.sha, "")
        if name:
            row["authorName"] = name
        out.append(row)
    return out
