from __future__ import annotations

from .identity import AuthorMatcher

# Substring patterns; matched against the lower-cased author name and login.
BOT_PATTERNS = (
    "bot",
    "dependabot",
    "renovate",
    "github-actions",
    "greenkeeper",
    "snyk",
    "codecov",
    "travis",
    "circleci",
    "[bot]",
)


def raw_author_name(gh_commit: dict) -> str:
    author = ((gh_commit.get("commit") or {}).get("author") or {})
    return str(author.get("name") or "")


def raw_author_email(gh_commit: dict) -> str:
    author = ((gh_commit.get("commit") or {}).get("author") or {})
    return str(author.get("email") or "")


def raw_author_login(gh_commit: dict) -> str | None:
    user = gh_commit.get("author") or {}
    login = user.get("login") if isinstance(user, dict) else None
    return str(login) if login else None


def is_likely_bot(author_name: str, author_login: str | None = None) -> bool:
    name = (author_name or "").lower()
    login = (author_login or "").lower()
    return any(pat in name or pat in login for pat in BOT_PATTERNS)


def is_merge_commit(gh_commit: dict) -> bool:
    return len(gh_commit.get("parents") or []) > 1


def should_include_commit(
    gh_commit: dict,
    *,
    exclude_bots: bool = True,
    exclude_merge_commits: bool = False,
    authors: AuthorMatcher | list[str] | None = None,
) -> bool:
    name = raw_author_name(gh_commit)
    login = raw_author_login(gh_commit)

    if exclude_bots and is_likely_bot(name, login):
        return False
    if exclude_merge_commits and is_merge_commit(gh_commit):
        return False

    matcher = authors if isinstance(authors, AuthorMatcher) else AuthorMatcher.from_list(authors)
    if matcher.active and not matcher.matches(name, login, raw_author_email(gh_commit)):
        return False
    return True
