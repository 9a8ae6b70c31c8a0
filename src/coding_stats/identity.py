from __future__ import annotations

import dataclasses


def normalize_name(name: str) -> str:
    return (name or "").strip().casefold()


def normalize_github_username(username: str) -> str:
    return (username or "").strip().lstrip("@").casefold()


def github_username_from_email(email: str) -> str:
    """
    Extract GitHub username from GitHub noreply patterns:
      - username@users.noreply.github.com
      - 123456+username@users.noreply.github.com
    Returns normalized username or "".
    """
    e = (email or "").strip().lower()
    if not e.endswith("@users.noreply.github.com"):
        return ""
    local = e.split("@", 1)[0]
    if "+" in local:
        local = local.rsplit("+", 1)[-1]
    return normalize_github_username(local)


@dataclasses.dataclass(frozen=True)
class AuthorMatcher:
    """Author allow-list; an entry matches either the commit author name or the login."""

    names: frozenset[str] = frozenset()

    @classmethod
    def from_list(cls, authors: list[str] | tuple[str, ...] | None) -> "AuthorMatcher":
        return cls(frozenset(normalize_github_username(str(a)) for a in (authors or []) if str(a).strip()))

    @property
    def active(self) -> bool:
        return bool(self.names)

    def matches(self, author_name: str, author_login: str | None = None, author_email: str = "") -> bool:
        if not self.names:
            return True
        name = normalize_name(author_name)
        if name and name in self.names:
            return True
        login = normalize_github_username(author_login or "")
        if login and login in self.names:
            return True
        gh = github_username_from_email(author_email) if author_email else ""
        if gh and gh in self.names:
            return True
        return False
