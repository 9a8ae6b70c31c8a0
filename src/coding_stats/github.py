from __future__ import annotations

import json
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Callable

from .models import StatsError

DEFAULT_API_URL = "https://api.github.com"

_URL_RE = re.compile(r"github\.com[:/]([^/]+)/([^/]+)")


def parse_repo_input(repo: str | None = None, *, url: str | None = None) -> tuple[str, str]:
    """
    Resolve `owner/name` from either the short form or a GitHub URL
    (https://github.com/o/r, https://github.com/o/r.git, git@github.com:o/r.git).
    """
    if repo is None and url is None:
        raise StatsError("INVALID_REPO", "Either repo or url is required")

    if repo is not None:
        repo_string = str(repo).strip()
    else:
        u = str(url).strip()
        if u.endswith(".git"):
            u = u[: -len(".git")]
        m = _URL_RE.search(u)
        if not m:
            raise StatsError("INVALID_REPO", f"Invalid GitHub URL: {url}")
        repo_string = f"{m.group(1)}/{m.group(2)}"

    parts = repo_string.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise StatsError("INVALID_REPO", f"Invalid repo format: {repo_string}")
    return parts[0], parts[1]


def looks_like_url(value: str) -> bool:
    v = (value or "").strip()
    return "://" in v or v.startswith("git@") or v.startswith("github.com")


def commits_url(
    owner: str,
    repo: str,
    *,
    page: int,
    per_page: int,
    since: str = "",
    until: str = "",
    api_url: str = DEFAULT_API_URL,
) -> str:
    base = api_url.rstrip("/")
    path = f"/repos/{urllib.parse.quote(owner, safe='')}/{urllib.parse.quote(repo, safe='')}/commits"
    params: dict[str, str] = {"per_page": str(per_page), "page": str(page)}
    if since:
        params["since"] = since
    if until:
        params["until"] = until
    return base + path + "?" + urllib.parse.urlencode(params)


def _error_message(payload: str) -> str:
    try:
        data = json.loads(payload)
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("message") or "")
    return ""


def github_error(status: int, payload: str) -> StatsError:
    message = _error_message(payload) or f"GitHub API error: {status}"
    details = {"status": status, "body": payload[:500]}
    if status == 404:
        return StatsError("NOT_FOUND", "Repository not found", details)
    if status == 401:
        return StatsError("UNAUTHORIZED", "Invalid or missing GitHub token", details)
    if status == 403:
        if "rate limit" in message.lower():
            return StatsError("RATE_LIMIT", "GitHub API rate limit exceeded", details)
        return StatsError("UNAUTHORIZED", message, details)
    return StatsError("UNKNOWN", message, details)


def _get_json(url: str, *, token: str, timeout_s: int) -> object:
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "coding-stats",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    req = urllib.request.Request(url, method="GET", headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            body = resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        payload = ""
        try:
            payload = e.read().decode("utf-8", errors="replace")
        except Exception:
            payload = ""
        raise github_error(int(e.code or 0), payload) from e
    except urllib.error.URLError as e:
        raise StatsError("NETWORK", f"Failed to fetch commits: {e}", e) from e
    except OSError as e:
        raise StatsError("NETWORK", f"Failed to fetch commits: {e}", e) from e
    try:
        return json.loads(body)
    except ValueError as e:
        raise StatsError("NETWORK", "Failed to fetch commits: invalid JSON response", body[:500]) from e


def fetch_github_commits(
    owner: str,
    repo: str,
    *,
    token: str = "",
    since: str = "",
    until: str = "",
    per_page: int = 100,
    max_pages: int | None = None,
    api_url: str = DEFAULT_API_URL,
    timeout_s: int = 30,
    on_page: Callable[[int, int], None] | None = None,
) -> list[dict]:
    """
    Fetch raw commit records page by page. Stops on an empty page, a short page,
    or after `max_pages` pages.
    """
    if per_page <= 0:
        raise ValueError(f"per_page must be positive, got: {per_page!r}")

    out: list[dict] = []
    page = 1
    while True:
        url = commits_url(owner, repo, page=page, per_page=per_page, since=since, until=until, api_url=api_url)
        data = _get_json(url, token=token, timeout_s=timeout_s)
        if not isinstance(data, list):
            raise StatsError("UNKNOWN", "Unexpected GitHub API response (expected a list of commits)", data)
        if not data:
            break
        out.extend(c for c in data if isinstance(c, dict))
        if on_page is not None:
            on_page(page, len(out))
        if len(data) < per_page:
            break
        if max_pages and page >= max_pages:
            break
        page += 1
    return out
