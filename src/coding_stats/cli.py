from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .cache import MemoryCache
from .config import ensure_config_file, load_config, options_from_config
from .github import looks_like_url
from .models import StatsError
from .render import render_summary
from .stats import StatsOptions, get_repo_stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimate coding time on a GitHub repository from its commit history.",
        epilog="commands:\n  init-config    Write a config.json with default values.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("repo", type=str, help="Repository as owner/name or a GitHub URL.")
    parser.add_argument("--since", type=str, default="", help="Only commits after this ISO date/time.")
    parser.add_argument("--until", type=str, default="", help="Only commits before this ISO date/time.")
    parser.add_argument("--timezone", type=str, default="", help="IANA timezone used to bucket sessions into days (default: UTC).")
    parser.add_argument("--session-timeout", type=float, default=None, help="Max minutes between commits in one session (default: 45).")
    parser.add_argument("--bonus", type=float, default=None, help="Minutes added to every session for ramp-up (default: 15).")
    parser.add_argument("--author", type=str, nargs="+", default=None, help="Only include these authors (name or login).")
    parser.add_argument("--include-bots", action="store_true", help="Keep commits from bot accounts.")
    parser.add_argument("--exclude-merges", action="store_true", help="Drop merge commits.")
    parser.add_argument("--token", type=str, default="", help="GitHub token (overrides config and GITHUB_TOKEN).")
    parser.add_argument("--max-pages", type=int, default=0, help="Stop after this many pages of commits (0 = no limit).")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format on stdout.")
    parser.add_argument("--json", type=Path, default=None, help="Also write the JSON result to this file.")
    parser.add_argument("--sample", action="store_true", help="Include a sample of raw commits in the JSON result.")
    parser.add_argument("--top", type=int, default=10, help="Rows to show in the text summary tables.")
    parser.add_argument("--quiet", action="store_true", help="No progress output on stderr.")
    return parser


def _split_csv_args(values: list[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        for part in str(v).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def build_options(args: argparse.Namespace, config: dict) -> StatsOptions:
    opts = options_from_config(config)
    if args.since:
        opts.since = args.since
    if args.until:
        opts.until = args.until
    if args.timezone:
        opts.timezone = args.timezone
    if args.session_timeout is not None:
        opts.session_timeout_min = args.session_timeout
    if args.bonus is not None:
        opts.first_commit_bonus_min = args.bonus
    if args.author:
        opts.authors = _split_csv_args(args.author)
    if args.include_bots:
        opts.exclude_bots = False
    if args.exclude_merges:
        opts.exclude_merge_commits = True
    if args.token:
        opts.github_token = args.token
    if args.max_pages:
        opts.max_pages = args.max_pages
    opts.include_raw_sample = bool(args.sample)
    return opts


def _init_config(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="coding-stats init-config", description="Write a config.json with default values.")
    p.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    args = p.parse_args(argv)
    existed = args.config.exists()
    ensure_config_file(args.config)
    if existed:
        print(f"Config already exists: {args.config}")
    else:
        print(f"Wrote new config: {args.config}")
    return 0


def main(argv: list[str] | None = None, *, cache: MemoryCache | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] == "init-config":
        return _init_config(argv[1:])

    parser = _build_parser()
    parser.prog = "coding-stats"
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Invalid config {args.config}: {e}", file=sys.stderr)
        return 2

    try:
        opts = build_options(args, config)
    except (TypeError, ValueError) as e:
        print(f"Invalid config {args.config}: {e}", file=sys.stderr)
        return 2

    def on_page(page: int, count: int) -> None:
        print(f"  fetched page {page} ({count} commits so far)", file=sys.stderr)

    if not args.quiet:
        print(f"Fetching commits for {args.repo} ...", file=sys.stderr)
    try:
        if looks_like_url(args.repo):
            stats = get_repo_stats(url=args.repo, options=opts, cache=cache, on_page=None if args.quiet else on_page)
        else:
            stats = get_repo_stats(args.repo, options=opts, cache=cache, on_page=None if args.quiet else on_page)
    except StatsError as e:
        print(f"error [{e.code}]: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    payload = stats.as_dict()
    if args.json is not None:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(payload, indent=2, sort_keys=False) + "\n", encoding="utf-8")
        if not args.quiet:
            print(f"Wrote {args.json}", file=sys.stderr)

    if args.format == "json":
        print(json.dumps(payload, indent=2, sort_keys=False))
    else:
        sys.stdout.write(render_summary(stats, top_n=max(1, int(args.top))))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
