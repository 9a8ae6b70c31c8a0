from __future__ import annotations

from .models import AggregateStats, RepoStats

BANNER = r"""
+------------------------------------------------------------------------+
|                              CODING STATS                               |
+------------------------------------------------------------------------+
""".strip("\n")


def fmt_hours(h: float) -> str:
    return f"{h:,.2f}h"


def fmt_opt(v: object, suffix: str = "") -> str:
    if v is None:
        return "n/a"
    return f"{v}{suffix}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: float, max_value: float, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def _totals_lines(t: AggregateStats) -> list[str]:
    return [
        f"Total time:        {fmt_hours(t.total_hours)} across {t.sessions_count} sessions ({t.total_commits} commits)",
        f"Dev days:          {t.dev_days}  (longest streak: {t.longest_streak_days} days)",
        f"Avg per session:   {fmt_hours(t.avg_session_hours)}, {t.avg_commits_per_session} commits",
        f"Avg sessions/day:  {t.avg_sessions_per_day}",
        f"Longest session:   {fmt_hours(t.longest_session_hours)}",
        f"Busiest weekday:   {fmt_opt(t.most_productive_day_of_week)}",
        f"Min session gap:   {fmt_opt(t.min_time_between_sessions_min, ' min')}",
        f"Commit gap avg/max: {fmt_opt(t.avg_minutes_between_commits, ' min')} / {fmt_opt(t.max_minutes_between_commits, ' min')}",
    ]


def render_summary(stats: RepoStats, *, top_n: int = 10) -> str:
    lines: list[str] = [BANNER, ""]
    lines.append(f"Repository: {stats.repo}")
    period = f"{stats.since or 'beginning'} -> {stats.until or 'now'}"
    lines.append(f"Period:     {period}")
    cfg = stats.config
    lines.append(
        f"Sessions:   timeout={cfg.session_timeout_min}min bonus={cfg.first_commit_bonus_min}min tz={cfg.timezone}"
    )
    lines.append("")
    lines.extend(_totals_lines(stats.totals))

    if stats.per_author:
        lines.append("")
        lines.append(f"Top authors (by hours, top {top_n}):")
        max_h = stats.per_author[0].total_hours
        for a in stats.per_author[:top_n]:
            lines.append(
                f"  {trunc(a.author, 24):<24} {bar(a.total_hours, max_h)} {fmt_hours(a.total_hours):>10}"
                f"  {a.sessions_count:>4} sessions  {a.total_commits:>5} commits"
            )

    if stats.per_day:
        lines.append("")
        lines.append(f"Busiest days (top {top_n}):")
        busiest = sorted(stats.per_day, key=lambda d: (-d.total_hours, d.date))[:top_n]
        max_h = busiest[0].total_hours
        for d in busiest:
            lines.append(
                f"  {d.date}  {bar(d.total_hours, max_h)} {fmt_hours(d.total_hours):>10}"
                f"  {d.sessions_count:>3} sessions  {', '.join(d.authors)}"
            )
    return "\n".join(lines) + "\n"
