"""Markdown renderer for the bundle impact table.

Produces a GitHub-flavored markdown table:

    | Status | File | Size | Difference (%) |
    | --- | --- | --- | --- |
    | M | src/foo/bar.ts | 110 | +10 (+10%) |
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bundle_impact.report.weigh import FileWeight

TABLE_HEADER = "| Status | File | Size | Difference (%) |"
TABLE_DIVIDER = "| --- | --- | --- | --- |"


def format_difference(weight: FileWeight) -> str:
    """Render the size change, e.g. '+10 (+10%)'."""
    if weight.status == "A":
        return f"{weight.delta:+d} (new)"
    percent = weight.percent
    if percent is None:
        return f"{weight.delta:+d}"
    return f"{weight.delta:+d} ({percent:+d}%)"


def render_report(weights: list[FileWeight], show_unchanged: bool = False) -> str:
    """Render weights as a markdown table. Empty string when nothing to show."""
    rows = [w for w in weights if show_unchanged or w.delta != 0]
    if not rows:
        return ""

    lines = [TABLE_HEADER, TABLE_DIVIDER]
    for w in sorted(rows, key=lambda w: w.path):
        lines.append(f"| {w.status} | {w.path} | {w.size} | {format_difference(w)} |")
    return "\n".join(lines)


def summarize(weights: list[FileWeight]) -> dict:
    """Aggregate totals for JSON output and the terminal summary."""
    total = sum(w.size for w in weights)
    base_total = sum(w.base_size for w in weights)
    return {
        "files": len(weights),
        "size": total,
        "base_size": base_total,
        "delta": total - base_total,
        "weights": [
            {
                "status": w.status,
                "path": w.path,
                "size": w.size,
                "base_size": w.base_size,
                "delta": w.delta,
                "percent": w.percent,
            }
            for w in weights
        ],
    }
