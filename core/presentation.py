"""Text rendering of scan reports for terminals."""
from typing import Callable, List, Sequence, Union

from core.whitelist import Whitelist
from models.report import Report, ErrorReport

MAX_ITEMS_PER_SECTION = 8
ITEM_TEXT_LIMIT = 200

SAFE_THRESHOLD = 80
ATTENTION_THRESHOLD = 50


def badge_status(score: int) -> str:
    """Map a score to 'safe', 'attention' or 'suspicious'."""
    if score >= SAFE_THRESHOLD:
        return "safe"
    if score >= ATTENTION_THRESHOLD:
        return "attention"
    return "suspicious"


def _section(title: str, items: Sequence, render: Callable) -> List[str]:
    if not items:
        return []
    lines = [f"{title}:"]
    for item in items[:MAX_ITEMS_PER_SECTION]:
        lines.append(f"  - {render(item)[:ITEM_TEXT_LIMIT]}")
    if len(items) > MAX_ITEMS_PER_SECTION:
        lines.append(f"  ... {len(items) - MAX_ITEMS_PER_SECTION} more")
    return lines


def _hidden_flags(finding) -> str:
    flags = []
    if finding.hidden:
        flags.append("hidden")
    if finding.has_directive:
        flags.append("directive")
    if finding.base64_like:
        flags.append("base64-like")
    if finding.unicode_obfuscated:
        flags.append("unicode")
    return f"{finding.snippet} [{', '.join(flags)}]"


def render_text(report: Union[Report, ErrorReport], whitelist: Whitelist = None) -> str:
    """Render a report the way a person reads it: score, reasons, then evidence."""
    if isinstance(report, ErrorReport):
        return f"{report.url}\nScan failed: {report.error}"

    whitelist = whitelist or Whitelist()
    lines = [report.title or report.url]
    if report.score is not None:
        lines.append(f"AI Safety Score: {report.score} / 100 [{badge_status(report.score).upper()}]")

    if report.score_reasons:
        lines.append("")
        lines.append("Why the score is low:")
        for reason in report.score_reasons:
            lines.append(f"  - {reason.text} (malus: -{reason.delta})")

    sections = [
        _section("Hidden text / directives", report.hidden_text, _hidden_flags),
        _section("Suspicious comments", [c for c in report.comments if c.suspect], lambda c: c.text),
        _section(
            "External scripts",
            [s for s in report.scripts if s.src and not whitelist.contains(s.src)],
            lambda s: s.src,
        ),
        _section("Iframes", report.iframes, lambda f: f"{f.src or '(no src)'}{' (sandboxed)' if f.sandbox_attr is not None else ''}"),
        _section("Suspicious meta/attributes", report.attrs, lambda a: a.snippet),
    ]
    for section in sections:
        if section:
            lines.append("")
            lines.extend(section)
    return "\n".join(lines)
