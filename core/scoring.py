"""
Risk score aggregation.

Computes a deduction-from-baseline score starting at 100. Each rule counts
matching findings, turns the count into a capped penalty and records a
reason. Rules fire in table order and reasons keep that order.
"""
from dataclasses import dataclass, replace
from typing import Callable, List, Tuple

from core.config import DEFAULT_SCORE_FLOOR, ALLOWED_SCORE_FLOORS
from models.findings import Severity
from models.report import Report, ScoreReason

MAX_SCORE = 100


@dataclass(frozen=True)
class ScoreRule:
    tag: str
    count: Callable[[Report], int]
    per_item: int
    cap: int
    description: str # Formatted with the trigger count
    min_count: int = 1 # Rule fires only when count >= min_count
    free_items: int = 0 # Items tolerated before the penalty starts

    def penalty(self, count: int) -> int:
        return min(self.cap, max(0, count - self.free_items) * self.per_item)


def _critical(report: Report) -> int:
    return sum(1 for h in report.hidden_text if h.severity == Severity.CRITICAL)


def _visible_directive(report: Report) -> int:
    return sum(1 for h in report.hidden_text if h.has_directive and not h.hidden)


def _hidden_obfuscated(report: Report) -> int:
    return sum(1 for h in report.hidden_text if h.hidden and (h.base64_like or h.unicode_obfuscated))


def _suspicious_comments(report: Report) -> int:
    return sum(1 for c in report.comments if c.suspect or c.unicode_obfuscated)


def _long_comments(report: Report) -> int:
    return sum(1 for c in report.comments if c.length > 500)


def _attrs(report: Report) -> int:
    return len(report.attrs)


def _unsafe_iframes(report: Report) -> int:
    return sum(1 for f in report.iframes if f.src and not f.has_security_attrs and not f.whitelisted)


def _unsafe_scripts(report: Report) -> int:
    return sum(1 for s in report.scripts if s.src and not s.has_integrity and not s.whitelisted)


def _event_listeners(report: Report) -> int:
    return report.suspicious_event_listener_count


SCORE_RULES: Tuple[ScoreRule, ...] = (
    ScoreRule("critical_injection", _critical, 35, 70,
              "{count} hidden element(s) carrying AI directives"),
    ScoreRule("visible_directive", _visible_directive, 20, 50,
              "{count} visible element(s) containing directive phrases"),
    ScoreRule("hidden_obfuscated", _hidden_obfuscated, 15, 40,
              "{count} hidden element(s) with base64-like or unicode-obfuscated text"),
    ScoreRule("suspicious_comments", _suspicious_comments, 10, 30,
              "{count} suspicious HTML comment(s)"),
    ScoreRule("long_comments", _long_comments, 5, 20,
              "{count} unusually long HTML comments", min_count=3),
    ScoreRule("suspicious_attrs", _attrs, 8, 30,
              "{count} suspicious meta tag(s) or attribute(s)"),
    ScoreRule("unsafe_iframes", _unsafe_iframes, 12, 35,
              "{count} external iframe(s) without sandbox/allow (not whitelisted)"),
    ScoreRule("unsafe_scripts", _unsafe_scripts, 3, 30,
              "{count} external scripts without integrity (not whitelisted)", min_count=6, free_items=5),
    ScoreRule("event_listener_risk", _event_listeners, 5, 25,
              "{count} suspicious inline event handlers", min_count=4),
)


def score_report(report: Report, floor: int = DEFAULT_SCORE_FLOOR) -> Tuple[int, List[ScoreReason]]:
    """
    Compute the score and ordered reasons for a report.

    Returns:
        (score, reasons) where score is clamped to [floor, 100] and each
        reason carries the post-cap penalty of its rule
    """
    if floor not in ALLOWED_SCORE_FLOORS:
        raise ValueError(f"floor must be one of {ALLOWED_SCORE_FLOORS}, got {floor}")

    score = MAX_SCORE
    reasons: List[ScoreReason] = []

    for rule in SCORE_RULES:
        count = rule.count(report)
        if count <= 0 or count < rule.min_count:
            continue
        delta = rule.penalty(count)
        if delta <= 0:
            continue
        score -= delta
        reasons.append(ScoreReason(tag=rule.tag, delta=delta, text=rule.description.format(count=count)))

    score = max(floor, min(MAX_SCORE, score))
    return score, reasons


def apply_score(report: Report, floor: int = DEFAULT_SCORE_FLOOR) -> Report:
    """Return a copy of ``report`` with its score and reasons filled in."""
    score, reasons = score_report(report, floor)
    return replace(report, score=score, score_reasons=reasons)
