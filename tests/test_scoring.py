"""Tests for the risk scoring rules."""
import pytest

from core.scoring import score_report, apply_score, SCORE_RULES
from models.findings import (
    HiddenTextFinding,
    CommentFinding,
    ScriptFinding,
    IframeFinding,
    AttrFinding,
    Severity,
)
from models.report import Report

CAPS = {rule.tag: rule.cap for rule in SCORE_RULES}


def hidden_finding(hidden=False, directive=False, base64=False, unicode=False):
    return HiddenTextFinding(
        snippet="text",
        hidden=hidden,
        has_directive=directive,
        base64_like=base64,
        unicode_obfuscated=unicode,
        url_like=False,
        tag="DIV",
        severity=Severity.classify(hidden, directive),
    )


def comment(suspect=False, unicode=False, length=40):
    return CommentFinding(text="comment", suspect=suspect, unicode_obfuscated=unicode, length=length)


def script(src="https://evil-cdn.example.com/x.js", integrity=False, whitelisted=False):
    return ScriptFinding(src=src, inline=src is None, has_integrity=integrity, whitelisted=whitelisted, snippet=src or "")


def iframe(src="https://frames.example.net/", sandbox=None, allow=False, whitelisted=False):
    return IframeFinding(
        src=src,
        sandbox_attr=sandbox,
        has_security_attrs=sandbox is not None or allow,
        whitelisted=whitelisted,
    )


def report(**fields):
    return Report(url="https://example.com", title="Example", **fields)


def test_empty_report_scores_100():
    assert score_report(report()) == (100, [])


def test_single_critical_finding():
    score, reasons = score_report(report(hidden_text=[hidden_finding(hidden=True, directive=True)]))
    assert score == 65
    assert [(r.tag, r.delta) for r in reasons] == [("critical_injection", 35)]
    assert "1 hidden element" in reasons[0].text


def test_critical_penalty_is_capped():
    findings = [hidden_finding(hidden=True, directive=True) for _ in range(3)]
    score, reasons = score_report(report(hidden_text=findings))
    assert reasons[0].delta == 70
    assert score == 30


def test_visible_directive():
    score, reasons = score_report(report(hidden_text=[hidden_finding(directive=True)]))
    assert [(r.tag, r.delta) for r in reasons] == [("visible_directive", 20)]
    assert score == 80


def test_hidden_obfuscated():
    score, reasons = score_report(report(hidden_text=[hidden_finding(hidden=True, base64=True)]))
    assert [(r.tag, r.delta) for r in reasons] == [("hidden_obfuscated", 15)]
    assert score == 85


def test_reasons_follow_rule_order():
    findings = [
        hidden_finding(hidden=True, unicode=True),
        hidden_finding(hidden=True, directive=True, base64=True),
    ]
    score, reasons = score_report(report(hidden_text=findings, attrs=[AttrFinding(kind="meta", snippet="x")]))
    assert [r.tag for r in reasons] == ["critical_injection", "hidden_obfuscated", "suspicious_attrs"]
    assert [r.delta for r in reasons] == [35, 30, 8]
    assert score == 27


def test_suspicious_comments():
    comments = [comment(suspect=True), comment(unicode=True), comment()]
    score, reasons = score_report(report(comments=comments))
    assert [(r.tag, r.delta) for r in reasons] == [("suspicious_comments", 20)]
    assert score == 80


def test_long_comments_need_more_than_two():
    score, reasons = score_report(report(comments=[comment(length=600), comment(length=600)]))
    assert (score, reasons) == (100, [])

    score, reasons = score_report(report(comments=[comment(length=600) for _ in range(3)]))
    assert [(r.tag, r.delta) for r in reasons] == [("long_comments", 15)]
    assert score == 85


def test_comment_of_exactly_500_is_not_long():
    score, _ = score_report(report(comments=[comment(length=500) for _ in range(5)]))
    assert score == 100


def test_unsafe_iframes():
    frames = [
        iframe(),
        iframe(sandbox="allow-scripts"),
        iframe(allow=True),
        iframe(whitelisted=True),
        iframe(src=None),
    ]
    score, reasons = score_report(report(iframes=frames))
    assert [(r.tag, r.delta) for r in reasons] == [("unsafe_iframes", 12)]
    assert score == 88


@pytest.mark.parametrize("count,expected_delta", [(5, None), (6, 3), (8, 9), (15, 30), (40, 30)])
def test_unsafe_scripts(count, expected_delta):
    score, reasons = score_report(report(scripts=[script() for _ in range(count)]))
    if expected_delta is None:
        assert reasons == []
        assert score == 100
    else:
        assert [(r.tag, r.delta) for r in reasons] == [("unsafe_scripts", expected_delta)]
        assert score == 100 - expected_delta


def test_safe_scripts_are_not_counted():
    scripts = (
        [script(integrity=True) for _ in range(10)]
        + [script(whitelisted=True) for _ in range(10)]
        + [script(src=None) for _ in range(10)]
    )
    assert score_report(report(scripts=scripts)) == (100, [])


@pytest.mark.parametrize("count,expected_delta", [(3, None), (4, 20), (10, 25)])
def test_event_listener_risk(count, expected_delta):
    score, reasons = score_report(report(suspicious_event_listener_count=count))
    if expected_delta is None:
        assert reasons == []
    else:
        assert [(r.tag, r.delta) for r in reasons] == [("event_listener_risk", expected_delta)]
        assert score == 100 - expected_delta


def _worst_report():
    return report(
        hidden_text=(
            [hidden_finding(hidden=True, directive=True, base64=True) for _ in range(10)]
            + [hidden_finding(directive=True) for _ in range(10)]
        ),
        comments=[comment(suspect=True, length=900) for _ in range(10)],
        scripts=[script() for _ in range(50)],
        iframes=[iframe() for _ in range(10)],
        attrs=[AttrFinding(kind="attr", snippet="x", source_tag="img") for _ in range(10)],
        suspicious_event_listener_count=50,
    )


def test_caps_hold_for_every_rule():
    _, reasons = score_report(_worst_report())
    assert len(reasons) == len(SCORE_RULES)
    for reason in reasons:
        assert reason.delta == CAPS[reason.tag]


@pytest.mark.parametrize("floor", [0, 10])
def test_score_clamped_to_floor(floor):
    score, reasons = score_report(_worst_report(), floor=floor)
    assert score == floor
    assert sum(r.delta for r in reasons) > 100 - score


def test_invalid_floor_rejected():
    with pytest.raises(ValueError):
        score_report(report(), floor=5)


def test_deltas_sum_to_penalty_without_clamp():
    r = report(
        hidden_text=[hidden_finding(directive=True)],
        iframes=[iframe()],
        suspicious_event_listener_count=4,
    )
    score, reasons = score_report(r)
    assert sum(reason.delta for reason in reasons) == 100 - score


def test_scoring_is_idempotent():
    r = _worst_report()
    assert score_report(r) == score_report(r)


def test_more_critical_findings_never_raise_score():
    findings = []
    previous = score_report(report())[0]
    for _ in range(5):
        findings.append(hidden_finding(hidden=True, directive=True))
        current = score_report(report(hidden_text=list(findings), scripts=[script() for _ in range(7)]))[0]
        assert current <= previous
        previous = current


def test_apply_score_returns_new_report():
    original = report(hidden_text=[hidden_finding(hidden=True, directive=True)])
    scored = apply_score(original)
    assert original.score is None
    assert scored.score == 65
    assert scored.score_reasons[0].tag == "critical_injection"
    assert scored.hidden_text == original.hidden_text


def test_report_findings_cannot_be_mutated():
    findings = [hidden_finding(hidden=True, directive=True)]
    original = report(hidden_text=findings)
    scored = apply_score(original)

    findings.append(hidden_finding())
    assert len(original.hidden_text) == 1
    assert isinstance(scored.hidden_text, tuple)
    assert isinstance(scored.score_reasons, tuple)
    with pytest.raises(AttributeError):
        scored.hidden_text.append(hidden_finding())
