from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple

from models.findings import (
    HiddenTextFinding,
    CommentFinding,
    ScriptFinding,
    IframeFinding,
    AttrFinding,
)


@dataclass(frozen=True)
class ScoreReason:
    """One fired scoring rule: its tag, the penalty applied, and a description."""
    tag: str
    delta: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "delta": self.delta, "text": self.text}


@dataclass(frozen=True)
class Report:
    """Snapshot of a single page scan.

    Built once by the engine; scoring produces a copy with ``score`` and
    ``score_reasons`` filled in.
    """
    url: str
    title: str
    hidden_text: Tuple[HiddenTextFinding, ...] = ()
    comments: Tuple[CommentFinding, ...] = ()
    scripts: Tuple[ScriptFinding, ...] = ()
    iframes: Tuple[IframeFinding, ...] = ()
    attrs: Tuple[AttrFinding, ...] = ()
    suspicious_event_listener_count: int = 0
    timestamp: int = 0 # Milliseconds since epoch
    score: Optional[int] = None # Set by scoring
    score_reasons: Tuple[ScoreReason, ...] = ()

    def __post_init__(self):
        # Findings arrive as lists from the extractors; store them immutably
        for name in ("hidden_text", "comments", "scripts", "iframes", "attrs", "score_reasons"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def finding_count(self) -> int:
        return (
            len(self.hidden_text)
            + len(self.comments)
            + len(self.scripts)
            + len(self.iframes)
            + len(self.attrs)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "hidden_text": [f.to_dict() for f in self.hidden_text],
            "comments": [f.to_dict() for f in self.comments],
            "scripts": [f.to_dict() for f in self.scripts],
            "iframes": [f.to_dict() for f in self.iframes],
            "attrs": [f.to_dict() for f in self.attrs],
            "suspicious_event_listener_count": self.suspicious_event_listener_count,
            "timestamp": self.timestamp,
            "score": self.score,
            "score_reasons": [r.to_dict() for r in self.score_reasons],
        }


@dataclass(frozen=True)
class ErrorReport:
    """Degraded report produced when a scan phase fails."""
    url: str
    error: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "error": self.error, "timestamp": self.timestamp}
