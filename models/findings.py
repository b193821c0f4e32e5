from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Optional


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def classify(cls, hidden: bool, has_directive: bool) -> "Severity":
        """Derive severity from the hidden and directive signals."""
        if hidden and has_directive:
            return cls.CRITICAL
        if has_directive:
            return cls.HIGH
        if hidden:
            return cls.MEDIUM
        return cls.LOW


@dataclass(frozen=True)
class HiddenTextFinding:
    """Element text that is hidden, directive-like, or obfuscated."""
    snippet: str
    hidden: bool
    has_directive: bool
    base64_like: bool
    unicode_obfuscated: bool
    url_like: bool
    tag: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class CommentFinding:
    text: str
    suspect: bool # Matched a directive pattern
    unicode_obfuscated: bool
    length: int # Normalized length before truncation

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScriptFinding:
    src: Optional[str] # None for inline scripts
    inline: bool
    has_integrity: bool
    whitelisted: bool
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class IframeFinding:
    src: Optional[str]
    sandbox_attr: Optional[str] # Literal sandbox value, None when the attribute is absent
    has_security_attrs: bool
    whitelisted: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AttrFinding:
    """A meta tag or element attribute set that carries suspicious content."""
    kind: str # "meta" or "attr"
    snippet: str
    source_tag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
