"""Scan configuration shared by the engine, extractors and scorer."""
from dataclasses import dataclass, field
from typing import Optional

from core.style import Viewport

DEFAULT_SNIPPET_LIMIT = 250
DEFAULT_MIN_TEXT_LENGTH = 10
DEFAULT_MIN_COMMENT_LENGTH = 5
DEFAULT_LONG_COMMENT_LENGTH = 200 # Comments longer than this are reported
DEFAULT_DEDUPE_PREFIX = 100
DEFAULT_SCORE_FLOOR = 10

# Two floor policies are supported: 0 (raw score) or 10 (never report a flat zero)
ALLOWED_SCORE_FLOORS = (0, 10)


@dataclass(frozen=True)
class ScanConfig:
    patterns_file: Optional[str] = None # None uses rules/directives.yaml
    whitelist_file: Optional[str] = None
    snippet_limit: int = DEFAULT_SNIPPET_LIMIT
    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH
    min_comment_length: int = DEFAULT_MIN_COMMENT_LENGTH
    long_comment_length: int = DEFAULT_LONG_COMMENT_LENGTH
    dedupe_prefix: int = DEFAULT_DEDUPE_PREFIX
    score_floor: int = DEFAULT_SCORE_FLOOR
    viewport: Viewport = field(default_factory=Viewport)

    def __post_init__(self):
        if self.score_floor not in ALLOWED_SCORE_FLOORS:
            raise ValueError(f"score_floor must be one of {ALLOWED_SCORE_FLOORS}, got {self.score_floor}")
        if self.snippet_limit <= 0:
            raise ValueError(f"snippet_limit must be positive, got {self.snippet_limit}")
        for name in ("min_text_length", "min_comment_length", "long_comment_length", "dedupe_prefix"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
