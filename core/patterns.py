"""Compiled directive pattern set with per-search timeouts."""
import logging
from typing import List, Optional, Sequence

import regex

from models.rules import DirectivePattern

# Hard timeout per search to prevent catastrophic backtracking (seconds)
PATTERN_TIMEOUT_SECONDS = 0.3

logger = logging.getLogger(__name__)


class PatternSet:
    """A replaceable set of case-insensitive regexes matched against normalized text."""

    def __init__(self, patterns: Sequence[DirectivePattern], timeout: float = PATTERN_TIMEOUT_SECONDS):
        self.patterns: List[DirectivePattern] = list(patterns)
        self.timeout = timeout
        self._compiled = [(p, regex.compile(p.pattern, regex.IGNORECASE)) for p in self.patterns]

    @classmethod
    def from_strings(cls, patterns: Sequence[str], category: str = "custom", **kwargs) -> "PatternSet":
        return cls([DirectivePattern(category=category, pattern=p) for p in patterns], **kwargs)

    def __len__(self) -> int:
        return len(self.patterns)

    def search(self, text: str) -> Optional[DirectivePattern]:
        """Return the first pattern matching ``text``, or None."""
        if not text:
            return None
        for pattern, compiled in self._compiled:
            try:
                if compiled.search(text, timeout=self.timeout):
                    return pattern
            except TimeoutError:
                logger.warning(f"Pattern timeout for {pattern.pattern[:50]}... on {len(text)} chars")
        return None

    def matches(self, text: str) -> bool:
        return self.search(text) is not None
