from typing import List, Optional, Sequence
import re
import logging
from bs4.element import Comment
from core.context import ScanContext
from core.config import ScanConfig
from core.patterns import PatternSet
from core.whitelist import Whitelist
from core.config_loader import load_benign_comment_markers
from core.html_utils import normalize_text, truncate, has_unicode_obfuscation
from core.extractor_registry import ExtractorRegistry
from models.findings import CommentFinding

# Build ids and CSS scope markers, e.g. "css_build_scope:abc123"
IDENTIFIER_RE = re.compile(r'^[a-z0-9_\-:]+$', re.IGNORECASE)
IDENTIFIER_MAX_LENGTH = 80
SOURCE_MAP_RE = re.compile(r'^[#@]\s*source(?:Mapping)?URL=', re.IGNORECASE)

logger = logging.getLogger(__name__)


@ExtractorRegistry.register("comments", report_field="comments")
class CommentsExtractor:
    """Report HTML comments carrying directives, obfuscation, or long payloads."""
    
    def __init__(
        self,
        config: ScanConfig,
        patterns: PatternSet,
        whitelist: Whitelist,
        benign_markers: Optional[Sequence[str]] = None,
    ):
        self.config = config
        self.patterns = patterns
        if benign_markers is None:
            benign_markers = load_benign_comment_markers()
        self.benign_markers = [re.compile(m, re.IGNORECASE) for m in benign_markers]

    def extract(self, context: ScanContext) -> List[CommentFinding]:
        findings: List[CommentFinding] = []
        comments = context.document.find_all(string=lambda s: isinstance(s, Comment))
        
        for comment in comments:
            text = normalize_text(comment)
            if len(text) < self.config.min_comment_length or self._is_benign(text):
                continue
            
            suspect = self.patterns.matches(text)
            unicode_obfuscated = has_unicode_obfuscation(text)
            if not (suspect or unicode_obfuscated or len(text) > self.config.long_comment_length):
                continue
            
            findings.append(
                CommentFinding(
                    text=truncate(text, self.config.snippet_limit),
                    suspect=suspect,
                    unicode_obfuscated=unicode_obfuscated,
                    length=len(text),
                )
            )
        
        logger.debug(f"CommentsExtractor: {len(comments)} comments, {len(findings)} findings")
        return findings

    def _is_benign(self, text: str) -> bool:
        if len(text) < IDENTIFIER_MAX_LENGTH and IDENTIFIER_RE.match(text):
            return True
        if SOURCE_MAP_RE.match(text):
            return True
        return any(marker.search(text) for marker in self.benign_markers)
