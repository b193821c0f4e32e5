from typing import List, Set
import logging
from bs4 import Tag
from core.context import ScanContext
from core.config import ScanConfig
from core.patterns import PatternSet
from core.whitelist import Whitelist
from core.hidden import is_hidden
from core.html_utils import (
    NON_RENDERED_TAGS,
    iter_body_elements,
    rendered_text,
    truncate,
    is_base64_like,
    has_unicode_obfuscation,
    is_url_like,
)
from core.extractor_registry import ExtractorRegistry
from models.findings import HiddenTextFinding, Severity

logger = logging.getLogger(__name__)


@ExtractorRegistry.register("hidden_text", report_field="hidden_text")
class HiddenTextExtractor:
    """Find element text that is hidden, directive-like, or obfuscated."""
    
    def __init__(self, config: ScanConfig, patterns: PatternSet, whitelist: Whitelist):
        self.config = config
        self.patterns = patterns

    def extract(self, context: ScanContext) -> List[HiddenTextFinding]:
        findings: List[HiddenTextFinding] = []
        seen: Set[str] = set()
        visited = 0
        
        for element in iter_body_elements(context.document):
            if element.name in NON_RENDERED_TAGS:
                continue
            text = rendered_text(element)
            if len(text) < self.config.min_text_length:
                continue
            
            # Nested elements sharing the same leading text are reported once
            fingerprint = text[:self.config.dedupe_prefix]
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            visited += 1
            
            has_directive = self.patterns.matches(text)
            base64_like = is_base64_like(text)
            unicode_obfuscated = has_unicode_obfuscation(text)
            hidden = self._is_hidden(element, context)
            
            if not (hidden or has_directive or base64_like or unicode_obfuscated):
                continue
            
            findings.append(
                HiddenTextFinding(
                    snippet=truncate(text, self.config.snippet_limit),
                    hidden=hidden,
                    has_directive=has_directive,
                    base64_like=base64_like,
                    unicode_obfuscated=unicode_obfuscated,
                    url_like=is_url_like(text),
                    tag=element.name.upper(),
                    severity=Severity.classify(hidden, has_directive),
                )
            )
        
        logger.debug(f"HiddenTextExtractor: {visited} text blocks checked, {len(findings)} findings")
        return findings

    def _is_hidden(self, element: Tag, context: ScanContext) -> bool:
        try:
            style = context.styles.computed_style(element)
            box = context.geometry.bounding_box(element)
        except Exception as e:
            logger.debug(f"Style introspection failed for <{element.name}>: {e}")
            return False
        return is_hidden(style, box, context.viewport)
