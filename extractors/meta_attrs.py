from typing import List
import logging
from core.context import ScanContext
from core.config import ScanConfig
from core.patterns import PatternSet
from core.whitelist import Whitelist
from core.html_utils import normalize_text, truncate, has_unicode_obfuscation, has_embedded_data_uri
from core.extractor_registry import ExtractorRegistry
from models.findings import AttrFinding

# Attributes whose values reach agents as page text
TEXT_ATTRIBUTES = ("alt", "title", "placeholder")

logger = logging.getLogger(__name__)


@ExtractorRegistry.register("meta_attrs", report_field="attrs")
class MetaAttrsExtractor:
    """Flag meta tags and text-bearing attributes that carry directives or payloads."""
    
    def __init__(self, config: ScanConfig, patterns: PatternSet, whitelist: Whitelist):
        self.config = config
        self.patterns = patterns

    def extract(self, context: ScanContext) -> List[AttrFinding]:
        findings: List[AttrFinding] = []
        document = context.document
        
        for meta in document.find_all("meta"):
            combined = normalize_text(
                f"{meta.get('name') or ''} {meta.get('property') or ''} {meta.get('content') or ''}"
            )
            if combined and (self.patterns.matches(combined) or has_unicode_obfuscation(combined)):
                findings.append(
                    AttrFinding(kind="meta", snippet=truncate(combined, self.config.snippet_limit), source_tag="meta")
                )
        
        for element in document.find_all(True):
            values = [element.get(attr) for attr in TEXT_ATTRIBUTES if element.has_attr(attr)]
            values.extend(value for name, value in element.attrs.items() if name.startswith("data-"))
            combined = normalize_text(" ".join(_as_text(v) for v in values))
            if not combined:
                continue
            if (
                self.patterns.matches(combined)
                or has_unicode_obfuscation(combined)
                or has_embedded_data_uri(combined)
            ):
                findings.append(
                    AttrFinding(kind="attr", snippet=truncate(combined, self.config.snippet_limit), source_tag=element.name)
                )
        
        logger.debug(f"MetaAttrsExtractor: {len(findings)} findings")
        return findings


def _as_text(value) -> str:
    # Multi-valued attributes come back from BeautifulSoup as lists
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value or "")
