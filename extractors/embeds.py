from typing import List, Optional
from urllib.parse import urljoin
import logging
from bs4 import Tag
from core.context import ScanContext
from core.config import ScanConfig
from core.patterns import PatternSet
from core.whitelist import Whitelist
from core.html_utils import normalize_text, truncate
from core.extractor_registry import ExtractorRegistry
from models.findings import ScriptFinding, IframeFinding

logger = logging.getLogger(__name__)


def _resolve_src(element: Tag, base_url: str) -> Optional[str]:
    src = (element.get("src") or "").strip()
    if not src:
        return None
    return urljoin(base_url, src) if base_url else src


@ExtractorRegistry.register("scripts", report_field="scripts")
class ScriptsExtractor:
    """Record every script with its integrity and whitelist status."""
    
    def __init__(self, config: ScanConfig, patterns: PatternSet, whitelist: Whitelist):
        self.config = config
        self.whitelist = whitelist

    def extract(self, context: ScanContext) -> List[ScriptFinding]:
        findings: List[ScriptFinding] = []
        for script in context.document.find_all("script"):
            src = _resolve_src(script, context.url)
            if src:
                snippet = src
            else:
                snippet = truncate(normalize_text(script.string or script.get_text()), self.config.snippet_limit)
            findings.append(
                ScriptFinding(
                    src=src,
                    inline=src is None,
                    has_integrity=bool((script.get("integrity") or "").strip()),
                    whitelisted=self.whitelist.contains(src),
                    snippet=snippet,
                )
            )
        
        external = sum(1 for f in findings if f.src)
        logger.debug(f"ScriptsExtractor: {len(findings)} scripts ({external} external)")
        return findings


@ExtractorRegistry.register("iframes", report_field="iframes")
class IframesExtractor:
    """Record every iframe with its sandbox/allow attributes and whitelist status."""
    
    def __init__(self, config: ScanConfig, patterns: PatternSet, whitelist: Whitelist):
        self.whitelist = whitelist

    def extract(self, context: ScanContext) -> List[IframeFinding]:
        findings: List[IframeFinding] = []
        for iframe in context.document.find_all("iframe"):
            src = _resolve_src(iframe, context.url)
            sandbox = iframe.get("sandbox")
            # BeautifulSoup splits sandbox tokens into a list
            if isinstance(sandbox, list):
                sandbox = " ".join(sandbox)
            findings.append(
                IframeFinding(
                    src=src,
                    sandbox_attr=sandbox,
                    has_security_attrs=iframe.has_attr("sandbox") or iframe.has_attr("allow"),
                    whitelisted=self.whitelist.contains(src),
                )
            )
        logger.debug(f"IframesExtractor: {len(findings)} iframes")
        return findings
