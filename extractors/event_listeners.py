from typing import Optional, Sequence
import logging
from core.context import ScanContext
from core.config import ScanConfig
from core.patterns import PatternSet
from core.whitelist import Whitelist
from core.config_loader import load_listener_patterns
from core.html_utils import normalize_text
from core.extractor_registry import ExtractorRegistry

logger = logging.getLogger(__name__)


@ExtractorRegistry.register("event_listeners", report_field="suspicious_event_listener_count")
class EventListenersExtractor:
    """Count inline on* handlers whose code looks like payload delivery."""
    
    def __init__(
        self,
        config: ScanConfig,
        patterns: PatternSet,
        whitelist: Whitelist,
        listener_patterns: Optional[Sequence[str]] = None,
    ):
        self.patterns = patterns
        if listener_patterns is None:
            listener_patterns = load_listener_patterns()
        self.listener_patterns = PatternSet.from_strings(listener_patterns, category="listener")

    def extract(self, context: ScanContext) -> int:
        count = 0
        handlers = 0
        for element in context.document.find_all(True):
            for name, value in element.attrs.items():
                if not name.lower().startswith("on"):
                    continue
                handlers += 1
                code = normalize_text(value if isinstance(value, str) else " ".join(value))
                if self.listener_patterns.matches(code) or self.patterns.matches(code):
                    count += 1
        logger.debug(f"EventListenersExtractor: {count} of {handlers} inline handlers suspicious")
        return count
