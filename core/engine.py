import time
import logging
from pathlib import Path
from typing import Callable, List, Optional, Set, Union

from core.config import ScanConfig
from core.context import ScanContext
from core.extractor_registry import ExtractorRegistry
from core.html_utils import parse_document, page_title
from core.patterns import PatternSet
from core.pipeline import Pipeline
from core.scoring import apply_score
from core.style import StyleProvider, GeometryProvider, InlineStyleProvider, InlineGeometryProvider
from core.whitelist import Whitelist
from fetch.http_client import fetch_page

# Import all extractors to trigger @ExtractorRegistry.register decorators
import extractors.hidden_text
import extractors.comments
import extractors.embeds
import extractors.meta_attrs
import extractors.event_listeners

from models.report import Report, ErrorReport
from rules.rules_loader import load_directive_patterns

ScanResult = Union[Report, ErrorReport]
ReportSink = Callable[[ScanResult], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class Engine:
    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        exclude_extractors: Set[str] = None,
        sinks: Optional[List[ReportSink]] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """Initialize the engine with the registered extractors.

        Args:
            config: Scan configuration (defaults to ScanConfig())
            exclude_extractors: Set of extractor names to skip (e.g., {'comments'})
            sinks: Callables receiving every finished report
            clock: Returns the report timestamp in milliseconds
        """
        self.logger = logging.getLogger(__name__)
        self.config = config or ScanConfig()
        self.patterns = PatternSet(load_directive_patterns(self.config.patterns_file))
        self.logger.info(f"Loaded {len(self.patterns)} directive patterns")
        self.whitelist = Whitelist.from_file(self.config.whitelist_file)
        self.clock = clock
        self.sinks: List[ReportSink] = list(sinks or [])

        self.extractors = ExtractorRegistry.instantiate_all(
            self.config, self.patterns, self.whitelist, exclude=exclude_extractors
        )
        self.pipeline = Pipeline(self.extractors, ExtractorRegistry.get_fields())
        self.logger.info(f"Initialized {len(self.extractors)} extractors")

        if exclude_extractors:
            self.logger.info(f"Excluded extractors: {', '.join(sorted(exclude_extractors))}")

    def add_sink(self, sink: ReportSink) -> None:
        self.sinks.append(sink)

    def build_context(
        self,
        html: str,
        url: str = "",
        styles: Optional[StyleProvider] = None,
        geometry: Optional[GeometryProvider] = None,
    ) -> ScanContext:
        document = parse_document(html)
        viewport = self.config.viewport
        return ScanContext(
            url=url,
            title=page_title(document),
            document=document,
            viewport=viewport,
            # Fresh providers per scan; they cache per element
            styles=styles or InlineStyleProvider(viewport),
            geometry=geometry or InlineGeometryProvider(viewport),
        )

    def extract(self, context: ScanContext) -> Report:
        """Run the extractors and assemble an unscored report."""
        results = self.pipeline.run(context)
        return Report(url=context.url, title=context.title, timestamp=self.clock(), **results)

    def scan_html(
        self,
        html: str,
        url: str = "",
        styles: Optional[StyleProvider] = None,
        geometry: Optional[GeometryProvider] = None,
    ) -> ScanResult:
        """Scan an HTML document and deliver the scored report.

        Never raises: any failure becomes an ErrorReport.
        """
        try:
            context = self.build_context(html, url, styles=styles, geometry=geometry)
            report = apply_score(self.extract(context), floor=self.config.score_floor)
            self.logger.info(
                f"Scanned {url or '(document)'}: score {report.score}, "
                f"{report.finding_count} findings, {len(report.score_reasons)} reasons"
            )
        except Exception as e:
            self.logger.error(f"Scan failed for {url or '(document)'}: {e}", exc_info=True)
            report = ErrorReport(url=url, error=str(e) or e.__class__.__name__, timestamp=self.clock())
        self._deliver(report)
        return report

    async def scan_url(self, url: str, headers: Optional[dict] = None) -> ScanResult:
        """Fetch ``url`` and scan it. Fetch failures become an ErrorReport."""
        self.logger.debug(f"Starting scan_url for {url}")
        try:
            page = await fetch_page(url, headers=headers)
        except Exception as e:
            self.logger.error(f"Could not fetch {url}: {e}")
            report = ErrorReport(url=url, error=str(e) or e.__class__.__name__, timestamp=self.clock())
            self._deliver(report)
            return report
        self.logger.info(f"Fetched {page.url}, status: {page.status_code}")
        return self.scan_html(page.html, page.url)

    def scan_file(self, path: str, url: Optional[str] = None) -> ScanResult:
        """Scan a saved HTML file; ``url`` resolves relative script and iframe sources."""
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                html = f.read()
        except OSError as e:
            self.logger.error(f"Could not read {path}: {e}")
            report = ErrorReport(url=url or Path(path).resolve().as_uri(), error=str(e), timestamp=self.clock())
            self._deliver(report)
            return report
        return self.scan_html(html, url or Path(path).resolve().as_uri())

    def _deliver(self, report: ScanResult) -> None:
        for sink in self.sinks:
            try:
                sink(report)
            except Exception as e:
                self.logger.error(f"Report sink {sink!r} failed: {e}", exc_info=True)
