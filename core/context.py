from dataclasses import dataclass
from bs4 import BeautifulSoup

from core.style import StyleProvider, GeometryProvider, Viewport


@dataclass(frozen=True)
class ScanContext:
    url: str
    title: str
    document: BeautifulSoup # Parsed page
    viewport: Viewport
    styles: StyleProvider
    geometry: GeometryProvider
