"""Helpers for parsing HTML and normalizing extracted text."""
import re
import logging
from typing import Iterator, Optional

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, Comment, Declaration, Doctype, ProcessingInstruction

# Elements whose content is never rendered as text
NON_RENDERED_TAGS = frozenset({"script", "style", "template", "noscript"})

_WHITESPACE_RE = re.compile(r"\s+")
_BASE64_RE = re.compile(r"[A-Za-z0-9+/]{30,}={0,2}")
_URL_RE = re.compile(r"\bhttps?://[^\s\"'<>]+|\bwww\.[a-z0-9-]+\.[a-z]{2,}", re.IGNORECASE)
_UNICODE_OBFUSCATION_RANGES = (
    # zero-width
    (0x200B, 0x200D), (0x2060, 0x2060), (0xFEFF, 0xFEFF),
    # bidi controls
    (0x200E, 0x200F), (0x061C, 0x061C), (0x202A, 0x202E), (0x2066, 0x2069),
    # combining marks
    (0x0300, 0x036F), (0x1AB0, 0x1AFF), (0x1DC0, 0x1DFF), (0x20D0, 0x20FF), (0xFE20, 0xFE2F),
)
_UNICODE_OBFUSCATION_RE = re.compile(
    "[" + "".join(f"{chr(lo)}-{chr(hi)}" for lo, hi in _UNICODE_OBFUSCATION_RANGES) + "]"
)
_DATA_URI_RE = re.compile(r"data:(?:text/html|image/svg\+xml|application/)", re.IGNORECASE)

_SKIPPED_STRING_TYPES = (Comment, Declaration, Doctype, ProcessingInstruction)

logger = logging.getLogger(__name__)


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def normalize_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", str(text or "")).strip()


def truncate(text: str, limit: int) -> str:
    if limit <= 0:
        return text
    return text[:limit]


def rendered_text(element: Tag) -> str:
    """Text content of ``element``, without comments or non-rendered descendants."""
    parts = []
    for node in element.descendants:
        if not isinstance(node, NavigableString) or isinstance(node, _SKIPPED_STRING_TYPES):
            continue
        if any(parent.name in NON_RENDERED_TAGS for parent in _parents_within(node, element)):
            continue
        parts.append(str(node))
    return normalize_text("".join(parts))


def _parents_within(node, root: Tag) -> Iterator[Tag]:
    parent = node.parent
    while parent is not None:
        yield parent
        if parent is root:
            return
        parent = parent.parent


def iter_body_elements(document: BeautifulSoup) -> Iterator[Tag]:
    """Yield every element below <body> in document order."""
    if document.body is not None:
        yield from document.body.find_all(True)
        return
    # Fragments without a <body>: everything outside <head>
    for element in document.find_all(True):
        if element.name in ("html", "head") or element.find_parent("head") is not None:
            continue
        yield element


def is_base64_like(text: str) -> bool:
    return bool(_BASE64_RE.search(text or ""))


def has_unicode_obfuscation(text: str) -> bool:
    return bool(_UNICODE_OBFUSCATION_RE.search(text or ""))


def is_url_like(text: str) -> bool:
    return bool(_URL_RE.search(text or ""))


def has_embedded_data_uri(text: str) -> bool:
    """True if ``text`` embeds a data: URI carrying HTML, SVG or application content."""
    return bool(_DATA_URI_RE.search(text or ""))


def page_title(document: BeautifulSoup) -> str:
    if document.title and document.title.string:
        return normalize_text(document.title.string)
    return ""
