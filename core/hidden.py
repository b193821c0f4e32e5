"""Hidden-element heuristic.

Decides whether an element is rendered but not perceivable to a human
viewer. The decision is a pure function of the element's computed style, its
bounding box and the viewport; providers that fetch those values live in
``core.style``.
"""
import re
import logging
from typing import Optional

from core.style import ComputedStyle, BoundingBox, Viewport, is_transparent

OPACITY_THRESHOLD = 0.12
MIN_FONT_SIZE_PX = 2.0
MAX_TEXT_INDENT_PX = 200.0
NEAR_ZERO_AREA_PX = 1.0
MIN_BRIGHTNESS_DELTA = 10.0

_RGB_RE = re.compile(r"rgba?\(\s*(\d+(?:\.\d+)?)[,\s]+(\d+(?:\.\d+)?)[,\s]+(\d+(?:\.\d+)?)", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^\s*(-?\d*\.?\d+)(?:px)?\s*$", re.IGNORECASE)
_RECT_RE = re.compile(r"rect\(([^)]*)\)", re.IGNORECASE)

logger = logging.getLogger(__name__)


def perceived_brightness(color: Optional[str]) -> Optional[float]:
    """Perceived brightness of an ``rgb()``/``rgba()`` color, or None if unparseable."""
    match = _RGB_RE.search(str(color or ""))
    if not match:
        return None
    r, g, b = (float(v) for v in match.groups())
    return 0.299 * r + 0.587 * g + 0.114 * b


def _css_number(value: Optional[str]) -> Optional[float]:
    match = _NUMBER_RE.match(str(value or ""))
    return float(match.group(1)) if match else None


def _clip_is_empty(clip: Optional[str]) -> bool:
    match = _RECT_RE.search(str(clip or ""))
    if not match:
        return False
    parts = [p for p in re.split(r"[,\s]+", match.group(1).strip()) if p]
    if len(parts) != 4 or any(p.lower() == "auto" for p in parts):
        return False
    edges = [_css_number(p) for p in parts]
    if any(e is None for e in edges):
        return False
    top, right, bottom, left = edges
    return bottom <= top or right <= left


def _outside_viewport(box: BoundingBox, viewport: Viewport) -> bool:
    return (
        box.right <= 0
        or box.bottom <= 0
        or box.x >= viewport.width
        or box.y >= viewport.height
    )


def _low_contrast(style: ComputedStyle) -> bool:
    if is_transparent(style.background_color):
        return False
    fg = perceived_brightness(style.color)
    bg = perceived_brightness(style.background_color)
    if fg is None or bg is None:
        return False
    return abs(fg - bg) < MIN_BRIGHTNESS_DELTA


def is_hidden(style: ComputedStyle, box: Optional[BoundingBox] = None, viewport: Optional[Viewport] = None) -> bool:
    """Return True if any hiding technique applies.

    Values that fail to parse only disable their own check. Any other error
    is treated as "not hidden".
    """
    try:
        if style.display.strip().lower() == "none" or style.visibility.strip().lower() == "hidden":
            return True

        opacity = _css_number(style.opacity)
        if opacity is not None and opacity < OPACITY_THRESHOLD:
            return True

        font_size = _css_number(style.font_size)
        if font_size is not None and font_size < MIN_FONT_SIZE_PX:
            return True

        text_indent = _css_number(style.text_indent)
        if text_indent is not None and abs(text_indent) > MAX_TEXT_INDENT_PX:
            return True

        if box is not None and viewport is not None and _outside_viewport(box, viewport):
            return True

        if _clip_is_empty(style.clip):
            return True
        if box is not None and style.overflow.strip().lower() == "hidden" and box.area <= NEAR_ZERO_AREA_PX:
            return True

        return _low_contrast(style)
    except Exception as e:
        logger.debug(f"Hidden check failed, treating element as visible: {e}")
        return False
