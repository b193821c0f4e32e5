"""Computed style and geometry capabilities for the hidden-element heuristic.

A live browser would answer these questions with ``getComputedStyle`` and
``getBoundingClientRect``. Without a renderer we answer them from inline
``style`` attributes, CSS inheritance and a few user-agent defaults. Anything
richer (a headless browser, a stylesheet cascade) plugs in by implementing
``StyleProvider`` and ``GeometryProvider``.
"""
import re
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from bs4 import Tag

from core.html_utils import NON_RENDERED_TAGS

ROOT_FONT_SIZE_PX = 16.0

FONT_SIZE_KEYWORDS = {
    "xx-small": 9.0,
    "x-small": 10.0,
    "small": 13.0,
    "medium": 16.0,
    "large": 18.0,
    "x-large": 24.0,
    "xx-large": 32.0,
    "xxx-large": 48.0,
}

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "whitesmoke": (245, 245, 245),
    "snow": (255, 250, 250),
    "ivory": (255, 255, 240),
}

TRANSPARENT = "rgba(0, 0, 0, 0)"

_LENGTH_RE = re.compile(r"^(-?\d*\.?\d+)(px|em|rem|pt|%)?$", re.IGNORECASE)
_HEX_COLOR_RE = re.compile(r"#([0-9a-f]{3,8})\b", re.IGNORECASE)
_FUNC_COLOR_RE = re.compile(r"rgba?\([^)]*\)", re.IGNORECASE)
_ALPHA_RE = re.compile(r"rgba\(\s*\d+[,\s]+\d+[,\s]+\d+[,\s/]+([\d.]+)\s*\)", re.IGNORECASE)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComputedStyle:
    """The subset of resolved CSS values the hidden heuristic looks at."""
    display: str = "inline"
    visibility: str = "visible"
    opacity: str = "1"
    font_size: str = "16px"
    text_indent: str = "0px"
    clip: str = "auto"
    overflow: str = "visible"
    color: str = "rgb(0, 0, 0)"
    background_color: str = TRANSPARENT # Effective background, resolved through ancestors


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Viewport:
    width: float = 1280
    height: float = 800

    @classmethod
    def parse(cls, value: str) -> "Viewport":
        """Parse a ``WIDTHxHEIGHT`` string such as ``1280x800``."""
        try:
            width, height = (float(part) for part in value.lower().split("x"))
        except ValueError:
            raise ValueError(f"Invalid viewport '{value}', expected WIDTHxHEIGHT")
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport dimensions must be positive, got {value}")
        return cls(width=width, height=height)


class StyleProvider:
    """Capability interface: resolve the computed style of an element."""

    def computed_style(self, element: Tag) -> ComputedStyle:
        raise NotImplementedError


class GeometryProvider:
    """Capability interface: resolve the bounding box of an element, if known."""

    def bounding_box(self, element: Tag) -> Optional[BoundingBox]:
        raise NotImplementedError


def parse_inline_style(style_attr: Optional[str]) -> Dict[str, str]:
    """Parse a ``style`` attribute into lower-cased property -> value."""
    declarations: Dict[str, str] = {}
    if not style_attr:
        return declarations
    for declaration in str(style_attr).split(";"):
        prop, sep, value = declaration.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = re.sub(r"\s*!important\s*$", "", value.strip(), flags=re.IGNORECASE)
        if prop and value:
            declarations[prop] = value
    return declarations


def resolve_length(
    value: Optional[str],
    base_font_px: float = ROOT_FONT_SIZE_PX,
    percent_base: Optional[float] = None,
) -> Optional[float]:
    """Convert a CSS length to px; None when the unit cannot be resolved.

    Percentages resolve against ``percent_base`` (the parent font size for
    ``font-size``, the containing block for box properties) and are
    unresolvable without one.
    """
    if value is None:
        return None
    value = value.strip().lower()
    if value in FONT_SIZE_KEYWORDS:
        return FONT_SIZE_KEYWORDS[value]
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    number = float(match.group(1))
    unit = (match.group(2) or "").lower()
    if unit == "px" or (unit == "" and number == 0):
        return number
    if unit == "em":
        return number * base_font_px
    if unit == "rem":
        return number * ROOT_FONT_SIZE_PX
    if unit == "pt":
        return number * 4 / 3
    if unit == "%":
        if percent_base is None:
            return None
        return number * percent_base / 100
    return None


def normalize_color(value: Optional[str]) -> Optional[str]:
    """Normalize a CSS color (or a ``background`` shorthand) to ``rgb()``/``rgba()``."""
    if not value:
        return None
    value = value.strip().lower()
    if value == "transparent":
        return TRANSPARENT
    func = _FUNC_COLOR_RE.search(value)
    if func:
        return func.group(0)
    hex_match = _HEX_COLOR_RE.search(value)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(d * 2 for d in digits)
        if len(digits) not in (6, 8):
            return None
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        if len(digits) == 8:
            alpha = round(int(digits[6:8], 16) / 255, 3)
            return f"rgba({r}, {g}, {b}, {alpha:g})"
        return f"rgb({r}, {g}, {b})"
    for token in value.split():
        if token in NAMED_COLORS:
            r, g, b = NAMED_COLORS[token]
            return f"rgb({r}, {g}, {b})"
    return None


def is_transparent(color: Optional[str]) -> bool:
    if not color:
        return True
    match = _ALPHA_RE.match(color.strip())
    return bool(match) and float(match.group(1)) == 0


def _format_number(value: float) -> str:
    return f"{value:g}"


class InlineStyleProvider(StyleProvider):
    """Compute styles from inline ``style`` attributes with CSS inheritance.

    Results are cached per element for the lifetime of the provider, so a
    provider instance should not outlive the document it was used on.
    """

    def __init__(self, viewport: Optional[Viewport] = None):
        self.viewport = viewport or Viewport()
        self._cache: Dict[int, ComputedStyle] = {}

    def computed_style(self, element: Tag) -> ComputedStyle:
        key = id(element)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        parent = element.parent
        if isinstance(parent, Tag) and parent.name != "[document]":
            inherited = self.computed_style(parent)
        else:
            inherited = ComputedStyle()

        style = self._compute(element, inherited)
        self._cache[key] = style
        return style

    def _compute(self, element: Tag, inherited: ComputedStyle) -> ComputedStyle:
        decl = parse_inline_style(element.get("style"))
        parent_font_px = resolve_length(inherited.font_size) or ROOT_FONT_SIZE_PX

        display = decl.get("display", ComputedStyle.display).lower()
        # Nothing below a display:none ancestor is rendered
        if (
            inherited.display == "none"
            or element.has_attr("hidden")
            or element.name in NON_RENDERED_TAGS
            or (element.name == "input" and str(element.get("type", "")).lower() == "hidden")
        ):
            display = "none"

        visibility = decl.get("visibility", inherited.visibility).lower()

        # Opacity composes multiplicatively down the tree
        opacity = float(inherited.opacity)
        own_opacity = _to_float(decl.get("opacity"))
        if own_opacity is not None:
            opacity *= max(0.0, min(1.0, own_opacity))

        font_px = resolve_length(decl.get("font-size"), parent_font_px, percent_base=parent_font_px)
        if font_px is None:
            font_px = parent_font_px

        text_indent = inherited.text_indent
        if "text-indent" in decl:
            # The viewport stands in for the containing block width
            indent_px = resolve_length(decl["text-indent"], font_px, percent_base=self.viewport.width)
            if indent_px is not None:
                text_indent = f"{_format_number(indent_px)}px"

        color = normalize_color(decl.get("color")) or inherited.color

        background = normalize_color(decl.get("background-color")) or normalize_color(decl.get("background"))
        if background is None or is_transparent(background):
            background = inherited.background_color

        return ComputedStyle(
            display=display,
            visibility=visibility,
            opacity=_format_number(opacity),
            font_size=f"{_format_number(font_px)}px",
            text_indent=text_indent,
            clip=decl.get("clip", "auto"),
            overflow=decl.get("overflow", "visible").lower(),
            color=color,
            background_color=background,
        )


class InlineGeometryProvider(GeometryProvider):
    """Approximate boxes from inline positioning and explicit sizes.

    Only absolutely/fixed positioned elements and elements with an explicit
    width and height get a box. Unknown dimensions are assumed to span the
    viewport, so they never make a box look off-screen or tiny.
    """

    def __init__(self, viewport: Viewport):
        self.viewport = viewport

    def bounding_box(self, element: Tag) -> Optional[BoundingBox]:
        decl = parse_inline_style(element.get("style"))
        width = resolve_length(decl.get("width"), percent_base=self.viewport.width)
        height = resolve_length(decl.get("height"), percent_base=self.viewport.height)
        position = decl.get("position", "static").lower()

        if position in ("absolute", "fixed"):
            w = width if width is not None else self.viewport.width
            h = height if height is not None else self.viewport.height
            left = resolve_length(decl.get("left"), percent_base=self.viewport.width)
            right = resolve_length(decl.get("right"), percent_base=self.viewport.width)
            top = resolve_length(decl.get("top"), percent_base=self.viewport.height)
            bottom = resolve_length(decl.get("bottom"), percent_base=self.viewport.height)
            if left is not None:
                x = left
            elif right is not None:
                x = self.viewport.width - right - w
            else:
                x = 0.0
            if top is not None:
                y = top
            elif bottom is not None:
                y = self.viewport.height - bottom - h
            else:
                y = 0.0
            return BoundingBox(x=x, y=y, width=w, height=h)

        if width is not None and height is not None:
            return BoundingBox(x=0.0, y=0.0, width=width, height=height)
        return None


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
