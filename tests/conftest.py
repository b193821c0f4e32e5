import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)

from core.engine import Engine
from core.style import ComputedStyle, StyleProvider, GeometryProvider

FIXED_TIMESTAMP = 1_700_000_000_000


class FixedStyleProvider(StyleProvider):
    """Returns the style registered for an element id, or a default."""

    def __init__(self, default: ComputedStyle = None, by_id: dict = None):
        self.default = default or ComputedStyle()
        self.by_id = by_id or {}

    def computed_style(self, element):
        return self.by_id.get(element.get("id"), self.default)


class FixedGeometryProvider(GeometryProvider):
    def __init__(self, by_id: dict = None):
        self.by_id = by_id or {}

    def bounding_box(self, element):
        return self.by_id.get(element.get("id"))


class FailingStyleProvider(StyleProvider):
    def computed_style(self, element):
        raise RuntimeError("style introspection unavailable")


@pytest.fixture
def engine():
    return Engine(clock=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def style_doubles():
    return FixedStyleProvider, FixedGeometryProvider, FailingStyleProvider
