"""
Keyed store of the latest report per URL.
"""
import json
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Union

from models.report import Report, ErrorReport

ReportLike = Union[Report, ErrorReport]

logger = logging.getLogger(__name__)


class ReportHistory:
    """
    Bounded store mapping a URL to the serialized form of its latest report.

    Works as a report sink: pass ``history.record`` to the engine.
    """

    def __init__(self, max_entries: int = 100):
        """
        Initialize the history.

        Args:
            max_entries: Oldest entries are evicted beyond this size
        """
        self._entries: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self.max_entries = max_entries

    def record(self, report: ReportLike) -> None:
        """Store ``report`` as the latest entry for its URL."""
        self._entries.pop(report.url, None)
        self._entries[report.url] = report.to_dict()
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"History full, evicted {evicted}")

    def get(self, url: str) -> Optional[Dict[str, Any]]:
        return self._entries.get(url)

    def last(self) -> Optional[Dict[str, Any]]:
        """The most recently recorded report."""
        if not self._entries:
            return None
        return next(reversed(self._entries.values()))

    def entries(self) -> List[Dict[str, Any]]:
        return list(self._entries.values())

    def evict(self, url: str) -> None:
        """Remove the entry for ``url``, e.g. when its page is closed."""
        self._entries.pop(url, None)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def save(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.entries(), f, indent=2)

    def load(self, path: str) -> None:
        """Replace the current entries with those saved in ``path``."""
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"History file must contain a JSON list: {path}")
        self._entries.clear()
        for entry in data[-self.max_entries:]:
            if isinstance(entry, dict) and entry.get("url"):
                self._entries[entry["url"]] = entry
