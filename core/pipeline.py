import logging
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from core.context import ScanContext

logger = logging.getLogger(__name__)


class Pipeline:
    def __init__(self, extractors: Dict[str, Any], fields: Dict[str, str]):
        """
        Args:
            extractors: Extractor instances keyed by name, in run order
            fields: Maps extractor name to the Report field it fills
        """
        self.extractors = extractors
        self.fields = fields

    def run(self, context: 'ScanContext') -> Dict[str, Any]:
        """Run every extractor once and collect results keyed by Report field."""
        results: Dict[str, Any] = {}
        for name, extractor in self.extractors.items():
            logger.debug(f"Running {name} extractor")
            result = extractor.extract(context)
            field = self.fields[name]
            if isinstance(result, list) and isinstance(results.get(field), list):
                results[field] = results[field] + result
            else:
                results[field] = result
            size = len(result) if isinstance(result, list) else result
            logger.debug(f"{name} extractor produced {size}")
        return results
