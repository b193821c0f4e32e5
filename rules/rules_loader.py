import os
import logging
import yaml
from typing import List, Optional
from models.rules import DirectivePattern
from core.rules_validator import validate_pattern_entry

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_DIRECTIVES_FILE = os.path.join(RULES_DIR, "directives.yaml")

logger = logging.getLogger(__name__)


def load_directive_patterns(patterns_file: Optional[str] = None) -> List[DirectivePattern]:
    """
    Loads directive phrase patterns from a YAML file.

    The file holds a list of mappings with ``category``, ``pattern`` and an
    optional ``description``. Entries that fail validation are skipped.
    """
    patterns_file = patterns_file or DEFAULT_DIRECTIVES_FILE
    patterns: List[DirectivePattern] = []
    with open(patterns_file, "r") as f:
        data = yaml.safe_load(f)
    if not data:
        logger.warning(f"No directive patterns found in {patterns_file}")
        return patterns
    if not isinstance(data, list):
        raise ValueError(f"Directive pattern file must contain a list: {patterns_file}")

    for entry in data:
        problem = validate_pattern_entry(entry)
        if problem:
            logger.warning(f"Skipping invalid directive pattern in {patterns_file}: {problem}")
            continue
        patterns.append(
            DirectivePattern(
                category=entry["category"],
                pattern=entry["pattern"],
                description=entry.get("description"),
            )
        )
    logger.debug(f"Loaded {len(patterns)} directive patterns from {patterns_file}")
    return patterns


# Example usage (for testing)
if __name__ == "__main__":
    for p in load_directive_patterns():
        print(f"  - [{p.category}] {p.pattern}")
