"""
Utility functions to validate directive pattern files for invalid regexes,
duplications and unknown categories.
"""

import yaml
import regex
from typing import List, Dict, Any, Optional
from collections import defaultdict

from models.rules import DIRECTIVE_CATEGORIES


def load_raw_patterns(patterns_file: str) -> List[Dict[str, Any]]:
    """Load the raw pattern entries of a YAML file without validation."""
    with open(patterns_file, 'r') as f:
        entries = yaml.safe_load(f)
    return entries if isinstance(entries, list) else []


def validate_pattern_entry(entry: Any) -> Optional[str]:
    """
    Check a single pattern entry.

    Returns:
        A description of the problem, or None if the entry is usable
    """
    if not isinstance(entry, dict):
        return f"entry is not a mapping: {entry!r}"
    if not entry.get("category"):
        return f"missing category: {entry!r}"
    pattern = entry.get("pattern")
    if not pattern or not isinstance(pattern, str):
        return f"missing pattern: {entry!r}"
    try:
        regex.compile(pattern, regex.IGNORECASE)
    except regex.error as e:
        return f"invalid regex {pattern!r}: {e}"
    return None


def detect_invalid_patterns(entries: List[Any]) -> List[str]:
    """Return one problem description per unusable entry."""
    problems = []
    for entry in entries:
        problem = validate_pattern_entry(entry)
        if problem:
            problems.append(problem)
    return problems


def detect_duplicate_patterns(entries: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Detect patterns declared more than once.

    Returns:
        Dictionary with pattern strings as keys and the categories declaring them
    """
    seen = defaultdict(list)
    for entry in entries:
        if isinstance(entry, dict) and entry.get("pattern"):
            seen[entry["pattern"].strip().lower()].append(entry.get("category", "Unknown"))

    duplicates = {
        pattern: categories
        for pattern, categories in seen.items()
        if len(categories) > 1
    }
    return duplicates


def detect_unknown_categories(entries: List[Dict[str, Any]]) -> List[str]:
    """Return categories not among the known directive categories."""
    unknown = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        category = entry.get("category")
        if category and category not in DIRECTIVE_CATEGORIES and category not in unknown:
            unknown.append(category)
    return unknown


def validate_patterns(entries: List[Any]) -> Dict[str, Any]:
    """Run all checks and collect their results."""
    return {
        'invalid': detect_invalid_patterns(entries),
        'duplicates': detect_duplicate_patterns(entries),
        'unknown_categories': detect_unknown_categories(entries),
    }


def print_validation_report(entries: List[Any]) -> bool:
    """
    Print a validation report of a pattern set.

    Returns:
        True when no problems were found
    """
    results = validate_patterns(entries)

    print("\n" + "="*70)
    print("DIRECTIVE PATTERNS VALIDATION REPORT")
    print("="*70)
    print(f"\nTotal Patterns: {len(entries)}")

    if results['invalid']:
        print(f"\nINVALID PATTERNS: {len(results['invalid'])}")
        for problem in results['invalid']:
            print(f"  - {problem}")
    else:
        print("\n✓ All patterns compile")

    if results['duplicates']:
        print(f"\nDUPLICATE PATTERNS: {len(results['duplicates'])}")
        for pattern, categories in sorted(results['duplicates'].items()):
            print(f"  '{pattern}' -> {', '.join(categories)}")
    else:
        print("\n✓ No duplicate patterns")

    if results['unknown_categories']:
        print(f"\nUNKNOWN CATEGORIES: {', '.join(results['unknown_categories'])}")
    else:
        print("\n✓ All categories known")

    print("\n" + "="*70)
    return not any(results.values())
