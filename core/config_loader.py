"""Utility module for loading heuristic configuration from YAML files."""
import os
import yaml
from typing import List, Dict, Any

RULES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "rules")


def load_config(config_file: str = os.path.join(RULES_DIR, "heuristics.yaml")) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.
    
    Args:
        config_file: Path to the YAML configuration file
        
    Returns:
        Dictionary containing the configuration data
    """
    if not os.path.exists(config_file):
        return {}
    
    with open(config_file, 'r') as f:
        data = yaml.safe_load(f)
        return data if data else {}


def load_listener_patterns(rules_dir: str = RULES_DIR) -> List[str]:
    """
    Load suspicious inline event-handler patterns.
    
    Args:
        rules_dir: Directory where heuristics.yaml is located
        
    Returns:
        List of regex patterns
    """
    config = load_config(os.path.join(rules_dir, "heuristics.yaml"))
    return config.get("listener_patterns", [])


def load_benign_comment_markers(rules_dir: str = RULES_DIR) -> List[str]:
    """Load regex markers identifying bundler output and license comments."""
    config = load_config(os.path.join(rules_dir, "heuristics.yaml"))
    return config.get("benign_comment_markers", [])


def load_custom_whitelist(whitelist_file: str) -> List[str]:
    """
    Load user-maintained whitelist domains.
    
    Accepts either a bare YAML list or a mapping with a ``domains`` key.
    A missing file yields an empty list.
    """
    config = load_config(whitelist_file)
    if isinstance(config, list):
        domains = config
    else:
        domains = config.get("domains", [])
    return [str(d) for d in domains if d]
