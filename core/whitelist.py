"""Trusted domain substrings exempted from unsafe-embed penalties.

Membership is substring containment on the lower-cased URL, not host or
suffix matching: ``https://cdn.example.com/?ref=google.com`` counts as
whitelisted. This keeps odd subdomain layouts working at the cost of
precision.
"""
import logging
from typing import Iterable, List, Optional

from core.config_loader import load_custom_whitelist

BUILTIN_WHITELIST = (
    "youtube.com",
    "google.com",
    "ytimg.com",
    "gstatic.com",
    "googleusercontent.com",
    "cloudflare.com",
    "cdnjs.com",
    "bootstrapcdn.com",
    "cdn.jsdelivr.net",
    "googleapis.com",
    "doubleclick.net",
    "googlesyndication.com",
    "googletagmanager.com",
)

logger = logging.getLogger(__name__)


class Whitelist:
    def __init__(self, custom_domains: Optional[Iterable[str]] = None, builtin: Iterable[str] = BUILTIN_WHITELIST):
        self.domains: List[str] = []
        for domain in list(builtin) + list(custom_domains or []):
            domain = str(domain).strip().lower()
            if domain and domain not in self.domains:
                self.domains.append(domain)

    @classmethod
    def from_file(cls, whitelist_file: Optional[str]) -> "Whitelist":
        """Built-in domains merged with the user list stored in ``whitelist_file``."""
        custom = load_custom_whitelist(whitelist_file) if whitelist_file else []
        if custom:
            logger.info(f"Loaded {len(custom)} custom whitelist domains from {whitelist_file}")
        return cls(custom)

    def contains(self, url: Optional[str]) -> bool:
        if not url:
            return False
        candidate = str(url).lower()
        return any(domain in candidate for domain in self.domains)

    def __contains__(self, url: Optional[str]) -> bool:
        return self.contains(url)

    def __len__(self) -> int:
        return len(self.domains)
