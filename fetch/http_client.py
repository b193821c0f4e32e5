import httpx
import logging
from dataclasses import dataclass
from typing import Optional, Dict

# Default timeout configuration (in seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0
# Pages larger than this are truncated before parsing
MAX_PAGE_BYTES = 5_000_000

DEFAULT_HEADERS = {
    "User-Agent": "page-shield/0.1 (+prompt-injection scanner)",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
}


@dataclass(frozen=True)
class FetchedPage:
    url: str # Final URL after redirects
    status_code: int
    content_type: str
    html: str


async def fetch_page(
    url: str,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> FetchedPage:
    """
    Fetches a page for scanning, following redirects.
    
    Args:
        url: The URL to fetch
        timeout: Total request timeout in seconds (default: 10s)
        connect_timeout: Connection timeout in seconds (default: 5s)
        headers: Extra HTTP headers merged over the defaults
    
    Returns:
        FetchedPage with the final URL and decoded body
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"HTTP GET {url} (timeout: {timeout or DEFAULT_TIMEOUT}s)")
    
    timeout_config = httpx.Timeout(
        timeout=timeout or DEFAULT_TIMEOUT,
        connect=connect_timeout or DEFAULT_CONNECT_TIMEOUT
    )
    request_headers = {**DEFAULT_HEADERS, **(headers or {})}
    
    try:
        async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True) as client:
            response = await client.get(url, headers=request_headers)
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise
    
    content_type = response.headers.get("content-type", "")
    if content_type and "html" not in content_type.lower():
        logger.warning(f"{url} returned {content_type}, scanning it as HTML anyway")
    
    html = response.text
    if len(html) > MAX_PAGE_BYTES:
        logger.warning(f"Truncating {url} from {len(html)} to {MAX_PAGE_BYTES} chars")
        html = html[:MAX_PAGE_BYTES]
    
    logger.debug(f"HTTP {response.status_code} {response.url} ({len(html)} chars)")
    # Error pages are scanned too; they can carry injected content
    return FetchedPage(
        url=str(response.url),
        status_code=response.status_code,
        content_type=content_type,
        html=html,
    )
