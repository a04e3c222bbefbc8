"""
Wikipedia article source

Resolves topics to articles through the MediaWiki API. Rendered article HTML
is reduced to paragraphs, each carrying the titles of the articles it links
to, in document order.
"""

from functools import wraps
from typing import Any, Callable, List, Optional
from urllib.parse import unquote
import logging
import re
import threading
import time

from bs4 import BeautifulSoup
import httpx

from wikistory import config
from wikistory.models import Article, Paragraph

logger = logging.getLogger(__name__)

# Page furniture that is not part of the article prose
NON_CONTENT_SELECTORS = [
    "div.navbox", "div.vertical-navbox", "table.navbox",
    "div.reflist", "ol.references", "div.mw-references-wrap",
    "div.catlinks", "div.toc", "span.mw-editsection",
    "sup.reference", "style",
]

# API error codes that mean the article simply does not exist
MISSING_PAGE_CODES = {"missingtitle", "invalidtitle"}


# Retry decorator for API calls
def retry_on_failure(max_retries: int = 3, backoff_factor: float = 0.5):
    """
    Decorator to retry functions on transient failures

    Args:
        max_retries: Maximum number of attempts (default: 3)
        backoff_factor: Multiplier for exponential backoff (default: 0.5)

    Retries on:
    - httpx.TimeoutException (network timeouts)
    - httpx.ConnectError (connection failures)
    - httpx.ReadError (read failures)

    Does NOT retry on:
    - httpx.HTTPStatusError (4xx, 5xx responses)
    - Other exceptions
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)

                except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as e:
                    if attempt < max_retries - 1:
                        # Exponential backoff: 0.5s, 1s, 2s
                        sleep_time = backoff_factor * (2 ** attempt)
                        logger.warning(
                            "API call failed, retrying",
                            extra={
                                "error_type": type(e).__name__,
                                "retry_delay": sleep_time,
                                "attempt": attempt + 1,
                                "max_retries": max_retries
                            }
                        )
                        time.sleep(sleep_time)
                        continue

                    logger.error(f"API call failed after {max_retries} attempts", extra={"error": str(e)})
                    raise

        return wrapper
    return decorator


# Shared HTTP client for all sources (connection pooling)
_shared_http_client: Optional[httpx.Client] = None
_shared_http_client_lock = threading.Lock()


def get_shared_http_client() -> httpx.Client:
    """
    Get or create the shared HTTP client for Wikipedia API requests.

    The client is configured with:
    - Granular timeouts (connect, read, write, pool)
    - Connection limits
    - Proper User-Agent header for Wikipedia

    Returns:
        httpx.Client: The shared HTTP client instance
    """
    global _shared_http_client

    with _shared_http_client_lock:
        if _shared_http_client is None:
            timeout = httpx.Timeout(
                connect=config.HTTP_CONNECT_TIMEOUT,
                read=config.HTTP_READ_TIMEOUT,
                write=5.0,
                pool=5.0
            )
            limits = httpx.Limits(
                max_connections=config.HTTP_MAX_CONNECTIONS,
                max_keepalive_connections=config.HTTP_MAX_KEEPALIVE
            )
            _shared_http_client = httpx.Client(
                timeout=timeout,
                limits=limits,
                headers={'User-Agent': config.USER_AGENT},
                http2=True
            )

    return _shared_http_client


def close_shared_http_client():
    """Close the shared HTTP client, if one was created"""
    global _shared_http_client

    with _shared_http_client_lock:
        if _shared_http_client is not None:
            _shared_http_client.close()
            _shared_http_client = None


def _link_title(anchor) -> Optional[str]:
    """Return the article title an anchor points to, or None for non-article links"""
    href = anchor.get("href", "")
    if not href.startswith("/wiki/"):
        return None

    # Red links point at pages that do not exist
    if "new" in (anchor.get("class") or []):
        return None

    slug = href.split("/wiki/", 1)[1].split("#", 1)[0]
    if not slug or ":" in slug:  # main namespace only
        return None

    title = anchor.get("title") or unquote(slug).replace("_", " ")
    return title.strip() or None


def parse_paragraphs(html: str) -> List[Paragraph]:
    """
    Split rendered article HTML into paragraphs

    Args:
        html: HTML produced by the MediaWiki parser

    Returns:
        Non-empty paragraphs in document order, each with the titles of the
        articles it links to (duplicates kept, in link order)
    """
    soup = BeautifulSoup(html, "lxml")
    root = soup.find("div", class_="mw-parser-output") or soup

    for selector in NON_CONTENT_SELECTORS:
        for node in root.select(selector):
            node.decompose()

    paragraphs = []
    for p in root.find_all("p"):
        text = re.sub(r"\s+", " ", p.get_text()).strip()
        if not text:
            continue

        topics = []
        for anchor in p.find_all("a", href=True):
            title = _link_title(anchor)
            if title:
                topics.append(title)

        paragraphs.append(Paragraph(text=text, topics=tuple(topics)))

    return paragraphs


class WikipediaArticleSource:
    """Article source backed by the Wikipedia MediaWiki API"""

    def __init__(self, client: Optional[httpx.Client] = None, api_url: Optional[str] = None,
                 suggestion_limit: Optional[int] = None):
        self.client = client
        self.api_url = api_url or config.WIKIPEDIA_API_URL
        self.suggestion_limit = suggestion_limit or config.SUGGESTION_LIMIT

    @retry_on_failure(max_retries=config.MAX_RETRIES, backoff_factor=config.BACKOFF_FACTOR)
    def _get(self, params: dict) -> Any:
        client = self.client or get_shared_http_client()
        response = client.get(self.api_url, params=params)
        response.raise_for_status()
        return response.json()

    def resolve(self, topic: str) -> Optional[Article]:
        """Fetch and parse the article for a topic; None if it does not exist"""
        params = {
            "action": "parse",
            "page": topic,
            "prop": "text",
            "format": "json",
            "formatversion": 2,
            "redirects": 1
        }

        try:
            data = self._get(params)
        except httpx.HTTPError as e:
            logger.error(f"Request error fetching article for '{topic}': {e}")
            return None
        except ValueError as e:
            logger.error(f"JSON parsing error for '{topic}': {e}")
            return None

        if "error" in data:
            code = data["error"].get("code")
            if code not in MISSING_PAGE_CODES:
                logger.error(f"Wikipedia parse error for '{topic}'", extra={"error_code": code})
            else:
                logger.debug(f"Page '{topic}' does not exist")
            return None

        parsed = data.get("parse", {})
        paragraphs = parse_paragraphs(parsed.get("text", ""))
        logger.debug(f"Resolved '{topic}' with {len(paragraphs)} paragraphs")

        return Article(topic=parsed.get("title", topic), paragraphs=tuple(paragraphs))

    def search(self, topic: str) -> List[str]:
        """Search Wikipedia for article titles related to a topic"""
        params = {
            "action": "opensearch",
            "search": topic,
            "limit": self.suggestion_limit,
            "namespace": 0,
            "format": "json"
        }

        try:
            data = self._get(params)
        except httpx.HTTPError as e:
            logger.error(f"Request error searching for '{topic}': {e}")
            return []
        except ValueError as e:
            logger.error(f"JSON parsing error searching for '{topic}': {e}")
            return []

        # OpenSearch returns: [query, [titles], [descriptions], [urls]]
        if isinstance(data, list) and len(data) >= 2 and isinstance(data[1], list):
            return list(data[1])
        return []
