"""
Source Fetcher - Retrieves article pages and cited source content.

Articles are fetched directly. Source content is fetched through the
text-extraction proxy first; when the proxy fails or returns too little
text, the page is fetched directly and its main text extracted with
BeautifulSoup. Source text is capped at max_source_chars.
"""

import json
import re
import time
from typing import Callable, Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from core.config import settings
from core.logging import get_logger
from extraction.document import SoupDocument


logger = get_logger(__name__)

# Below this many characters the content is treated as a failed fetch
MIN_CONTENT_CHARS = 100

WHITESPACE_PATTERN = re.compile(r"\s+")


class FetchError(RuntimeError):
    """Non-200 response or unusable payload."""


def extract_text_from_html(html: str) -> str:
    """Main text of a page: <article>, else <main>, else <body>."""
    soup = BeautifulSoup(html, "html.parser")
    container = soup.find("article") or soup.find("main") or soup.find("body") or soup

    for tag in container(["script", "style"]):
        tag.decompose()

    return WHITESPACE_PATTERN.sub(" ", container.get_text(separator=" ")).strip()


class SourceFetcher:
    """
    HTTP fetching with retry and exponential backoff.

    Retries wait 2^attempt seconds (2s, 4s, ...) between attempts.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        proxy_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        max_retries: Optional[int] = None,
        max_source_chars: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            session: requests session (a new one if omitted)
            proxy_url: Text-extraction proxy (None uses settings, "" disables)
            timeout_s: Per-request timeout
            max_retries: Attempts per URL
            max_source_chars: Cap on returned source text
            sleep: Sleep function, injectable for tests
        """
        self.session = session or requests.Session()
        self.proxy_url = settings.proxy_url if proxy_url is None else proxy_url
        self.timeout_s = timeout_s or settings.request_timeout_s
        self.max_retries = max_retries or settings.max_retries
        self.max_source_chars = max_source_chars or settings.max_source_chars
        self._sleep = sleep

    def fetch(self, url: str) -> str:
        """Fetch a URL once, following redirects."""
        response = self.session.get(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=self.timeout_s,
            allow_redirects=True,
        )
        if response.status_code != 200:
            raise FetchError(f"HTTP {response.status_code}")
        return response.text

    def fetch_with_retry(self, url: str) -> str:
        """Fetch a URL, retrying failures with exponential backoff."""
        for attempt in range(1, self.max_retries + 1):
            try:
                return self.fetch(url)
            except (requests.RequestException, FetchError) as e:
                if attempt == self.max_retries:
                    raise
                delay = 2 ** attempt
                logger.fetch_retry(url, attempt, self.max_retries, delay, str(e))
                self._sleep(delay)

        raise FetchError(f"No fetch attempts made for {url}")

    def fetch_article(self, url: str) -> SoupDocument:
        """Fetch and parse an article page."""
        return SoupDocument.from_html(self.fetch_with_retry(url))

    def _fetch_via_proxy(self, url: str) -> Optional[str]:
        proxy_request = f"{self.proxy_url}?fetch={quote(url, safe='')}"
        try:
            data = json.loads(self.fetch_with_retry(proxy_request))
        except (requests.RequestException, FetchError, ValueError) as e:
            logger.fetch_failed(url, "proxy", str(e))
            return None

        content = data.get("content") if isinstance(data, dict) else None
        if not content or len(content) <= MIN_CONTENT_CHARS:
            logger.fetch_failed(url, "proxy", f"insufficient content: {len(content or '')} chars")
            return None

        logger.fetch_completed(url, "proxy", len(content))
        return content

    def _fetch_direct(self, url: str) -> Optional[str]:
        try:
            html = self.fetch_with_retry(url)
        except (requests.RequestException, FetchError) as e:
            logger.fetch_failed(url, "direct", str(e))
            return None

        text = extract_text_from_html(html)
        if len(text) <= MIN_CONTENT_CHARS:
            logger.fetch_failed(url, "direct", f"insufficient content: {len(text)} chars")
            return None

        logger.fetch_completed(url, "direct", len(text))
        return text

    def fetch_source_content(self, url: str) -> Optional[str]:
        """
        Fetch the text of a cited source.

        Args:
            url: Source URL

        Returns:
            Source text (truncated to max_source_chars), or None when both
            the proxy and direct fetch fail
        """
        content = None
        if self.proxy_url:
            content = self._fetch_via_proxy(url)
        if content is None:
            content = self._fetch_direct(url)
        if content is None:
            return None
        return content[:self.max_source_chars]
