"""Best-effort web research handlers: DuckDuckGo search and page fetch.

Neither handler raises for network or parsing problems; failures come back as domain errors.
"""

import html
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import httpx

from .....integrations import WebClient
from ....events import Severity
from ....logger import get_logger
from ...registry import FETCH_WEBPAGE, WEB_SEARCH
from .base import Summary, ToolHandler

logger = get_logger(__name__)

SEARCH_URL = "https://html.duckduckgo.com/html/"
DEFAULT_SEARCH_RESULTS = 5
PAGE_CHAR_BUDGET = 8000
TRUNCATION_MARKER = "... [content truncated]"
DEFAULT_FETCH_TIMEOUT = 10.0

_RESULT_RE = re.compile(
    r'<a[^>]*class="result__a"[^>]*href="([^"]+)"[^>]*>(.*?)</a>.*?<a[^>]*class="result__snippet"[^>]*>(.*?)</a>',
    re.DOTALL,
)
_RESULT_URL_RE = re.compile(r'<a[^>]*class="result__url"[^>]*href="([^"]+)"[^>]*>(.*?)</a>', re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.DOTALL | re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.DOTALL | re.IGNORECASE)
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def _strip_tags(fragment: str) -> str:
    return html.unescape(_TAG_RE.sub("", fragment)).strip()


def _unwrap_redirect(url: str) -> str:
    url = html.unescape(url)
    if "uddg=" in url:
        match = re.search(r"uddg=([^&]+)", url)
        if match:
            return unquote(match.group(1))
    if url.startswith("//"):
        return "https:" + url
    return url


def parse_search_results(page: str, max_results: int) -> List[Dict[str, str]]:
    """Parse a DuckDuckGo HTML results page.

    Falls back to the bare ``result__url`` anchors when no result/snippet pairs are found.
    """
    results: List[Dict[str, str]] = []
    for url, title, snippet in _RESULT_RE.findall(page):
        if len(results) >= max_results:
            break
        title = _strip_tags(title)
        if url and title:
            results.append({"title": title, "url": _unwrap_redirect(url), "snippet": _strip_tags(snippet)})

    if not results:
        for url, title in _RESULT_URL_RE.findall(page):
            if len(results) >= max_results:
                break
            results.append({"title": _strip_tags(title), "url": _unwrap_redirect(url), "snippet": "No snippet available"})

    return results


def extract_text(page: str) -> str:
    """Visible text of an HTML page with whitespace collapsed."""
    text = _STYLE_RE.sub("", _SCRIPT_RE.sub("", page))
    text = html.unescape(_TAG_RE.sub(" ", text))
    return _WS_RE.sub(" ", text).strip()


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


class WebSearchHandler(ToolHandler):
    spec = WEB_SEARCH

    def __init__(self, web: WebClient) -> None:
        self.web = web

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        query = arguments.get("query") or ""
        max_results = arguments.get("maxResults") or DEFAULT_SEARCH_RESULTS

        try:
            response = await self.web.get(SEARCH_URL, params={"q": query})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Web search for '{query}' failed: {e}")
            return {"error": f"Web search failed: {_describe(e)}"}

        results = parse_search_results(response.text, max_results)
        if not results:
            return {"error": f'No search results found for "{query}"'}
        return {"query": query, "results": results, "count": len(results)}

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if "results" not in payload:
            return None
        return f'Found {payload["count"]} search results for "{payload["query"]}"', Severity.SUCCESS


class FetchWebpageHandler(ToolHandler):
    spec = FETCH_WEBPAGE

    def __init__(self, web: WebClient, timeout: float = DEFAULT_FETCH_TIMEOUT) -> None:
        self.web = web
        self.timeout = timeout

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        url = arguments.get("url") or ""
        try:
            response = await self.web.get(
                url,
                headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            return {"error": f"Failed to fetch webpage: timed out after {self.timeout:g} seconds"}
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Fetching '{url}' failed: {e}")
            return {"error": f"Failed to fetch webpage: {_describe(e)}"}

        if not response.is_success:
            return {"error": f"Failed to fetch: HTTP {response.status_code}"}

        page = response.text
        text = extract_text(page)
        if len(text) > PAGE_CHAR_BUDGET:
            text = text[:PAGE_CHAR_BUDGET] + TRUNCATION_MARKER

        title_match = _TITLE_RE.search(page)
        title = html.unescape(title_match.group(1)).strip() if title_match else "Unknown"

        return {"url": url, "title": title, "content": text, "contentLength": len(text)}

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if not payload.get("content"):
            return None
        return f'Fetched webpage: "{payload["title"]}" ({payload["contentLength"]} chars)', Severity.SUCCESS
