"""Wikipedia lookup for learning new passages"""

import logging
from typing import Dict, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup
from requests.exceptions import RequestException

from . import config

logger = logging.getLogger(__name__)


class WikipediaClient:
    """
    Thin client for the MediaWiki query API.
    Network and decoding failures are logged and turn into empty results.
    """

    def __init__(self, language: str = None, session: requests.Session = None):
        self.language = language or config.WIKIPEDIA_LANGUAGE
        self.api_url = config.WIKIPEDIA_API_URL.format(lang=self.language)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.USER_AGENT})

    def _query(self, params: Dict) -> Optional[Dict]:
        params = dict(params, action="query", format="json")
        try:
            response = self.session.get(self.api_url, params=params, timeout=config.REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except RequestException as e:
            logger.warning(f"Wikipedia request failed: {e}")
        except ValueError as e:
            logger.warning(f"Wikipedia returned invalid JSON: {e}")
        return None

    @staticmethod
    def _strip_html(snippet: str) -> str:
        return BeautifulSoup(snippet or '', "lxml").get_text(" ", strip=True)

    def search(self, query: str, limit: int = 5) -> List[Dict]:
        """Search results as dicts with title, snippet and pageid."""
        data = self._query({
            "list": "search",
            "srsearch": query,
            "srlimit": limit,
            "srprop": "snippet",
        })
        results = (data or {}).get("query", {}).get("search", [])
        return [
            {
                "title": r.get("title", ""),
                "snippet": self._strip_html(r.get("snippet", "")),
                "pageid": r.get("pageid"),
            }
            for r in results if r.get("title")
        ]

    def page_extract(self, title: str) -> Optional[Dict]:
        """Plain-text introduction of a page, or None when it does not exist."""
        data = self._query({
            "prop": "extracts|info",
            "titles": title,
            "exintro": 1,
            "explaintext": 1,
            "exsectionformat": "plain",
            "inprop": "url",
        })
        pages = (data or {}).get("query", {}).get("pages", {})
        for page in pages.values():
            if "missing" in page:
                continue
            return {
                "title": page.get("title", title),
                "extract": page.get("extract", ""),
                "url": page.get("fullurl", ""),
            }
        return None

    def relevant_content(self, query: str) -> Optional[Tuple[str, str]]:
        """(title, text) of the best page for a query, falling back to its snippet."""
        results = self.search(query, limit=3)
        if not results:
            logger.info(f"No Wikipedia results for {query!r}")
            return None

        top = results[0]
        page = self.page_extract(top["title"])
        if page and page["extract"].strip():
            return page["title"], page["extract"].strip()
        if top["snippet"]:
            return top["title"], top["snippet"]
        return None
