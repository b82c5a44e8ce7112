import pytest
import requests

from gyansathi import config
from gyansathi.wikipedia import WikipediaClient


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self.payload = payload
        self.status = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Answers search and extract queries from canned payloads."""

    def __init__(self, search=None, pages=None, error=None, response=None):
        self.headers = {}
        self.search = search or []
        self.pages = pages or {}
        self.error = error
        self.response = response
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        if self.response:
            return self.response
        if params.get("list") == "search":
            return FakeResponse({"query": {"search": self.search}})
        return FakeResponse({"query": {"pages": self.pages}})


SEARCH_HITS = [
    {"title": "Dhaka", "snippet": '<span class="searchmatch">Dhaka</span> is the capital', "pageid": 1},
    {"title": "Dhaka Division", "snippet": "a division", "pageid": 2},
]


def test_session_setup():
    session = FakeSession()
    client = WikipediaClient(language="bn", session=session)
    assert client.api_url == "https://bn.wikipedia.org/w/api.php"
    assert session.headers["User-Agent"] == config.USER_AGENT


def test_search_strips_markup():
    session = FakeSession(search=SEARCH_HITS)
    results = WikipediaClient(session=session).search("Dhaka", limit=2)
    assert results[0] == {"title": "Dhaka", "snippet": "Dhaka is the capital", "pageid": 1}
    assert len(results) == 2

    _, params, timeout = session.calls[0]
    assert params["action"] == "query"
    assert params["format"] == "json"
    assert params["srlimit"] == 2
    assert timeout == config.REQUEST_TIMEOUT


def test_page_extract():
    pages = {"1": {"title": "Dhaka", "extract": "Dhaka is the capital of Bangladesh.",
                   "fullurl": "https://en.wikipedia.org/wiki/Dhaka"}}
    page = WikipediaClient(session=FakeSession(pages=pages)).page_extract("Dhaka")
    assert page["extract"].startswith("Dhaka is")
    assert page["url"].endswith("/Dhaka")


def test_missing_page():
    pages = {"-1": {"title": "Nowhere", "missing": ""}}
    assert WikipediaClient(session=FakeSession(pages=pages)).page_extract("Nowhere") is None


def test_relevant_content_prefers_extract():
    pages = {"1": {"title": "Dhaka", "extract": "  Dhaka is the capital of Bangladesh.  "}}
    client = WikipediaClient(session=FakeSession(search=SEARCH_HITS, pages=pages))
    assert client.relevant_content("Dhaka") == ("Dhaka", "Dhaka is the capital of Bangladesh.")


def test_relevant_content_falls_back_to_snippet():
    pages = {"1": {"title": "Dhaka", "extract": ""}}
    client = WikipediaClient(session=FakeSession(search=SEARCH_HITS, pages=pages))
    assert client.relevant_content("Dhaka") == ("Dhaka", "Dhaka is the capital")


def test_no_results():
    assert WikipediaClient(session=FakeSession()).relevant_content("zzzz") is None


@pytest.mark.parametrize("session", [
    FakeSession(error=requests.ConnectionError("offline")),
    FakeSession(response=FakeResponse(status=503)),
    FakeSession(response=FakeResponse(bad_json=True)),
])
def test_failures_become_empty_results(session):
    client = WikipediaClient(session=session)
    assert client.search("Dhaka") == []
    assert client.page_extract("Dhaka") is None
    assert client.relevant_content("Dhaka") is None
