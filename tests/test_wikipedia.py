"""
Tests for wikistory/wikipedia.py, against a mocked MediaWiki API
"""
import httpx
import pytest

from wikistory import wikipedia
from wikistory.wikipedia import WikipediaArticleSource, parse_paragraphs


ARTICLE_HTML = """
<div class="mw-parser-output">
  <style>.mw-parser-output .hatnote{font-style:italic}</style>
  <p><b>Python</b> is a <a href="/wiki/Programming_language" title="Programming language">programming language</a>
     created by <a href="/wiki/Guido_van_Rossum" title="Guido van Rossum">Guido</a>.<sup class="reference"><a href="#cite_note-1">[1]</a></sup></p>
  <p>   </p>
  <h2>History<span class="mw-editsection">[edit]</span></h2>
  <p>It was influenced by <a href="/wiki/ABC_(programming_language)">ABC</a>,
     <a href="/wiki/File:Python_logo.svg" title="File:Python logo.svg">logo</a>,
     <a href="/w/index.php?title=Nope&amp;action=edit&amp;redlink=1" class="new" title="Nope">Nope</a>
     and <a href="/wiki/Programming_language#History" title="Programming language">languages</a>.</p>
  <div class="navbox"><p><a href="/wiki/Navigation" title="Navigation">Navigation</a></p></div>
</div>
"""


def make_source(handler, **kwargs):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WikipediaArticleSource(client=client, api_url="https://wiki.test/w/api.php", **kwargs)


class TestParseParagraphs:
    def test_paragraph_text_and_topics(self):
        paragraphs = parse_paragraphs(ARTICLE_HTML)

        assert len(paragraphs) == 2
        assert paragraphs[0].text == "Python is a programming language created by Guido."
        assert paragraphs[0].topics == ("Programming language", "Guido van Rossum")

    def test_skips_namespaced_red_links_and_keeps_duplicates(self):
        paragraphs = parse_paragraphs(ARTICLE_HTML)

        assert paragraphs[1].topics == ("ABC (programming language)", "Programming language")

    def test_navigation_boxes_are_not_content(self):
        texts = [p.text for p in parse_paragraphs(ARTICLE_HTML)]
        assert not any("Navigation" in text for text in texts)

    def test_empty_html(self):
        assert parse_paragraphs("") == []


class TestResolve:
    def test_resolves_article(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={
                "parse": {"title": "Python (programming language)", "text": ARTICLE_HTML}
            })

        article = make_source(handler).resolve("Python (programming language)")

        assert article.topic == "Python (programming language)"
        assert len(article.paragraphs) == 2
        params = requests[0].url.params
        assert params["action"] == "parse"
        assert params["page"] == "Python (programming language)"
        assert params["prop"] == "text"

    def test_missing_page_is_absent(self):
        def handler(request):
            return httpx.Response(200, json={
                "error": {"code": "missingtitle", "info": "The page you specified doesn't exist."}
            })

        assert make_source(handler).resolve("Nonexistent page") is None

    def test_http_error_is_absent(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        assert make_source(handler).resolve("Python") is None

    def test_invalid_json_is_absent(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        assert make_source(handler).resolve("Python") is None

    def test_transient_errors_are_retried(self, monkeypatch):
        monkeypatch.setattr(wikipedia.time, "sleep", lambda seconds: None)
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"parse": {"title": "Python", "text": ARTICLE_HTML}})

        article = make_source(handler).resolve("Python")

        assert article is not None
        assert len(attempts) == 2

    def test_gives_up_after_retries(self, monkeypatch):
        monkeypatch.setattr(wikipedia.time, "sleep", lambda seconds: None)
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        assert make_source(handler).resolve("Python") is None
        assert len(attempts) == wikipedia.config.MAX_RETRIES


class TestSearch:
    def test_returns_titles_in_order(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[
                "pyton",
                ["Python (programming language)", "Pyton", "Python"],
                ["", "", ""],
                ["https://en.wikipedia.org/wiki/Python_(programming_language)", "", ""]
            ])

        titles = make_source(handler, suggestion_limit=3).search("pyton")

        assert titles == ["Python (programming language)", "Pyton", "Python"]
        params = requests[0].url.params
        assert params["action"] == "opensearch"
        assert params["search"] == "pyton"
        assert params["limit"] == "3"

    def test_no_results(self):
        def handler(request):
            return httpx.Response(200, json=["zzzz", [], [], []])

        assert make_source(handler).search("zzzz") == []

    def test_http_error_gives_no_suggestions(self):
        def handler(request):
            return httpx.Response(500)

        assert make_source(handler).search("anything") == []


@pytest.fixture
def reset_shared_client():
    wikipedia.close_shared_http_client()
    yield
    wikipedia.close_shared_http_client()


def test_shared_client_is_reused(reset_shared_client):
    first = wikipedia.get_shared_http_client()
    assert wikipedia.get_shared_http_client() is first
    assert first.headers["User-Agent"] == wikipedia.config.USER_AGENT
