"""Pytest configuration and fixtures"""
import pytest
from fastapi.testclient import TestClient

from wikistory.main import app, get_article_source
from wikistory.models import Article, Paragraph


class FakeArticleSource:
    """
    In-memory article source

    Articles are given as {topic: [(text, [topics...]), ...]}. Every call is
    recorded so tests can check which lookups happened and in what order.
    """

    def __init__(self, articles=None, suggestions=None, default_suggestions=None):
        self.articles = articles or {}
        self.suggestions = suggestions or {}
        self.default_suggestions = default_suggestions or []
        self.resolved = []
        self.searched = []

    def resolve(self, topic):
        self.resolved.append(topic)
        if topic not in self.articles:
            return None
        return Article(
            topic=topic,
            paragraphs=tuple(
                Paragraph(text=text, topics=tuple(topics))
                for text, topics in self.articles[topic]
            )
        )

    def search(self, topic):
        self.searched.append(topic)
        return list(self.suggestions.get(topic, self.default_suggestions))


@pytest.fixture
def suggestions():
    return ["Suggestion 1", "Suggestion 2", "Suggestion 3"]


@pytest.fixture
def source():
    """Article source with a small graph: start → topic 1 → end"""
    return FakeArticleSource(
        articles={
            "start": [
                ("Paragraph 1", ["topic 1", "topic 2", "topic 3"]),
                ("Paragraph 2", ["topic 4", "topic 2", "topic 4"]),
                ("Paragraph 3", ["topic 1", "topic 1", "topic 2"]),
            ],
            "topic 1": [
                ("Topic 1 paragraph 1", ["topic 1", "topic 2", "topic 3"]),
                ("Topic 1 paragraph 2", ["end", "topic 1", "topic 2"]),
            ],
            "end": [
                ("End paragraph", []),
            ],
        },
        default_suggestions=["Suggestion 1", "Suggestion 2", "Suggestion 3"]
    )


@pytest.fixture
def client(source):
    """Test client for the FastAPI app, backed by the fake article source"""
    app.dependency_overrides[get_article_source] = lambda: source
    app.state.limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.limiter.enabled = True
