"""
Story engine

Builds a story connecting a start topic to an end topic by following topic
references inside articles. The search is bounded to two hops:

- depth 1: a paragraph of the start article references the end topic
- depth 2: a paragraph of the start article references a topic T whose
  article has a paragraph referencing the end topic

"First" always means first in declared order: start's paragraphs, then the
first-occurrence order of referenced topics, then T's paragraphs.
"""

from typing import Dict, List, Optional
import logging

from wikistory.errors import (
    StoryError, MissingStartTopic, MissingEndTopic, TrivialRequest,
    TopicNotFound, NoPathFound
)
from wikistory.models import Article, Hop, Paragraph, Story
from wikistory.source import ArticleSource
from wikistory.utils import fold_topic, topics_match

logger = logging.getLogger(__name__)

SUGGESTIONS_HEADER = "Cannot find wikipedia article for {topic}, try one of the following suggestions:"


def references(paragraph: Paragraph, topic: str) -> bool:
    """Check whether a paragraph references the topic (case-insensitive)"""
    return any(topics_match(reference, topic) for reference in paragraph.topics)


def first_referencing_paragraph(article: Article, topic: str) -> Optional[Paragraph]:
    """Return the first paragraph of the article that references the topic"""
    for paragraph in article.paragraphs:
        if references(paragraph, topic):
            return paragraph
    return None


def candidate_topics(article: Article, exclude: List[str]) -> List[str]:
    """
    Collect the distinct topics referenced by an article

    Args:
        article: Article whose paragraphs are scanned in order
        exclude: Topics to leave out (matched case-insensitively)

    Returns:
        Topic references in first-occurrence order, each kept with the
        spelling of its first occurrence
    """
    seen = {fold_topic(topic) for topic in exclude}
    candidates = []

    for paragraph in article.paragraphs:
        for reference in paragraph.topics:
            folded = fold_topic(reference)
            if folded not in seen:
                seen.add(folded)
                candidates.append(reference)

    return candidates


class StoryEngine:
    """
    Connects two topics with a story of at most two hops

    One engine can serve many calls, but not concurrently: callers running
    stories in parallel should use one engine per call. The article source
    may be shared freely.
    """

    def __init__(self, source: ArticleSource):
        self.source = source
        self.articles_fetched = 0  # Articles requested during the last build_story call

    def build_story(self, start: str, end: str) -> Story:
        """
        Build the story leading from start to end

        Args:
            start: Topic the story starts from
            end: Topic the story must reach

        Returns:
            Story with one or two hops

        Raises:
            MissingStartTopic, MissingEndTopic, TrivialRequest: invalid input
            TopicNotFound: start or end has no article (carries suggestions)
            NoPathFound: no connection within two hops (carries suggestions for end)
        """
        if not start:
            raise MissingStartTopic()
        if not end:
            raise MissingEndTopic()
        if start == end:
            raise TrivialRequest()

        logger.info("Building story", extra={"start_topic": start, "end_topic": end})

        # Memo of resolved articles for this call only
        articles: Dict[str, Optional[Article]] = {}
        self.articles_fetched = 0

        start_article = self._resolve(start, articles)
        if start_article is None:
            raise self._topic_not_found(start)

        if self._resolve(end, articles) is None:
            raise self._topic_not_found(end)

        # Depth 1: start references end directly
        paragraph = first_referencing_paragraph(start_article, end)
        if paragraph is not None:
            logger.info(f"Found direct story: {start} → {end}")
            return Story(hops=(Hop(source=start, target=end, text=paragraph.text),))

        # Depth 2: start references T, T references end
        for topic in candidate_topics(start_article, exclude=[start, end]):
            article = self._resolve(topic, articles)
            if article is None:
                logger.debug(f"Skipping '{topic}': no article")
                continue

            target_paragraph = first_referencing_paragraph(article, end)
            if target_paragraph is None:
                logger.debug(f"Dead end: '{topic}' does not reference '{end}'")
                continue

            start_paragraph = first_referencing_paragraph(start_article, topic)
            logger.info(f"Found story: {start} → {topic} → {end}")
            return Story(hops=(
                Hop(source=start, target=topic, text=start_paragraph.text),
                Hop(source=topic, target=end, text=target_paragraph.text),
            ))

        logger.info(
            "No story found within two hops",
            extra={"start_topic": start, "end_topic": end, "articles_fetched": self.articles_fetched}
        )
        suggestions = self.source.search(end)
        raise NoPathFound(end, self.format_suggestions(end, suggestions), suggestions)

    def tell(self, start: str, end: str) -> str:
        """
        Build a story and render the outcome as text

        Returns the rendered story on success, or the error message on
        failure. Never raises StoryError.
        """
        try:
            return self.build_story(start, end).render()
        except StoryError as e:
            return e.message

    def build_suggestions_msg(self, topic: str) -> str:
        """Search for alternatives to a topic and render them as a message"""
        return self.format_suggestions(topic, self.source.search(topic))

    @staticmethod
    def format_suggestions(topic: str, suggestions: List[str]) -> str:
        """
        Render suggestions for a topic that could not be found

        The header line is always present; each suggestion follows as a
        bulleted line. Every line ends with CRLF.
        """
        lines = [SUGGESTIONS_HEADER.format(topic=topic)]
        lines.extend(f"- {suggestion}" for suggestion in suggestions)
        return "".join(f"{line}\r\n" for line in lines)

    def _topic_not_found(self, topic: str) -> TopicNotFound:
        logger.info(f"No article for '{topic}', collecting suggestions")
        suggestions = self.source.search(topic)
        return TopicNotFound(topic, self.format_suggestions(topic, suggestions), suggestions)

    def _resolve(self, topic: str, articles: Dict[str, Optional[Article]]) -> Optional[Article]:
        """Resolve a topic through the source, once per topic name per call"""
        if topic in articles:
            return articles[topic]

        article = self.source.resolve(topic)
        articles[topic] = article
        self.articles_fetched += 1
        return article
