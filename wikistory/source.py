"""
Article source capability consumed by the story engine
"""

from typing import List, Optional, Protocol, runtime_checkable

from wikistory.models import Article


@runtime_checkable
class ArticleSource(Protocol):
    """
    Anything that can turn a topic name into an article

    Implementations must be safe to share between engines; the engine only
    reads what they return.
    """

    def resolve(self, topic: str) -> Optional[Article]:
        """Return the article for an exact topic name, or None if there is none"""
        ...

    def search(self, topic: str) -> List[str]:
        """Return topic names related to the query, best match first"""
        ...
