"""
Story building errors

Every failure of a story request is one of these exceptions. Each carries the
exact message shown to the caller; the HTTP layer maps the classes to status
codes.
"""

from typing import List, Optional


class StoryError(Exception):
    """Base class for all story building failures"""

    status_code = 400

    def __init__(self, message: str, topic: Optional[str] = None, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.topic = topic
        self.suggestions = list(suggestions or [])

    def __str__(self) -> str:
        return self.message


class MissingStartTopic(StoryError):
    def __init__(self):
        super().__init__("Missing start topic.")


class MissingEndTopic(StoryError):
    def __init__(self):
        super().__init__("Missing end topic.")


class TrivialRequest(StoryError):
    """Start and end are the same topic"""

    def __init__(self):
        super().__init__("No story to build; same start and end topics.")


class TopicNotFound(StoryError):
    """A required topic has no article; the message lists suggestions"""

    status_code = 404

    def __init__(self, topic: str, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message, topic=topic, suggestions=suggestions)


class NoPathFound(StoryError):
    """Both topics exist but no connection within two hops was found"""

    status_code = 404

    def __init__(self, topic: str, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message, topic=topic, suggestions=suggestions)
