"""
Utility functions for the application
"""


def fold_topic(topic: str) -> str:
    """
    Fold a topic name for loose comparison

    Args:
        topic: Topic name as written in an article or request

    Returns:
        Case-folded topic name
    """
    return topic.casefold()


def topics_match(a: str, b: str) -> bool:
    """Two topic references name the same topic if they agree ignoring case"""
    return fold_topic(a) == fold_topic(b)
