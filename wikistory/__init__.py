"""
WikiStory - Wikipedia story builder

This package connects two Wikipedia topics with a short story built from
the paragraphs that cross-reference them, searching at most two hops.
"""

__version__ = "1.0.0"
