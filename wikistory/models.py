from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Tuple


MAX_STORY_HOPS = 2


class Paragraph(BaseModel):
    """A unit of article content and the topics it references"""
    model_config = ConfigDict(frozen=True)

    text: str
    topics: Tuple[str, ...] = ()


class Article(BaseModel):
    """Resolved form of a topic: its paragraphs in declared order"""
    model_config = ConfigDict(frozen=True)

    topic: str
    paragraphs: Tuple[Paragraph, ...] = ()


class Hop(BaseModel):
    """One step of a story: the paragraph that leads from source to target"""
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    text: str

    @property
    def label(self) -> str:
        return f"({self.source} to {self.target})"

    def render(self) -> str:
        return f"-> {self.label}\r\n{self.text}\r\n"


class Story(BaseModel):
    """
    Successful result of a story search

    Rendered as one "-> (A to B)" line followed by the paragraph text per hop,
    every line terminated by CRLF.
    """
    model_config = ConfigDict(frozen=True)

    hops: Tuple[Hop, ...] = Field(..., min_length=1, max_length=MAX_STORY_HOPS)

    def render(self) -> str:
        return "".join(hop.render() for hop in self.hops)

    def __str__(self) -> str:
        return self.render()


class StoryRequest(BaseModel):
    """Request model for story building"""
    start: str = Field(default="", max_length=200, description="Starting Wikipedia topic")
    end: str = Field(default="", max_length=200, description="Target Wikipedia topic")

    @field_validator('start', 'end')
    @classmethod
    def strip_topic(cls, v: str) -> str:
        # Empty topics pass through so the engine can report which one is missing
        return v.strip()


class HopInfo(BaseModel):
    """Serialized hop for API responses"""
    label: str
    source: str
    target: str
    text: str


class StoryResponse(BaseModel):
    """Response model for a successfully built story"""
    success: bool = True
    story: str
    hops: List[HopInfo]

    @classmethod
    def from_story(cls, story: Story) -> "StoryResponse":
        return cls(
            story=story.render(),
            hops=[
                HopInfo(label=hop.label, source=hop.source, target=hop.target, text=hop.text)
                for hop in story.hops
            ]
        )


class StoryErrorResponse(BaseModel):
    """Response model for a failed story request"""
    success: bool = False
    error: str
    error_type: str
    topic: Optional[str] = None
    suggestions: List[str] = []
