"""
Wikipedia Story Builder - FastAPI Application
"""
from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from wikistory import config
from wikistory.engine import StoryEngine
from wikistory.errors import StoryError
from wikistory.models import StoryErrorResponse, StoryRequest, StoryResponse
from wikistory.source import ArticleSource
from wikistory.wikipedia import WikipediaArticleSource, close_shared_http_client

# Configure structured logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Cleanup: close the shared HTTP client on application shutdown
    close_shared_http_client()


# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title=config.API_TITLE, version=config.API_VERSION, lifespan=lifespan)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
    return response


_article_source = WikipediaArticleSource()


def get_article_source() -> ArticleSource:
    """Article source shared by all requests"""
    return _article_source


@app.exception_handler(StoryError)
async def story_error_handler(request: Request, exc: StoryError):
    """Render story failures as JSON, or as plain text for the text endpoint"""
    if request.url.path.endswith(".txt"):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    body = StoryErrorResponse(
        error=exc.message,
        error_type=type(exc).__name__,
        topic=exc.topic,
        suggestions=exc.suggestions
    )
    return JSONResponse(body.model_dump(), status_code=exc.status_code)


@app.get("/health")
def health():
    return {"status": "ok", "version": config.API_VERSION}


@app.post("/story", response_model=StoryResponse)
@limiter.limit(config.RATE_LIMIT)
def build_story_endpoint(request: Request, story_request: StoryRequest,
                         source: ArticleSource = Depends(get_article_source)):
    """
    Build a story connecting two Wikipedia topics

    Returns the story with its hops, or an error with suggested topics when
    a topic cannot be found or no connection exists within two hops.
    """
    logger.info(
        "Story request",
        extra={"start_term": story_request.start, "end_term": story_request.end}
    )

    # One engine per request: its article memo must not be shared
    engine = StoryEngine(source)
    story = engine.build_story(story_request.start, story_request.end)

    logger.info(f"Story built with {len(story.hops)} hops after {engine.articles_fetched} article lookups")
    return StoryResponse.from_story(story)


@app.get("/story.txt", response_class=PlainTextResponse)
@limiter.limit(config.RATE_LIMIT)
def build_story_text(request: Request,
                     start: str = Query(default="", max_length=200),
                     end: str = Query(default="", max_length=200),
                     source: ArticleSource = Depends(get_article_source)):
    """
    Build a story and return it as plain text

    Each hop is rendered as "-> (A to B)" followed by the paragraph text,
    every line terminated by CRLF.
    """
    engine = StoryEngine(source)
    return engine.build_story(start.strip(), end.strip()).render()


if __name__ == '__main__':
    import uvicorn
    import os
    port = int(os.environ.get('PORT', 8000))
    uvicorn.run(app, host='0.0.0.0', port=port)
