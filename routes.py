"""FastAPI routes for the top stories page."""

import logging
import time
from datetime import timedelta

import httpx
from fastapi import APIRouter
from fastapi.responses import HTMLResponse, PlainTextResponse
from jinja2 import TemplateError

from render import StoryRenderer, TemplateData
from sources.hackernews import UpstreamError
from stories import TopStoriesService

logger = logging.getLogger(__name__)
router = APIRouter()

# These get set by main.py at startup
_service: TopStoriesService | None = None
_renderer: StoryRenderer | None = None


def set_service(service: TopStoriesService):
    global _service
    _service = service


def set_renderer(renderer: StoryRenderer):
    global _renderer
    _renderer = renderer


@router.get("/", response_class=HTMLResponse)
async def index():
    start = time.perf_counter()

    try:
        stories = await _service.top_stories()
    except (UpstreamError, httpx.HTTPError):
        logger.exception("Failed to load top stories")
        return PlainTextResponse("Failed to load top stories", status_code=500)

    data = TemplateData(stories=stories, time=timedelta(seconds=time.perf_counter() - start))
    try:
        html = _renderer.render(data)
    except TemplateError:
        logger.exception("Failed to render template")
        return PlainTextResponse("Failed to process the template", status_code=500)

    return HTMLResponse(html)


@router.get("/health")
async def health():
    cache = _service.cache
    return {
        "status": "ok",
        "cached_stories": len(cache.get()),
        "cache_expired": cache.is_expired(),
    }
