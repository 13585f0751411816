"""FastAPI application — entry point for the quiet Hacker News server."""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from cache import ExpiringCache
from config import settings
from render import TEMPLATE_DIR, StoryRenderer
from routes import router, set_renderer, set_service
from sources.hackernews import HackerNewsClient
from stories import TopStoriesService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    client = HackerNewsClient(base_url=settings.hn_api_base_url, timeout=settings.hn_timeout)
    cache = ExpiringCache()
    set_service(TopStoriesService(client, cache, num_stories=settings.num_stories))
    set_renderer(StoryRenderer(settings.template_dir or TEMPLATE_DIR))

    logger.info("Serving top %d stories from %s", settings.num_stories, settings.hn_api_base_url)
    logger.info("Cache expiration: %.0fs", cache.expiration.total_seconds())
    yield

    await client.aclose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Quiet Hacker News",
    description="Top Hacker News link stories, without the noise",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(router)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the top Hacker News stories")
    parser.add_argument("--port", type=int, default=settings.port, help="the port to start the web server on")
    parser.add_argument(
        "--num_stories", type=int, default=settings.num_stories, help="the number of top stories to display"
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    settings.port = args.port
    settings.num_stories = args.num_stories
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
