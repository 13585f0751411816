"""Top stories pipeline: concurrent item fetch, story filtering, rank-preserving assembly."""

import asyncio
import logging
from typing import Protocol
from urllib.parse import urlsplit

from cache import ExpiringCache
from sources.base import DisplayItem, Item

logger = logging.getLogger(__name__)


class ItemClient(Protocol):
    async def top_items(self) -> list[int]: ...

    async def get_item(self, item_id: int) -> Item: ...


def is_story_link(item: Item) -> bool:
    return item.type == "story" and item.url != ""


def _hostname(url: str) -> str:
    """Host part of ``url`` without userinfo or port, case kept as written."""
    netloc = urlsplit(url).netloc.rpartition("@")[2]
    if netloc.startswith("["):
        return netloc[1:].partition("]")[0]
    return netloc.partition(":")[0]


def parse_item(item: Item) -> DisplayItem:
    """Build a DisplayItem with the link's hostname, minus a leading "www."."""
    try:
        host = _hostname(item.url)
    except ValueError:
        host = ""
    return DisplayItem(**item.model_dump(), host=host.removeprefix("www."))


async def fetch_stories(ids: list[int], client: ItemClient) -> list[DisplayItem]:
    """Fetch every id concurrently and keep the ones that are link stories.

    One task per id, no concurrency cap. A failed fetch yields nothing.
    Every task reports exactly one result slot, so collection always ends.
    """
    if not ids:
        return []

    results = await asyncio.gather(
        *(client.get_item(item_id) for item_id in ids),
        return_exceptions=True,
    )

    stories: list[DisplayItem] = []
    failed = 0
    for item_id, result in zip(ids, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            failed += 1
            logger.debug("Dropping item %d: %s", item_id, result)
            continue
        if is_story_link(result):
            stories.append(parse_item(result))

    if failed:
        logger.info("Fetched %d/%d items (%d failed)", len(ids) - failed, len(ids), failed)
    return stories


def sort_stories(stories: list[DisplayItem], ordered_ids: list[int]) -> list[DisplayItem]:
    """Order stories by the position of their id in ``ordered_ids``."""
    by_id = {story.id: story for story in stories}
    ordered: list[DisplayItem] = []
    for item_id in ordered_ids:
        story = by_id.get(item_id)
        if story is not None:
            ordered.append(story)
        if len(ordered) >= len(by_id):
            break
    return ordered


async def get_top_stories(client: ItemClient, num_stories: int) -> list[DisplayItem]:
    """Collect up to ``num_stories`` link stories in upstream rank order.

    Pulls successive slices of the ranking until the quota is met or the
    ranking runs out. Errors from ``top_items`` propagate.
    """
    ids = await client.top_items()

    stories: list[DisplayItem] = []
    cursor = 0
    while len(stories) < num_stories and cursor < len(ids):
        remaining = num_stories - len(stories)
        batch = ids[cursor:cursor + remaining]
        stories.extend(await fetch_stories(batch, client))
        cursor += remaining

    if len(stories) < num_stories:
        logger.warning(
            "Ranking exhausted after %d ids with %d/%d stories", len(ids), len(stories), num_stories
        )

    return sort_stories(stories, ids)[:num_stories]


class TopStoriesService:
    """Serves the cached top stories, recomputing when the cache is stale."""

    def __init__(self, client: ItemClient, cache: ExpiringCache, num_stories: int = 30):
        self.client = client
        self.cache = cache
        self.num_stories = num_stories

    async def _load(self) -> list[DisplayItem]:
        return await get_top_stories(self.client, self.num_stories)

    async def top_stories(self) -> list[DisplayItem]:
        return await self.cache.get_or_refresh(self._load)
