import logging

import httpx
from pydantic import ValidationError

from sources.base import Item

logger = logging.getLogger(__name__)

HN_API_BASE_URL = "https://hacker-news.firebaseio.com/v0"


class UpstreamError(Exception):
    """Raised when the Hacker News API cannot be reached or returns bad data."""


class HackerNewsClient:
    def __init__(
        self,
        base_url: str = HN_API_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str):
        url = f"{self.base_url}/{path}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"GET {url} returned invalid JSON") from e

    async def top_items(self) -> list[int]:
        """Return the ids of the current top stories, best ranked first."""
        data = await self._get_json("topstories.json")
        if not isinstance(data, list):
            raise UpstreamError(f"topstories returned {type(data).__name__}, expected list")
        try:
            return [int(item_id) for item_id in data]
        except (TypeError, ValueError) as e:
            raise UpstreamError("topstories contains non-integer ids") from e

    async def get_item(self, item_id: int) -> Item:
        data = await self._get_json(f"item/{item_id}.json")
        if data is None:
            raise UpstreamError(f"item {item_id} not found")
        try:
            return Item.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"item {item_id} is malformed") from e
