from sources.base import DisplayItem, Item
from sources.hackernews import HackerNewsClient, UpstreamError

__all__ = ["DisplayItem", "HackerNewsClient", "Item", "UpstreamError"]
