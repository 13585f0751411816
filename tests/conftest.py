import pytest

from sources.base import Item
from tests.fakes import FakeHackerNewsClient, story


@pytest.fixture
def five_item_client():
    """Ranking [1..5] where 2 is an Ask HN (no url) and 4 is a job."""
    items = [
        story(1),
        Item(id=2, type="story", title="Ask HN: anything?"),
        story(3),
        Item(id=4, type="job", title="Hiring", url="https://jobs.example.com"),
        story(5),
    ]
    return FakeHackerNewsClient([1, 2, 3, 4, 5], items)
