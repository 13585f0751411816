from pydantic import BaseModel, ConfigDict


class Item(BaseModel):
    """A Hacker News item as returned by the item endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    type: str = ""
    by: str = ""
    time: int = 0
    title: str = ""
    url: str = ""
    text: str = ""
    score: int = 0
    descendants: int = 0
    kids: list[int] = []
    dead: bool = False
    deleted: bool = False


class DisplayItem(Item):
    """An item ready for display, with the hostname of its link."""

    host: str = ""
