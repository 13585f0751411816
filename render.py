"""HTML rendering of the story list with Jinja2."""

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from sources.base import DisplayItem

TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass
class TemplateData:
    stories: list[DisplayItem] = field(default_factory=list)
    time: timedelta = field(default_factory=timedelta)


def format_duration(value: timedelta) -> str:
    seconds = value.total_seconds()
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.3f}s"


class StoryRenderer:
    def __init__(self, template_dir: Path | str = TEMPLATE_DIR, template_name: str = "index.html"):
        self.template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["duration"] = format_duration

    def render(self, data: TemplateData) -> str:
        """Render the page. Raises jinja2.TemplateError on template problems."""
        template = self._env.get_template(self.template_name)
        return template.render(stories=data.stories, time=data.time)
