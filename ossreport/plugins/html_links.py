"""Plugin for absolute stylesheet and script references in HTML/JSP pages."""

from __future__ import annotations

from html.parser import HTMLParser
from pathlib import Path

from ossreport.configuration import ConfigurationWriter
from ossreport.plugins.base import ManifestPlugin, register_plugin

_SUPPORTED_EXTENSIONS = {"html", "jsp"}

# element -> attribute holding the external reference
_LINK_ATTRIBUTES = {"link": "href", "script": "src"}


class _LinkCollector(HTMLParser):
    """Collect absolute http(s) references; tolerant of malformed markup."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.links: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        wanted = _LINK_ATTRIBUTES.get(tag)
        if wanted is None:
            return
        for attr, value in attrs:
            if attr == wanted and value:
                value = value.strip()
                if value.startswith(("http://", "https://")):
                    self.links.append(value)

    handle_startendtag = handle_starttag


class HtmlLinksPlugin(ManifestPlugin):
    name = "html"
    ecosystem = "html"

    def matches(self, path: Path) -> bool:
        return path.suffix[1:] in _SUPPORTED_EXTENSIONS

    def extract(self, path: Path, content: str, config: ConfigurationWriter) -> None:
        collector = _LinkCollector()
        collector.feed(content)
        collector.close()
        for link in collector.links:
            config.add_dependency(path, self.ecosystem, uri=link)


register_plugin(HtmlLinksPlugin())
