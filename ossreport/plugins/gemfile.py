"""Plugin for Bundler Gemfiles.

Gemfiles are Ruby code; this reads them line by line and only understands
the common declaration forms::

    source 'https://rubygems.org'
    group :development, :test do
      gem 'rails', '~> 4.2', :git => 'https://github.com/rails/rails.git', :tag => 'v4.2.0'
    end

``source`` persists until the next ``source`` line. ``group`` persists until
the next ``end``; groups are assumed not to nest.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import structlog

from ossreport.configuration import ConfigurationWriter
from ossreport.plugins.base import ManifestPlugin, register_plugin

log = structlog.get_logger("ossreport.plugins")

RUBYGEMS_URL = "https://rubygems.org"

# Token classes for the arguments following the gem name
TOKEN_STRING = "string"
TOKEN_GIT = "git"
TOKEN_TAG = "tag"
TOKEN_PLATFORMS = "platforms"
TOKEN_UNSUPPORTED = "unsupported"
TOKEN_UNKNOWN = "unknown"

# ":git => 'x'" and "git: 'x'"
_OPTION_RE = re.compile(r"^:?([A-Za-z_]+)\s*(?:=>|:)\s*(.*)$", re.DOTALL)

_OPTION_TOKENS = {
    "git": TOKEN_GIT,
    "tag": TOKEN_TAG,
    "platforms": TOKEN_PLATFORMS,
    "platform": TOKEN_PLATFORMS,
    "branch": TOKEN_UNSUPPORTED,
    "ref": TOKEN_UNSUPPORTED,
    "require": TOKEN_UNKNOWN,
    "path": TOKEN_UNKNOWN,
    "group": TOKEN_UNKNOWN,
    "groups": TOKEN_UNKNOWN,
}

_TRAILING_DO_RE = re.compile(r"\s+do\s*(\|.*\|)?$")


def unquote(token: str) -> str | None:
    """Strip the surrounding single quotes; ``None`` if *token* is not quoted."""
    token = token.strip()
    if len(token) >= 2 and token.startswith("'") and token.endswith("'"):
        return token[1:-1]
    return None


def split_args(text: str) -> list[str]:
    """Split an argument list on top-level commas.

    Commas inside quotes or brackets do not separate arguments, and a ``#``
    outside quotes starts a trailing comment.
    """
    parts: list[str] = []
    buf: list[str] = []
    depth = 0
    in_quote = False
    for ch in text:
        if in_quote:
            buf.append(ch)
            if ch == "'":
                in_quote = False
            continue
        if ch == "#":
            break
        if ch == "'":
            in_quote = True
        elif ch in "[{(":
            depth += 1
        elif ch in "]})":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            parts.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    tail = "".join(buf).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def classify(token: str) -> tuple[str, str]:
    """Return the token class of one argument and its value part."""
    if token.startswith("'"):
        return TOKEN_STRING, token
    m = _OPTION_RE.match(token)
    if m is None:
        return TOKEN_UNKNOWN, token
    return _OPTION_TOKENS.get(m.group(1), TOKEN_UNKNOWN), m.group(2).strip()


class GemfileReader:
    """Line-by-line Gemfile reader holding the active source and group."""

    def __init__(self, path: Path, config: ConfigurationWriter, ecosystem: str) -> None:
        self.path = path
        self.config = config
        self.ecosystem = ecosystem
        self.source: str | None = None
        self.group: str | None = None

    def feed(self, raw_line: str) -> None:
        line = raw_line.strip().replace('"', "'")
        if line.startswith("source "):
            self._handle_source(line[len("source "):])
        elif line.startswith("gem "):
            self.parse_gem(line[len("gem "):])
        elif line.startswith("group "):
            self._handle_group(line[len("group "):])
        elif line == "end" or line.startswith("end "):
            self.group = None

    def _handle_source(self, value: str) -> None:
        value = _TRAILING_DO_RE.sub("", value.strip())
        if value == ":rubygems":
            self.source = RUBYGEMS_URL
        else:
            self.source = unquote(value) or value

    def _handle_group(self, value: str) -> None:
        value = _TRAILING_DO_RE.sub("", value.strip())
        names = [part.strip().lstrip(":") for part in value.split(",") if part.strip()]
        self.group = ", ".join(names) or None

    def parse_gem(self, args: str) -> None:
        """Parse the arguments of one ``gem`` declaration and record it."""
        segments = split_args(args.strip())
        if not segments:
            return
        gem_name = unquote(segments[0])
        if not gem_name:
            log.warning("gem.invalid_name", path=str(self.path), line=args)
            return

        versions: list[str] = []
        uri: str | None = None
        tag: str | None = None
        in_versions = True

        for segment in segments[1:]:
            kind, value = classify(segment)
            if kind == TOKEN_STRING:
                constraint = unquote(value)
                if in_versions and constraint is not None:
                    versions.append(constraint)
                else:
                    log.debug("gem.skipped_argument", path=str(self.path), argument=segment)
                continue

            in_versions = False
            if kind == TOKEN_GIT:
                uri = unquote(value)
                if uri is None:
                    log.warning("gem.invalid_git_uri", path=str(self.path), value=value)
            elif kind == TOKEN_TAG:
                tag = unquote(value)
            elif kind == TOKEN_UNSUPPORTED:
                log.warning("gem.unsupported_option", path=str(self.path), gem=gem_name, option=segment)
            elif kind == TOKEN_UNKNOWN:
                log.debug("gem.skipped_argument", path=str(self.path), argument=segment)

        version = tag or (", ".join(versions) if versions else None)
        comment = self._comment()
        if uri is not None:
            self.config.add_dependency(
                self.path, self.ecosystem, uri=uri, name=gem_name, version=version, comment=comment
            )
        else:
            self.config.add_dependency(
                self.path, self.ecosystem, name=gem_name, version=version, comment=comment
            )

    def _comment(self) -> str | None:
        provenance: dict[str, str] = {}
        if self.source is not None:
            provenance["source"] = self.source
        if self.group is not None:
            provenance["group"] = self.group
        return json.dumps(provenance) if provenance else None


class GemfilePlugin(ManifestPlugin):
    name = "bundler"
    ecosystem = "bundler"

    def matches(self, path: Path) -> bool:
        return path.name == "Gemfile" or path.name.endswith(".gemfile")

    def extract(self, path: Path, content: str, config: ConfigurationWriter) -> None:
        reader = GemfileReader(path, config, self.ecosystem)
        for line in content.splitlines():
            reader.feed(line)


register_plugin(GemfilePlugin())
