"""Flatten a configuration into rows of the tabular report."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

import structlog

from ossreport.configuration import Configuration
from ossreport.core.config import ExportOptions
from ossreport.models import (
    STATE_DEPENDENCY,
    STATE_IGNORED,
    FileRecord,
    ProjectRecord,
    path_basename,
)

log = structlog.get_logger("ossreport.report")

HEADER = [
    "Path",
    "State",
    "Project Name",
    "Project URI",
    "Version",
    "CPEs",
    "Project Licenses",
    "File License",
    "Project Description",
    "Digest",
    "Comment",
]

IGNORED_COMMENT = "Ignored: file is below the minimum size threshold"

IMAGE_EXTENSIONS = frozenset(
    {"png", "jpg", "jpeg", "gif", "bmp", "ico", "svg", "tif", "tiff", "webp"}
)
ARTIFACT_EXTENSIONS = frozenset(
    {"class", "jar", "war", "ear", "o", "obj", "a", "so", "dll", "dylib", "exe", "lib", "pyc", "pyo"}
)

Row = list[str | None]


def _quote_item(value: str) -> str:
    if "," in value or value.startswith('"'):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_list(values: Iterable[str] | None) -> str | None:
    """Bracket-delimited, comma-separated list; ``None`` stays an empty cell.

    Items containing a comma are double-quoted, CSV style.
    """
    if values is None:
        return None
    return "[" + ", ".join(_quote_item(v) for v in values) + "]"


def _extension(record: FileRecord) -> str:
    name = record.name or (path_basename(record.path) if record.path else "")
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def is_image(record: FileRecord) -> bool:
    return _extension(record) in IMAGE_EXTENSIONS


def is_artifact(record: FileRecord) -> bool:
    return _extension(record) in ARTIFACT_EXTENSIONS


def _strip_slashes(url: str) -> str:
    return url.rstrip("/")


class TabularExporter:
    """Produce report rows from a configuration.

    Row kinds, in order:

    * one row per (project, member file) pair;
    * one "pure dependency" row per project without member files;
    * one row per ignored file that belongs to no project.
    """

    def __init__(self, options: ExportOptions | None = None) -> None:
        self.options = options or ExportOptions()

    def _included(self, record: FileRecord) -> bool:
        if not self.options.include_images and is_image(record):
            return False
        if not self.options.include_artifacts and is_artifact(record):
            return False
        return True

    def rows(self, config: Configuration) -> list[Row]:
        unresolved = config.unresolved_digests()
        if unresolved:
            log.warning("export.unresolved_digests", count=len(unresolved), digests=unresolved[:10])

        lookup: dict[str, list[FileRecord]] = {}
        for record in config.files:
            if self._included(record):
                lookup.setdefault(record.digest, []).append(record)

        rows: list[Row] = []
        member_digests: set[str] = set()
        for group in config.projects.values():
            for project in group.members:
                if not project.files:
                    rows.append(self.dependency_row(project))
                    continue
                for digest in project.files:
                    member_digests.add(digest)
                    for record in lookup.get(digest, []):
                        rows.append(self.member_row(project, record))

        for record in config.files:
            if record.ignored and record.digest not in member_digests and self._included(record):
                rows.append(self.ignored_row(record))
        return rows

    @staticmethod
    def dependency_row(project: ProjectRecord) -> Row:
        urls: list[str] = []
        for url in (project.home_url, project.project_url):
            if url and url not in urls:
                urls.append(url)
        scm = project.scm_uri
        if scm and not (project.project_url and scm.startswith(project.project_url)):
            if scm not in urls:
                urls.append(scm)
        return [
            None,
            STATE_DEPENDENCY,
            project.name,
            encode_list(urls),
            project.version,
            encode_list(project.visible_cpes or None),
            encode_list(project.licenses),
            None,
            project.description,
            None,
            project.comment,
        ]

    @staticmethod
    def member_row(project: ProjectRecord, record: FileRecord) -> Row:
        # Positional [scm, project, home]; project blanked when it repeats the scm
        scm = project.scm_uri or ""
        project_url = project.project_url or ""
        if project_url and scm and _strip_slashes(project_url) == _strip_slashes(scm):
            project_url = ""
        return [
            record.path or record.name,
            record.state,
            project.name,
            encode_list([scm, project_url, project.home_url or ""]),
            project.version,
            encode_list(project.visible_cpes or None),
            encode_list(project.licenses),
            record.license,
            project.description,
            record.digest,
            record.comment,
        ]

    @staticmethod
    def ignored_row(record: FileRecord) -> Row:
        return [
            record.path or record.name,
            STATE_IGNORED,
            None,
            None,
            None,
            None,
            None,
            record.license,
            None,
            record.digest,
            record.comment or IGNORED_COMMENT,
        ]

    def write(self, config: Configuration, path: Path) -> int:
        """Write the header and all rows to *path*; returns the row count."""
        rows = self.rows(config)
        with open(path, "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(HEADER)
            writer.writerows(rows)
        log.info("export.csv_written", path=str(path), rows=len(rows))
        return len(rows)


def export_rows(config: Configuration, options: ExportOptions | None = None) -> list[Row]:
    """Rows of the tabular report for *config*, header excluded."""
    return TabularExporter(options).rows(config)


def write_csv(config: Configuration, path: Path, options: ExportOptions | None = None) -> int:
    return TabularExporter(options).write(config, path)
