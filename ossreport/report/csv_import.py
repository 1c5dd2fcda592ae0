"""Load a reviewed tabular report back into a configuration."""

from __future__ import annotations

import csv
from pathlib import Path

import structlog

from ossreport.configuration import Configuration
from ossreport.exceptions import ImportFormatError, ListFormatError
from ossreport.models import (
    STATE_DEPENDENCY,
    STATE_IGNORED,
    STATE_UNASSIGNED,
    FileRecord,
    path_basename,
)
from ossreport.report.csv_export import IGNORED_COMMENT

log = structlog.get_logger("ossreport.report")

REQUIRED_COLUMNS = ("Path", "State", "Project Name", "Digest")

OVERRIDE_NAME = "Override Name"
OVERRIDE_LICENSE = "Override License"


def decode_list(text: str | None) -> list[str]:
    """Decode a ``[a, b, c]`` cell. Items are stripped; empty items are kept.

    Double-quoted items may contain commas.

    Raises :class:`ListFormatError` when the brackets are missing.
    """
    text = (text or "").strip()
    if not text:
        return []
    if not (text.startswith("[") and text.endswith("]")):
        raise ListFormatError(text)
    inner = text[1:-1].strip()
    if not inner:
        return []
    row = next(csv.reader([inner], skipinitialspace=True))
    return [item.strip() for item in row]


def _cell(row: dict[str, str | None], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


class CsvImporter:
    """Accumulate report rows into a :class:`Configuration`."""

    def __init__(self, config: Configuration | None = None) -> None:
        self.config = config or Configuration()
        self._records: dict[tuple[str, str | None], FileRecord] = {}
        self.skipped = 0

    def add_row(self, row: dict[str, str | None]) -> None:
        state = _cell(row, "State")
        if state is not None and state.lower() == STATE_UNASSIGNED.lower():
            self.skipped += 1
            return

        record: FileRecord | None = None
        digest = _cell(row, "Digest")
        if digest is not None:
            record = self._record(digest, _cell(row, "Path"))
            if record.license is None:
                record.license = _cell(row, "File License")
            comment = _cell(row, "Comment")
            if record.comment is None and comment != IGNORED_COMMENT:
                record.comment = comment
            if state == STATE_IGNORED:
                record.ignored = True
            elif record.state is None:
                record.state = state

        override_name = _cell(row, OVERRIDE_NAME)
        if override_name is not None:
            self._add_override(override_name, _cell(row, OVERRIDE_LICENSE), record)
            return

        name = _cell(row, "Project Name")
        if name is None:
            return

        urls = decode_list(row.get("Project URI"))
        if record is not None:
            scm, project_url, home = (urls + ["", "", ""])[:3]
        else:
            scm, project_url, home = self._dependency_urls(urls)

        group = self.config.get_group(name)
        project = group.get_project(scm or None, _cell(row, "Version"))
        project.project_url = project.project_url or project_url or None
        project.home_url = project.home_url or home or None
        project.description = project.description or _cell(row, "Project Description")
        for cpe in decode_list(row.get("CPEs")):
            project.add_cpe(cpe)
        for license in decode_list(row.get("Project Licenses")):
            project.add_license(license)

        if record is not None:
            project.add_file(record.digest)
        elif state in (None, STATE_DEPENDENCY) and project.comment is None:
            project.comment = _cell(row, "Comment")

    @staticmethod
    def _dependency_urls(urls: list[str]) -> tuple[str, str, str]:
        """Map an unpositioned (home, project, scm) list back to (scm, project, home)."""
        urls = [url for url in urls if url]
        if len(urls) >= 3:
            return urls[2], urls[1], urls[0]
        if len(urls) == 2:
            return "", urls[1], urls[0]
        if len(urls) == 1:
            return "", urls[0], ""
        return "", "", ""

    def _add_override(
        self, name: str, license: str | None, record: FileRecord | None
    ) -> None:
        project = self.config.get_group(name).get_project(None, None)
        project.add_license(license)
        if record is not None:
            project.add_file(record.digest)

    def _record(self, digest: str, path: str | None) -> FileRecord:
        key = (digest, path)
        record = self._records.get(key)
        if record is None:
            record = FileRecord(
                digest=digest,
                path=path,
                name=path_basename(path) if path else None,
            )
            self.config.add_record(record)
            self._records[key] = record
        return record


def import_csv(path: Path, config: Configuration | None = None) -> Configuration:
    """Read the tabular report at *path* into a configuration.

    Rows whose state is ``Unassigned`` are skipped. Raises
    :class:`ImportFormatError` when a required column is missing and
    :class:`ListFormatError` for malformed list cells.
    """
    importer = CsvImporter(config)
    with open(path, newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        fieldnames = reader.fieldnames or []
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise ImportFormatError(f"{path}: missing columns {missing}")
        for row in reader:
            importer.add_row(row)

    log.info(
        "import.csv_loaded",
        path=str(path),
        files=len(importer.config.files),
        groups=len(importer.config.projects),
        skipped=importer.skipped,
    )
    return importer.config
