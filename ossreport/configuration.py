"""Configuration — the fact store built while scanning a tree."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from ossreport.digest import file_digest
from ossreport.exceptions import UnregisteredFileError
from ossreport.models import DependencyFact, FileRecord, ProjectGroup

log = structlog.get_logger("ossreport.configuration")


@runtime_checkable
class ConfigurationWriter(Protocol):
    """The part of a configuration that scan plugins are allowed to touch."""

    def add_file(self, path: Path) -> FileRecord: ...

    def add_dependency(
        self,
        path: Path,
        ecosystem: str,
        *,
        uri: str | None = None,
        group: str | None = None,
        name: str | None = None,
        version: str | None = None,
        comment: str | None = None,
    ) -> DependencyFact: ...


class Configuration:
    """Files, their dependencies, and identified projects for one report.

    ``files`` keeps every scanned occurrence in insertion order; several
    records may share a digest. ``projects`` maps a group name to its
    :class:`ProjectGroup`.
    """

    def __init__(self, min_file_size: int = 0) -> None:
        self.min_file_size = min_file_size
        self.timestamp = datetime.now(timezone.utc)
        self.files: list[FileRecord] = []
        self.projects: dict[str, ProjectGroup] = {}
        self._by_path: dict[str, FileRecord] = {}

    # ── scan-time writes ─────────────────────────────────────────────────

    def add_file(self, path: Path) -> FileRecord:
        """Digest *path* and record it.

        Raises :class:`OSError` if the file cannot be read.
        """
        key = str(path)
        existing = self._by_path.get(key)
        if existing is not None:
            return existing

        digest = file_digest(path)
        record = FileRecord(digest=digest, path=key, name=path.name)
        if path.stat().st_size < self.min_file_size:
            record.ignored = True
        self.add_record(record)
        log.debug("checksum.added", digest=digest, path=key, ignored=record.ignored)
        return record

    def add_dependency(
        self,
        path: Path,
        ecosystem: str,
        *,
        uri: str | None = None,
        group: str | None = None,
        name: str | None = None,
        version: str | None = None,
        comment: str | None = None,
    ) -> DependencyFact:
        """Attach a dependency to a file previously passed to :meth:`add_file`.

        Raises :class:`UnregisteredFileError` otherwise.
        """
        record = self._by_path.get(str(path))
        if record is None:
            raise UnregisteredFileError(str(path))
        fact = DependencyFact(
            ecosystem=ecosystem,
            uri=uri,
            group=group,
            name=name,
            version=version,
            comment=comment,
        )
        if record.add_dependency(fact):
            log.debug("dependency.added", path=record.path, ecosystem=ecosystem, name=name, uri=uri)
        return fact

    # ── model access ─────────────────────────────────────────────────────

    def add_record(self, record: FileRecord) -> FileRecord:
        """Store an already-built record (used by the loaders)."""
        self.files.append(record)
        if record.path:
            self._by_path.setdefault(record.path, record)
        return record

    def get_file(self, path: str) -> FileRecord | None:
        return self._by_path.get(path)

    def get_group(self, name: str) -> ProjectGroup:
        group = self.projects.get(name)
        if group is None:
            group = ProjectGroup(name=name)
            self.projects[name] = group
        return group

    def digests(self) -> set[str]:
        return {record.digest for record in self.files}

    def unresolved_digests(self) -> list[str]:
        """Project member digests that match no file record."""
        known = self.digests()
        missing: list[str] = []
        for group in self.projects.values():
            for project in group.members:
                for digest in project.files:
                    if digest not in known and digest not in missing:
                        missing.append(digest)
        return missing

    def touch(self) -> None:
        """Mark the configuration as modified now."""
        self.timestamp = datetime.now(timezone.utc)

    # ── merge ────────────────────────────────────────────────────────────

    def merge(self, other: Configuration) -> Configuration:
        """Merge identification data from *other* into this configuration.

        This side defines the file population and wins on every field it has
        set; records only present in *other* are not added. Project data is
        not deep-merged: when both sides have projects, this side's are kept.
        """
        lookup: dict[str, FileRecord] = {}
        for record in other.files:
            lookup.setdefault(record.digest, record)

        matched = 0
        for record in self.files:
            theirs = lookup.get(record.digest)
            if theirs is not None and theirs is not record:
                record.merge(theirs)
                record.refresh_name()
                matched += 1

        if self.projects and other.projects:
            log.warning(
                "merge.projects_conflict",
                kept=len(self.projects),
                dropped=len(other.projects),
            )
        elif other.projects:
            self.projects = other.projects

        log.info("merge.done", files=len(self.files), matched=matched, groups=len(self.projects))
        return self
