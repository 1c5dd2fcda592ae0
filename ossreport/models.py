"""Data model for a report configuration: files, dependencies and projects."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

log = structlog.get_logger("ossreport.model")

# File analysis states, as shown in the State column of the tabular report.
STATE_UNASSIGNED = "Unassigned"
STATE_DEPENDENCY = "Dependency"
STATE_CONFIRMED = "Confirmed"
STATE_IGNORED = "Ignored"

CPE_NONE = "cpe:/none"

_PATH_SEP_RE = re.compile(r"[\\/]")


def path_basename(path: str) -> str:
    """Last segment of a local path, accepting both separator styles."""
    return _PATH_SEP_RE.split(path.rstrip("\\/"))[-1]


@dataclass(frozen=True)
class DependencyFact:
    """A single dependency declared by a manifest or markup file.

    The reference is either ``uri`` or the (``group``, ``name``) pair. The
    comment carries provenance only and does not take part in equality.
    """

    ecosystem: str
    uri: str | None = None
    group: str | None = None
    name: str | None = None
    version: str | None = None
    comment: str | None = field(default=None, compare=False)


@dataclass(eq=False)
class FileRecord:
    """One scanned file occurrence.

    Identity is the content digest: two records are equal iff their digests
    are equal, whatever their paths.
    """

    digest: str
    path: str | None = None
    name: str | None = None
    license: str | None = None
    comment: str | None = None
    state: str | None = None
    ignored: bool = False
    dependencies: list[DependencyFact] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.digest == other.digest

    def __hash__(self) -> int:
        return hash(self.digest)

    def add_dependency(self, fact: DependencyFact) -> bool:
        """Append *fact* unless an equal fact is already present."""
        if fact in self.dependencies:
            return False
        self.dependencies.append(fact)
        return True

    def merge(self, other: FileRecord) -> None:
        """Fill every unset field from *other*; set fields are never overwritten."""
        if self.name is None:
            self.name = other.name
        if self.path is None:
            self.path = other.path
        if self.license is None:
            self.license = other.license
        if self.comment is None:
            self.comment = other.comment
        if self.state is None:
            self.state = other.state
        self.ignored = self.ignored or other.ignored

        if not self.dependencies:
            self.dependencies = list(other.dependencies)
        elif other.dependencies and set(other.dependencies) != set(self.dependencies):
            log.warning(
                "merge.dependencies_conflict",
                digest=self.digest,
                path=self.path,
                kept=len(self.dependencies),
                dropped=len(other.dependencies),
            )

    def refresh_name(self) -> None:
        """Derive the display name from the path, when a path is known."""
        if self.path:
            self.name = path_basename(self.path)


@dataclass
class ProjectRecord:
    """Identification result for one project version."""

    name: str | None = None
    description: str | None = None
    version: str | None = None
    project_url: str | None = None
    scm_uri: str | None = None
    home_url: str | None = None
    cpes: list[str] = field(default_factory=list)
    licenses: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    comment: str | None = None

    @property
    def visible_cpes(self) -> list[str]:
        return [cpe for cpe in self.cpes if cpe != CPE_NONE]

    def add_cpe(self, cpe: str | None) -> None:
        if cpe and cpe not in self.cpes:
            self.cpes.append(cpe)

    def add_license(self, license: str | None) -> None:
        if license and license not in self.licenses:
            self.licenses.append(license)

    def add_file(self, digest: str) -> None:
        """Add a member file, identified by digest only."""
        if digest not in self.files:
            self.files.append(digest)


@dataclass
class ProjectGroup:
    """Projects believed to be variants (forks, clones) of one upstream.

    Grouping is by project name, which is imprecise: unrelated projects
    sharing a name end up in the same group.
    """

    name: str
    members: list[ProjectRecord] = field(default_factory=list)

    def get_project(self, scm_uri: str | None, version: str | None) -> ProjectRecord:
        """Return the member keyed by (*scm_uri*, *version*), creating it if needed.

        With an SCM URI, an empty *version* matches any version of that URI.
        Without one, the member must have no SCM URI, carry the group name and
        have an equal version.
        """
        for member in self.members:
            if scm_uri:
                if member.scm_uri == scm_uri and (not version or version == member.version):
                    return member
            elif (
                not member.scm_uri
                and member.name == self.name
                and (member.version or None) == (version or None)
            ):
                return member

        project = ProjectRecord(name=self.name, scm_uri=scm_uri or None, version=version or None)
        self.members.append(project)
        return project
