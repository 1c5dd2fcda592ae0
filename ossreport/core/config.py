"""Runtime settings, read from ``OSSREPORT_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

DEFAULT_API_URL = "https://ossindex.net"


@dataclass(frozen=True)
class Settings:
    """Scan and identification settings.

    CLI options override individual fields via :meth:`with_overrides`.
    """

    min_file_size: int = 1
    api_url: str = DEFAULT_API_URL
    api_user: str | None = None
    api_token: str | None = None
    api_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            min_file_size=int(os.environ.get("OSSREPORT_MIN_FILE_SIZE", "1")),
            api_url=os.environ.get("OSSREPORT_API_URL", DEFAULT_API_URL),
            api_user=os.environ.get("OSSREPORT_API_USER") or None,
            api_token=os.environ.get("OSSREPORT_API_TOKEN") or None,
            api_timeout=float(os.environ.get("OSSREPORT_API_TIMEOUT", "30")),
        )

    def with_overrides(self, **overrides: object) -> Settings:
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @property
    def api_auth(self) -> tuple[str, str] | None:
        if self.api_user and self.api_token:
            return (self.api_user, self.api_token)
        return None


@dataclass(frozen=True)
class ExportOptions:
    """What goes into the exported documents."""

    export_dependencies: bool = True
    include_images: bool = True
    include_artifacts: bool = True
