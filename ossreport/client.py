"""HTTP client for the remote file identification service."""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ossreport.core.config import Settings

log = structlog.get_logger("ossreport.client")


class IdentificationRecord(BaseModel):
    """What the service knows about a file digest."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    description: str | None = None
    version: str | None = None
    project_url: str | None = Field(default=None, alias="url")
    scm_uri: str | None = Field(default=None, alias="scm")
    home_url: str | None = Field(default=None, alias="home")
    cpes: list[str] = Field(default_factory=list)
    licenses: list[str] = Field(default_factory=list)


class IdentificationClient:
    """Thin wrapper around the lookup-by-digest endpoint.

    Any non-success response, transport error or unreadable body is "no
    data"; there are no retries.
    """

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            auth=auth,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> IdentificationClient:
        return cls(settings.api_url, auth=settings.api_auth, timeout=settings.api_timeout)

    # ── lifecycle ──────────────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> IdentificationClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── public ─────────────────────────────────────────────────────────────

    def resolve(self, digest: str) -> IdentificationRecord | None:
        try:
            response = self._client.get(f"/v1.0/sha1/{digest}")
        except httpx.HTTPError as exc:
            log.warning("client.request_failed", digest=digest, error=str(exc))
            return None

        if response.status_code != 200:
            log.debug("client.no_data", digest=digest, status=response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            log.warning("client.invalid_body", digest=digest)
            return None

        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            return None

        try:
            return IdentificationRecord.model_validate(data)
        except ValidationError as exc:
            log.warning("client.invalid_record", digest=digest, error=str(exc))
            return None
