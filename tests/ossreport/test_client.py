"""Tests for the identification client and the identify pass."""

from __future__ import annotations

import httpx
import pytest

from ossreport.client import IdentificationClient, IdentificationRecord
from ossreport.configuration import Configuration
from ossreport.core.config import Settings
from ossreport.identify import identify
from ossreport.models import FileRecord

_JQUERY = {
    "name": "jquery",
    "description": "jQuery JavaScript Library",
    "version": "1.11.0",
    "url": "https://jquery.com",
    "scm": "https://github.com/jquery/jquery",
    "home": "https://jquery.org",
    "cpes": ["cpe:/a:jquery:jquery:1.11.0"],
    "licenses": ["MIT"],
    "unrelated": True,
}


def _client(handler) -> IdentificationClient:
    return IdentificationClient("https://ids.example.com", transport=httpx.MockTransport(handler))


# ── IdentificationClient ─────────────────────────────────────────────────


class TestIdentificationClient:
    def test_resolve_hit(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=[_JQUERY])

        with _client(handler) as client:
            record = client.resolve("abc123")
        assert seen == ["/v1.0/sha1/abc123"]
        assert record.name == "jquery"
        assert record.scm_uri == "https://github.com/jquery/jquery"
        assert record.project_url == "https://jquery.com"
        assert record.licenses == ["MIT"]

    def test_object_body(self):
        with _client(lambda r: httpx.Response(200, json=_JQUERY)) as client:
            assert client.resolve("abc").version == "1.11.0"

    @pytest.mark.parametrize("status", [404, 500, 503])
    def test_non_success_is_no_data(self, status):
        with _client(lambda r: httpx.Response(status, json=_JQUERY)) as client:
            assert client.resolve("abc") is None

    def test_empty_list_is_no_data(self):
        with _client(lambda r: httpx.Response(200, json=[])) as client:
            assert client.resolve("abc") is None

    def test_transport_error_is_no_data(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _client(handler) as client:
            assert client.resolve("abc") is None

    def test_invalid_body_is_no_data(self):
        with _client(lambda r: httpx.Response(200, text="<html>")) as client:
            assert client.resolve("abc") is None

    def test_credentials_sent(self):
        auth_headers: list[str | None] = []

        def handler(request):
            auth_headers.append(request.headers.get("Authorization"))
            return httpx.Response(404)

        client = IdentificationClient(
            "https://ids.example.com",
            auth=("user", "token"),
            transport=httpx.MockTransport(handler),
        )
        with client:
            client.resolve("abc")
        assert auth_headers[0].startswith("Basic ")


class TestSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OSSREPORT_MIN_FILE_SIZE", "64")
        monkeypatch.setenv("OSSREPORT_API_URL", "https://ids.example.com")
        monkeypatch.setenv("OSSREPORT_API_USER", "u")
        monkeypatch.setenv("OSSREPORT_API_TOKEN", "t")
        settings = Settings.from_env()
        assert settings.min_file_size == 64
        assert settings.api_url == "https://ids.example.com"
        assert settings.api_auth == ("u", "t")

    def test_overrides_skip_none(self):
        settings = Settings().with_overrides(min_file_size=None, api_url="https://x")
        assert settings.min_file_size == 1
        assert settings.api_url == "https://x"

    def test_no_auth_without_token(self):
        assert Settings(api_user="u").api_auth is None


# ── identify ─────────────────────────────────────────────────────────────


class FakeResolver:
    def __init__(self, records: dict[str, IdentificationRecord]) -> None:
        self.records = records
        self.calls: list[str] = []

    def resolve(self, digest: str) -> IdentificationRecord | None:
        self.calls.append(digest)
        return self.records.get(digest)


class TestIdentify:
    def test_builds_projects(self):
        config = Configuration()
        config.add_record(FileRecord(digest="d1", path="a/jquery.js"))
        config.add_record(FileRecord(digest="d1", path="b/jquery.js"))
        config.add_record(FileRecord(digest="d2", path="app.js"))
        config.add_record(FileRecord(digest="d3", path="empty", ignored=True))
        resolver = FakeResolver({"d1": IdentificationRecord.model_validate(_JQUERY)})

        matched = identify(config, resolver)

        assert matched == 2
        assert resolver.calls == ["d1", "d2"]
        project = config.get_group("jquery").members[0]
        assert project.scm_uri == "https://github.com/jquery/jquery"
        assert project.version == "1.11.0"
        assert project.home_url == "https://jquery.org"
        assert project.cpes == ["cpe:/a:jquery:jquery:1.11.0"]
        assert project.files == ["d1"]

    def test_record_without_name_skipped(self):
        config = Configuration()
        config.add_record(FileRecord(digest="d1", path="x"))
        assert identify(config, FakeResolver({"d1": IdentificationRecord()})) == 0
        assert config.projects == {}
