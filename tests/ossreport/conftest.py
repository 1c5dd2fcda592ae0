"""Shared fixtures for ossreport tests."""

import hashlib

import pytest

from ossreport.configuration import Configuration


@pytest.fixture
def config():
    return Configuration()


@pytest.fixture
def sha1():
    return lambda data: hashlib.sha1(data).hexdigest()


@pytest.fixture
def write_file(tmp_path):
    """Create a file under tmp_path (parents included) and return its path."""

    def _write(relative: str, content: str | bytes = "content\n"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    return _write
