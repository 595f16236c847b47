"""
Pytest configuration and fixtures for wpforge tests.
"""

import io
import sys
import zipfile
from pathlib import Path

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from wpforge.blueprint import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from wpforge.config import AppSettings, get_settings  # noqa: E402
from wpforge.resources import ResourceResolver  # noqa: E402
from wpforge.runtime import LocalRuntime  # noqa: E402

HELLO_PHP = b"<?php\n/*\nPlugin Name: Hello\nVersion: 1.0\n*/\n"
THEME_CSS = b"/*\nTheme Name: Pub\n*/\n"


def build_zip(files: dict) -> bytes:
    """Build an in-memory zip from a {path: bytes|str} mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in files.items():
            if isinstance(data, str):
                data = data.encode("utf-8")
            archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def make_zip():
    """Factory building zip bytes from a file mapping."""
    return build_zip


@pytest.fixture
def hello_zip():
    """A plugin archive with hello.php at its root."""
    return build_zip({"hello.php": HELLO_PHP})


@pytest.fixture
def theme_zip():
    """A theme archive wrapped in a single top-level folder."""
    return build_zip({"pub/style.css": THEME_CSS, "pub/index.php": "<?php"})


@pytest.fixture
def runtime(tmp_path):
    """LocalRuntime rooted in a temporary directory."""
    return LocalRuntime(tmp_path / "runtime")


@pytest.fixture
def settings(tmp_path):
    """Settings with state kept in a temporary directory."""
    return AppSettings(state_dir=tmp_path / "state")


@pytest.fixture
def http_archives():
    """URL -> bytes served by the mock transport; missing URLs return 404."""
    return {}


@pytest.fixture
def http_requests():
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def resolver(http_archives, http_requests):
    """ResourceResolver backed by httpx.MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        http_requests.append(request)
        body = http_archives.get(str(request.url))
        if body is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ResourceResolver(http_client=client)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset cached settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
