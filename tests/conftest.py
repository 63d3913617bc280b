"""Root test configuration for OriginGuard.

Keeps every test independent of the developer's environment: the config
environment variables are cleared and load_config() only searches the paths a
test hands it explicitly.

Also provides ``make_request``: a factory for Starlette requests built from a
raw ASGI scope, so the decision engine can be unit-tested without a server.
"""

from typing import Callable, Optional

import pytest
from starlette.requests import Request


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear config env vars and the default search paths for all tests."""
    monkeypatch.delenv("ORIGINGUARD_CONFIG", raising=False)
    monkeypatch.delenv("ORIGINGUARD_RESPONSE_CODE", raising=False)
    monkeypatch.setattr("originguard.config.DEFAULT_CONFIG_PATHS", [])


def _build_request(
    method: str = "POST",
    path: str = "/",
    origin: Optional[str] = None,
    referer: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> Request:
    raw_headers: list[tuple[bytes, bytes]] = []
    if origin is not None:
        raw_headers.append((b"origin", origin.encode("latin-1")))
    if referer is not None:
        raw_headers.append((b"referer", referer.encode("latin-1")))
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "root_path": "",
        "query_string": b"",
        "headers": raw_headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 50000),
    }
    return Request(scope)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Return the request factory: make_request(method, path, origin=..., referer=...)."""
    return _build_request
