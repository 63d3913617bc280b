"""Tests for the demo host in demo/demo_server.py."""

from __future__ import annotations

from httpx import ASGITransport, AsyncClient

from demo.demo_server import PAGE, create_app

SELF_ORIGIN = "http://127.0.0.1:4500"


async def _send(method: str, path: str, headers: dict[str, str] | None = None):
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url=SELF_ORIGIN) as client:
        return await client.request(method, path, headers=headers or {})


class TestDemoServer:
    async def test_index_unguarded(self) -> None:
        response = await _send("GET", "/")
        assert response.status_code == 200
        assert response.text == PAGE

    async def test_link_from_own_page_allowed(self) -> None:
        response = await _send("GET", "/end", {"Referer": f"{SELF_ORIGIN}/"})
        assert response.status_code == 200

    async def test_direct_navigation_blocked(self) -> None:
        response = await _send("GET", "/end")
        assert response.status_code == 400

    async def test_foreign_link_blocked(self) -> None:
        response = await _send("GET", "/end", {"Referer": "http://elsewhere.example/"})
        assert response.status_code == 400

    async def test_post_always_allowed(self) -> None:
        response = await _send("POST", "/end", {"Origin": "http://elsewhere.example"})
        assert response.status_code == 200
