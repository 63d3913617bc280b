"""Unit tests for originguard/models/block.py.

Tests the rejection emitter and the BlockResponseWriter capability, verifying:
  - PLAIN writes the message as text/plain with the configured status
  - JSON writes {"error": true, "message": ...} with the configured status
  - CUSTOM delegates entirely to the callback (sync or async)
  - CUSTOM without a callback falls back to PLAIN
  - the writer starts with the configured status code
"""

from __future__ import annotations

import json

import pytest

from originguard.config import GuardConfig
from originguard.constants import DEFAULT_MESSAGE
from originguard.models.block import BlockResponseWriter, emit_block


# ─── PLAIN ───────────────────────────────────────────────────────────────────


class TestPlainResponse:
    async def test_default_status_and_message(self, make_request) -> None:
        response = await emit_block(GuardConfig(), make_request())
        assert response.status_code == 400
        assert response.body.decode() == DEFAULT_MESSAGE

    async def test_content_type_is_plain_text(self, make_request) -> None:
        response = await emit_block(GuardConfig(), make_request())
        assert response.headers["content-type"].startswith("text/plain")

    async def test_custom_code_and_message(self, make_request) -> None:
        config = GuardConfig(response_code=403, response_message="Forbidden origin")
        response = await emit_block(config, make_request())
        assert response.status_code == 403
        assert response.body == b"Forbidden origin"

    async def test_never_structured(self, make_request) -> None:
        response = await emit_block(GuardConfig(response_message="plain text"), make_request())
        with pytest.raises(json.JSONDecodeError):
            json.loads(response.body)

    async def test_unrecognized_mode_behaves_as_plain(self, make_request) -> None:
        config = GuardConfig(response_mode="xml", response_message="m")
        response = await emit_block(config, make_request())
        assert response.body == b"m"
        assert response.headers["content-type"].startswith("text/plain")


# ─── JSON ────────────────────────────────────────────────────────────────────


class TestJsonResponse:
    async def test_body_schema(self, make_request) -> None:
        config = GuardConfig(response_mode="json", response_message="Blocked")
        response = await emit_block(config, make_request())
        assert json.loads(response.body) == {"error": True, "message": "Blocked"}

    async def test_compact_serialization(self, make_request) -> None:
        config = GuardConfig(response_mode="json", response_message="Blocked")
        response = await emit_block(config, make_request())
        assert response.body == b'{"error":true,"message":"Blocked"}'

    async def test_status_is_response_code(self, make_request) -> None:
        config = GuardConfig(response_mode="json", response_code=418)
        response = await emit_block(config, make_request())
        assert response.status_code == 418
        assert response.headers["content-type"] == "application/json"

    async def test_default_message(self, make_request) -> None:
        response = await emit_block(GuardConfig(response_mode="json"), make_request())
        assert json.loads(response.body)["message"] == DEFAULT_MESSAGE


# ─── CUSTOM ──────────────────────────────────────────────────────────────────


class TestCustomResponse:
    async def test_sync_callback_owns_response(self, make_request) -> None:
        def callback(request, writer: BlockResponseWriter) -> None:
            writer.status(451).send(f"no {request.method} for you")

        config = GuardConfig(response_mode="custom", response_callback=callback)
        response = await emit_block(config, make_request(method="PUT"))
        assert response.status_code == 451
        assert response.body == b"no PUT for you"

    async def test_async_callback_awaited(self, make_request) -> None:
        async def callback(request, writer: BlockResponseWriter) -> None:
            writer.json({"blocked": True})

        config = GuardConfig(response_mode="custom", response_callback=callback, response_code=409)
        response = await emit_block(config, make_request())
        assert response.status_code == 409
        assert json.loads(response.body) == {"blocked": True}

    async def test_writer_starts_with_response_code(self, make_request) -> None:
        seen: list[int] = []

        def callback(request, writer: BlockResponseWriter) -> None:
            seen.append(writer.status_code)

        config = GuardConfig(response_mode="custom", response_callback=callback, response_code=403)
        response = await emit_block(config, make_request())
        assert seen == [403]
        assert response.status_code == 403
        assert response.body == b""

    async def test_callback_receives_request(self, make_request) -> None:
        received = []

        def callback(request, writer) -> None:
            received.append(request)

        request = make_request()
        await emit_block(GuardConfig(response_mode="custom", response_callback=callback), request)
        assert received == [request]

    async def test_callback_headers_kept(self, make_request) -> None:
        def callback(request, writer: BlockResponseWriter) -> None:
            writer.headers["X-Blocked-By"] = "originguard"
            writer.send("blocked")

        config = GuardConfig(response_mode="custom", response_callback=callback)
        response = await emit_block(config, make_request())
        assert response.headers["x-blocked-by"] == "originguard"

    async def test_without_callback_falls_back_to_plain(self, make_request) -> None:
        config = GuardConfig(response_mode="custom", response_code=403, response_message="fallback")
        response = await emit_block(config, make_request())
        assert response.status_code == 403
        assert response.body == b"fallback"
        assert response.headers["content-type"].startswith("text/plain")

    async def test_callback_error_propagates(self, make_request) -> None:
        def callback(request, writer) -> None:
            raise RuntimeError("callback exploded")

        config = GuardConfig(response_mode="custom", response_callback=callback)
        with pytest.raises(RuntimeError, match="callback exploded"):
            await emit_block(config, make_request())


# ─── BlockResponseWriter ─────────────────────────────────────────────────────


class TestBlockResponseWriter:
    def test_empty_response_when_nothing_written(self) -> None:
        writer = BlockResponseWriter(400)
        assert writer.written is False
        response = writer.to_response()
        assert response.status_code == 400
        assert response.body == b""

    def test_last_write_wins(self) -> None:
        writer = BlockResponseWriter(400)
        writer.send("first")
        writer.json({"second": True})
        response = writer.to_response()
        assert json.loads(response.body) == {"second": True}

    def test_status_after_write_applies(self) -> None:
        writer = BlockResponseWriter(400)
        writer.send("body")
        writer.status(403)
        assert writer.to_response().status_code == 403

    def test_status_is_chainable(self) -> None:
        writer = BlockResponseWriter(400)
        assert writer.status(401) is writer
