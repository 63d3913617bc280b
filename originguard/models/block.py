"""Rejection response builder for blocked requests.

emit_block() is the only place a rejection is produced. It honours the
configured response mode:

  PLAIN   — ``response_code`` + ``response_message`` as text/plain.
            Also the fallback for CUSTOM without a callback.
  JSON    — ``response_code`` + ``{"error": true, "message": response_message}``.
  CUSTOM  — the configured ``response_callback(request, writer)`` owns the
            response entirely. The writer arrives with ``response_code``
            already set as its status.

The body only ever contains the configured message (or whatever a custom
callback writes); no exception text or guard internals leak into it.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from originguard.models.decision import ResponseMode

if TYPE_CHECKING:
    from originguard.config import GuardConfig


class BlockResponseWriter:
    """Response capability handed to custom response callbacks.

    Callbacks set the status and write a body through this object; the guard
    turns it into a Starlette response once the callback returns. Writing a
    second body replaces the first. Nothing written means an empty body with
    the current status.
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.headers: dict[str, str] = {}
        self._content: Any = None
        self._response_class: Optional[type[Response]] = None

    def status(self, code: int) -> "BlockResponseWriter":
        self.status_code = code
        return self

    def send(self, content: str) -> None:
        self._content = content
        self._response_class = PlainTextResponse

    def json(self, payload: Any) -> None:
        self._content = payload
        self._response_class = JSONResponse

    @property
    def written(self) -> bool:
        return self._response_class is not None

    def to_response(self) -> Response:
        if self._response_class is None:
            return Response(status_code=self.status_code, headers=self.headers)
        return self._response_class(
            self._content,
            status_code=self.status_code,
            headers=self.headers,
        )


def build_plain_response(code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=code)


def build_json_response(code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "error": True,
            "message": message,
        },
    )


async def emit_block(config: "GuardConfig", request: Request) -> Response:
    """Build the rejection for a blocked request.

    Args:
        config:  Guard configuration (response mode, code, message, callback).
        request: The blocked request, passed through to a custom callback.

    Returns:
        The Starlette response to send instead of calling the next handler.

    Exceptions raised by a custom callback propagate to the caller.
    """
    if config.response_mode is ResponseMode.JSON:
        return build_json_response(config.response_code, config.response_message)

    if config.response_mode is ResponseMode.CUSTOM and config.response_callback is not None:
        writer = BlockResponseWriter(config.response_code)
        outcome = config.response_callback(request, writer)
        if inspect.isawaitable(outcome):
            await outcome
        return writer.to_response()

    # PLAIN, or CUSTOM with no callback configured
    return build_plain_response(config.response_code, config.response_message)
