"""Origin decision engine.

OriginGuard.evaluate() runs three stages over one request:

  1. Pre-filter   — optional request_filter; ALLOW / BLOCK end here, DEFER falls through.
  2. Extraction   — Origin, else Referer, reduced to a normalized origin.
                    Missing or unparseable → BLOCK. Fail-closed in every list mode.
  3. List policy  — WHITELIST: allow iff listed.
                    BLACKLIST: block iff listed.
                    CUSTOM:    allow iff list_callback(origin, request) is truthy;
                               no callback configured → BLOCK.

OriginGuard.handle() applies the result: ALLOW awaits the host's ``call_next``,
BLOCK returns the configured rejection. Exactly one of the two happens.

The guard holds nothing but its frozen GuardConfig, so a single instance is
safe to share across concurrent requests. Exceptions raised by caller-supplied
callbacks are not caught here; they reach the host's error handling unchanged.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Optional

from starlette.requests import Request
from starlette.responses import Response

from originguard.config import GuardConfig
from originguard.models.block import emit_block
from originguard.models.decision import (
    Decision,
    FilterResult,
    GuardResult,
    ListMode,
    Reason,
)
from originguard.origin import OriginParseError, extract_raw_origin, normalize_origin
from originguard.utils.logger import get_logger, sanitize_header_value

logger = get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class OriginGuard:
    """Per-request origin validation over an immutable configuration.

    Usage:
        guard = OriginGuard(list=["http://127.0.0.1:4500"])
        result = await guard.evaluate(request)
        response = await guard.handle(request, call_next)

    Either pass a ready GuardConfig or the option names accepted by
    GuardConfig.from_options(); not both.
    """

    def __init__(self, config: Optional[GuardConfig] = None, **options: Any) -> None:
        if config is not None and options:
            raise TypeError("Pass either a GuardConfig or guard options, not both")
        self._config = config if config is not None else GuardConfig.from_options(**options)
        logger.info(
            "Origin guard initialised",
            list_mode=self._config.list_mode.value,
            origins=sorted(self._config.origins),
            response_mode=self._config.response_mode.value,
            response_code=self._config.response_code,
            request_filter=self._config.request_filter is not None,
        )

    @property
    def config(self) -> GuardConfig:
        return self._config

    # ── Decision ─────────────────────────────────────────────────────────────

    async def evaluate(self, request: Request) -> GuardResult:
        """Decide whether ``request`` may proceed. Performs no response I/O."""
        config = self._config

        if config.request_filter is not None:
            verdict = FilterResult.coerce(await _resolve(config.request_filter(request)))
            if verdict is FilterResult.ALLOW:
                return GuardResult(Decision.ALLOW, Reason.FILTER_ALLOW)
            if verdict is FilterResult.BLOCK:
                return GuardResult(Decision.BLOCK, Reason.FILTER_BLOCK)

        header, raw_origin = extract_raw_origin(request.headers)
        if raw_origin is None:
            return GuardResult(Decision.BLOCK, Reason.MISSING_ORIGIN)

        try:
            origin = normalize_origin(raw_origin)
        except OriginParseError as exc:
            logger.debug(
                "Unparseable origin header",
                header=header,
                value=sanitize_header_value(raw_origin),
                error=str(exc),
            )
            return GuardResult(Decision.BLOCK, Reason.MALFORMED_ORIGIN, source_header=header)

        decision, reason = await self._apply_list_policy(origin, request)
        return GuardResult(decision, reason, origin=origin, source_header=header)

    async def _apply_list_policy(self, origin: str, request: Request) -> tuple[Decision, Reason]:
        config = self._config
        listed = origin in config.origins

        if config.list_mode is ListMode.BLACKLIST:
            if listed:
                return Decision.BLOCK, Reason.LISTED
            return Decision.ALLOW, Reason.NOT_LISTED

        if config.list_mode is ListMode.CUSTOM:
            if config.list_callback is None:
                return Decision.BLOCK, Reason.NO_CALLBACK
            if await _resolve(config.list_callback(origin, request)):
                return Decision.ALLOW, Reason.CALLBACK_ALLOW
            return Decision.BLOCK, Reason.CALLBACK_DENY

        if listed:
            return Decision.ALLOW, Reason.LISTED
        return Decision.BLOCK, Reason.NOT_LISTED

    # ── Result application ───────────────────────────────────────────────────

    async def block(self, request: Request) -> Response:
        """Build the configured rejection for ``request``."""
        return await emit_block(self._config, request)

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        """Evaluate ``request`` and either continue the chain or reject it."""
        result = await self.evaluate(request)

        if result.allowed:
            logger.debug(
                "Request allowed",
                reason=result.reason.value,
                origin=result.origin,
                method=request.method,
                path=request.url.path,
            )
            return await call_next(request)

        logger.warning(
            "Request blocked",
            reason=result.reason.value,
            origin=result.origin,
            source_header=result.source_header,
            method=request.method,
            path=request.url.path,
        )
        return await self.block(request)
