"""Starlette middleware that puts an OriginGuard in front of the app.

Registration:
    application.add_middleware(
        OriginGuardMiddleware,
        list=["https://app.example"],
        request_filter=safe_methods_filter,
    )

With ``path_prefix`` set, only requests under that path are checked and all
other paths pass through unchanged (zero overhead), the same as mounting the
guard on a sub-application.
"""

from __future__ import annotations

from typing import Any, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from originguard.config import GuardConfig
from originguard.guard import OriginGuard


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Origin / Referer fails the configured policy.

    Accepts a prebuilt ``guard``, a ``config``, or the GuardConfig option
    names as keyword arguments.
    """

    def __init__(
        self,
        app: ASGIApp,
        guard: Optional[OriginGuard] = None,
        *,
        config: Optional[GuardConfig] = None,
        path_prefix: Optional[str] = None,
        **options: Any,
    ) -> None:
        super().__init__(app)
        if guard is not None and (config is not None or options):
            raise TypeError("Pass either an OriginGuard or guard configuration, not both")
        self.guard = guard if guard is not None else OriginGuard(config, **options)
        self.path_prefix = path_prefix

    def _in_scope(self, path: str) -> bool:
        """True for the prefix itself and anything below it, never for siblings like /endless."""
        if not self.path_prefix:
            return True
        base = self.path_prefix.rstrip("/")
        return path == self.path_prefix or path == base or path.startswith(base + "/")

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        if not self._in_scope(request.url.path):
            return await call_next(request)
        return await self.guard.handle(request, call_next)
