#!/usr/bin/env python3
"""Demo host for OriginGuard.

Serves a page with a link and a POST form that both target /end. The /end
path is guarded by a whitelist holding only this server's own origin, plus a
request filter that lets every POST through without an origin check.

  GET  /end from a page on http://127.0.0.1:4500  → allowed (whitelisted origin)
  GET  /end typed into the address bar            → blocked (no Origin/Referer)
  POST /end                                       → allowed (request filter)

Usage:
    python3 demo/demo_server.py
    open http://127.0.0.1:4500/
"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from originguard import FilterResult, OriginGuardMiddleware
from originguard.utils.logger import configure_logging, get_logger

configure_logging(log_level="DEBUG", json_output=False)
logger = get_logger("originguard.demo")

HOST = "127.0.0.1"
PORT = 4500

PAGE = (
    "<a href=/end>end</a>"
    "<form method='post' action='/end'><button>submit</button></form>"
)


def allow_posts(request: Request) -> FilterResult:
    """Let every POST through; everything else is left to the origin check."""
    logger.info("Request filter", method=request.method)
    if request.method == "POST":
        return FilterResult.ALLOW
    return FilterResult.DEFER


def create_app() -> FastAPI:
    app = FastAPI(title="OriginGuard Demo")
    app.add_middleware(
        OriginGuardMiddleware,
        path_prefix="/end",
        list=[f"http://{HOST}:{PORT}"],
        request_filter=allow_posts,
    )

    @app.api_route("/{path:path}", methods=["GET", "POST"], response_class=HTMLResponse)
    async def page(path: str) -> str:
        return PAGE

    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Starting OriginGuard demo", host=HOST, port=PORT)
    uvicorn.run(app, host=HOST, port=PORT)
