"""Built-in request pre-filters.

A request filter runs before any origin check and returns a FilterResult:
ALLOW skips the origin check, BLOCK rejects outright, DEFER lets the origin
decide. Plain ``True`` / ``False`` / ``None`` returns are accepted too (see
FilterResult.coerce).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Union

from starlette.requests import Request

from originguard.models.decision import FilterResult

# request -> FilterResult | True | False | anything else (defer), or an awaitable of one.
RequestFilter = Callable[[Request], Union[Any, Awaitable[Any]]]

# Methods that must not change server state; a forged cross-site request with
# one of these has nothing to forge.
SAFE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def safe_methods_filter(request: Request) -> FilterResult:
    """Allow non-mutating methods without an origin check."""
    if request.method.upper() in SAFE_METHODS:
        return FilterResult.ALLOW
    return FilterResult.DEFER


def method_filter(
    allow: Iterable[str] = (),
    block: Iterable[str] = (),
) -> RequestFilter:
    """Build a filter that allows or blocks by HTTP method and defers otherwise.

    A method listed in both sets is blocked.

    Example:
        >>> guard = OriginGuard(list=["https://app.example"],
        ...                     request_filter=method_filter(allow=["GET"], block=["TRACE"]))
    """
    allowed = frozenset(m.upper() for m in allow)
    blocked = frozenset(m.upper() for m in block)

    def _filter(request: Request) -> FilterResult:
        method = request.method.upper()
        if method in blocked:
            return FilterResult.BLOCK
        if method in allowed:
            return FilterResult.ALLOW
        return FilterResult.DEFER

    return _filter


# Filters addressable by name from the YAML config file.
BUILTIN_FILTERS: dict[str, RequestFilter] = {
    "safe_methods": safe_methods_filter,
}
