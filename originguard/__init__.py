"""OriginGuard — Origin / Referer based CSRF protection for Starlette and FastAPI.

Public API:
    OriginGuard            — decision engine (evaluate / handle / block)
    OriginGuardMiddleware  — Starlette middleware wrapping an OriginGuard
    GuardConfig            — immutable guard configuration
    load_config            — GuardConfig from .originguard/config.yaml
    ListMode, ResponseMode, FilterResult, Decision, Reason, GuardResult
    BlockResponseWriter    — response capability for custom response callbacks
    safe_methods_filter, method_filter
    InvalidOriginEntry, OriginParseError, normalize_origin
    DEFAULT_MESSAGE, DEFAULT_RESPONSE_CODE
"""
from originguard.config import GuardConfig, load_config
from originguard.constants import DEFAULT_MESSAGE, DEFAULT_RESPONSE_CODE
from originguard.filters import method_filter, safe_methods_filter
from originguard.guard import OriginGuard
from originguard.middleware import OriginGuardMiddleware
from originguard.models.block import BlockResponseWriter
from originguard.models.decision import (
    Decision,
    FilterResult,
    GuardResult,
    ListMode,
    Reason,
    ResponseMode,
)
from originguard.origin import InvalidOriginEntry, OriginParseError, normalize_origin

__all__ = [
    "BlockResponseWriter",
    "DEFAULT_MESSAGE",
    "DEFAULT_RESPONSE_CODE",
    "Decision",
    "FilterResult",
    "GuardConfig",
    "GuardResult",
    "InvalidOriginEntry",
    "ListMode",
    "OriginGuard",
    "OriginGuardMiddleware",
    "OriginParseError",
    "Reason",
    "ResponseMode",
    "load_config",
    "method_filter",
    "normalize_origin",
    "safe_methods_filter",
]
