"""Decision contracts for the origin guard.

  ListMode      — how the configured origin set is interpreted
  ResponseMode  — how a blocked request is answered
  FilterResult  — tri-state outcome of the optional request pre-filter
  Decision      — terminal per-request outcome (ALLOW or BLOCK)
  Reason        — why the engine reached its decision
  GuardResult   — Decision + Reason + the origin that was evaluated
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from originguard.utils.logger import get_logger

logger = get_logger(__name__)


class ListMode(str, Enum):
    """Interpretation of the configured origin set."""

    WHITELIST = "whitelist"
    BLACKLIST = "blacklist"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "ListMode":
        """Coerce a member or case-insensitive name; unknown values mean WHITELIST."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        logger.warning("Unrecognized list mode — falling back to whitelist", value=repr(value))
        return cls.WHITELIST


class ResponseMode(str, Enum):
    """Format of the rejection written for a blocked request."""

    PLAIN = "plain"
    JSON = "json"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "ResponseMode":
        """Coerce a member or case-insensitive name; unknown values mean PLAIN."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        logger.warning("Unrecognized response mode — falling back to plain", value=repr(value))
        return cls.PLAIN


class FilterResult(Enum):
    """Outcome of the request pre-filter.

    ALLOW and BLOCK end evaluation immediately. DEFER hands the request to the
    origin check.
    """

    ALLOW = "allow"
    BLOCK = "block"
    DEFER = "defer"

    @classmethod
    def coerce(cls, value: Any) -> "FilterResult":
        """Map a filter's return value onto the tri-state.

        Only the ``True`` and ``False`` singletons count as booleans; truthy or
        falsy stand-ins such as ``1``, ``0``, ``""`` or ``None`` defer.
        """
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.ALLOW
        if value is False:
            return cls.BLOCK
        return cls.DEFER


class Decision(str, Enum):
    ALLOW = "allow"
    BLOCK = "block"


class Reason(str, Enum):
    FILTER_ALLOW = "filter_allow"
    FILTER_BLOCK = "filter_block"
    MISSING_ORIGIN = "missing_origin"
    MALFORMED_ORIGIN = "malformed_origin"
    LISTED = "listed"
    NOT_LISTED = "not_listed"
    CALLBACK_ALLOW = "callback_allow"
    CALLBACK_DENY = "callback_deny"
    NO_CALLBACK = "no_callback"


@dataclass(frozen=True, slots=True)
class GuardResult:
    """Result of evaluating one request.

    origin is the normalized origin that reached the list policy, or None when
    the pre-filter decided first or no usable origin header was present.
    source_header names the header the origin was read from.
    """

    decision: Decision
    reason: Reason
    origin: Optional[str] = None
    source_header: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOW
