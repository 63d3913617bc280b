"""Origin extraction and normalization.

An origin is the (scheme, host, port) triple of a URL, serialized as
``scheme://host`` or ``scheme://host:port`` when the port is not the scheme's
default. Path, query, fragment and userinfo never take part in matching.

normalize_origin() is used for both sides of every comparison: once per
configured entry when the guard is built, and once per request for the
``Origin`` / ``Referer`` value. Both sides therefore go through exactly the
same canonicalization and membership can be a plain string lookup.
"""

from __future__ import annotations

import ipaddress
from typing import Mapping, Optional
from urllib.parse import urlsplit

from originguard.constants import (
    DEFAULT_PORTS,
    FORBIDDEN_HOST_CHARS,
    ORIGIN_HEADER,
    REFERER_HEADER,
)


class OriginParseError(ValueError):
    """Raised when a value cannot be reduced to a (scheme, host, port) origin."""


class InvalidOriginEntry(OriginParseError):
    """Raised while building a guard when a configured list entry is not a valid origin URL."""

    def __init__(self, entry: object, index: int, reason: str) -> None:
        self.entry = entry
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid origin entry at position {index}: {entry!r} ({reason})")


def normalize_origin(value: str) -> str:
    """Reduce a URL string to its serialized origin.

    Examples:
        >>> normalize_origin("https://User:pw@A.Example:443/x?y#z")
        'https://a.example'
        >>> normalize_origin("http://127.0.0.1:4500/end")
        'http://127.0.0.1:4500'

    Raises:
        OriginParseError: Empty value, opaque scheme, missing host, bad port,
                          a forbidden host code point, or a host that
                          cannot be IDNA-encoded.
    """
    if not isinstance(value, str):
        raise OriginParseError(f"expected a string, got {type(value).__name__}")

    candidate = value.strip()
    if not candidate:
        raise OriginParseError("empty value")

    try:
        parts = urlsplit(candidate)
        if parts.scheme in DEFAULT_PORTS and "\\" in candidate:
            # Browsers read "\" as "/" in special-scheme URLs.
            parts = urlsplit(candidate.replace("\\", "/"))
        hostname = parts.hostname
        port = parts.port
    except ValueError as exc:
        # urlsplit raises for unbalanced IPv6 brackets; .port for non-numeric
        # or out-of-range ports.
        raise OriginParseError(str(exc)) from exc

    scheme = parts.scheme
    if scheme not in DEFAULT_PORTS:
        raise OriginParseError(f"scheme {scheme!r} has no tuple origin")
    if not hostname:
        raise OriginParseError("missing host")

    _check_host(parts.netloc, hostname)
    host = _encode_host(hostname)
    if port is not None and port != DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def _check_host(netloc: str, hostname: str) -> None:
    if netloc.rpartition("@")[2].startswith("["):
        if "%" in hostname:
            raise OriginParseError(f"IPv6 host {hostname!r} carries a zone id")
        try:
            ipaddress.IPv6Address(hostname)
        except ValueError as exc:
            raise OriginParseError(f"invalid IPv6 host {hostname!r}") from exc
        return

    for char in hostname:
        if char in FORBIDDEN_HOST_CHARS or ord(char) < 0x20 or ord(char) == 0x7F:
            raise OriginParseError(f"forbidden character {char!r} in host")


def _encode_host(hostname: str) -> str:
    if ":" in hostname:
        return f"[{hostname}]"
    if hostname.isascii():
        return hostname
    try:
        return hostname.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise OriginParseError(f"host {hostname!r} is not IDNA-encodable") from exc


def extract_raw_origin(headers: Mapping[str, str]) -> tuple[Optional[str], Optional[str]]:
    """Return ``(header_name, raw_value)`` for the declared origin of a request.

    ``Origin`` wins when it is present and not blank; ``Referer`` is the
    fallback. ``(None, None)`` means neither header carries a value.
    """
    for name in (ORIGIN_HEADER, REFERER_HEADER):
        raw = headers.get(name)
        if raw and raw.strip():
            return name, raw
    return None, None
