"""Guard configuration for OriginGuard.

GuardConfig is built once and never mutated afterwards; every request reads
the same frozen instance. Configured origin URLs are reduced to normalized
origins at construction time, so a bad entry fails here (InvalidOriginEntry)
instead of surfacing later as a silently unmatched request.

Two ways to build one:
  1. In code: ``GuardConfig.from_options(list=[...], list_mode="blacklist", ...)``
  2. From YAML: ``load_config()`` reads ``.originguard/config.yaml``

Config search order for load_config():
  1. ``config_path`` argument (if provided — for testing or explicit override)
  2. ORIGINGUARD_CONFIG environment variable (if set)
  3. ``.originguard/config.yaml`` (working directory — for development)
  4. ``~/.originguard/config.yaml`` (home directory — for deployments)

Environment variable overrides:
  ORIGINGUARD_RESPONSE_CODE — overrides response_code
  ORIGINGUARD_CONFIG        — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

import yaml
from starlette.requests import Request

from originguard.constants import (
    DEFAULT_MESSAGE,
    DEFAULT_RESPONSE_CODE,
    MAX_RESPONSE_CODE,
    MIN_RESPONSE_CODE,
    SUPPORTED_CONFIG_VERSION,
)
from originguard.filters import BUILTIN_FILTERS, RequestFilter
from originguard.models.block import BlockResponseWriter
from originguard.models.decision import ListMode, ResponseMode
from originguard.origin import InvalidOriginEntry, OriginParseError, normalize_origin
from originguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Callback contracts ──────────────────────────────────────────────────────
# Each callback may be a plain function or a coroutine function; the guard
# awaits whatever awaitable comes back.

# (normalized origin, request) -> truthy to allow. Used only in CUSTOM list mode.
ListCallback = Callable[[str, Request], Union[Any, Awaitable[Any]]]

# (request, writer) -> None. Used only in CUSTOM response mode.
ResponseCallback = Callable[[Request, BlockResponseWriter], Union[None, Awaitable[None]]]

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_VERSIONS: frozenset[int] = frozenset({SUPPORTED_CONFIG_VERSION})

# Option names accepted by GuardConfig.from_options()
OPTION_NAMES: frozenset[str] = frozenset({
    "list_mode",
    "list",
    "list_callback",
    "response_code",
    "response_mode",
    "response_message",
    "response_callback",
    "request_filter",
})

# Default config search paths (ORIGINGUARD_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".originguard/config.yaml",
    os.path.expanduser("~/.originguard/config.yaml"),
]


# ─── Dataclass ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GuardConfig:
    """Immutable guard settings.

    ``origins`` may be given as any iterable of URL strings; it is stored as a
    frozenset of normalized origins. Mode fields accept enum members or their
    string names.

    Raises:
        InvalidOriginEntry: An origin entry is not a parseable origin URL.
        ValueError:         response_code is not an integer HTTP status.
    """

    list_mode: ListMode = ListMode.WHITELIST
    origins: frozenset[str] = field(default_factory=frozenset)
    list_callback: Optional[ListCallback] = None
    response_code: int = DEFAULT_RESPONSE_CODE
    response_mode: ResponseMode = ResponseMode.PLAIN
    response_message: str = DEFAULT_MESSAGE
    response_callback: Optional[ResponseCallback] = None
    request_filter: Optional[RequestFilter] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "list_mode", ListMode.parse(self.list_mode))
        object.__setattr__(self, "response_mode", ResponseMode.parse(self.response_mode))
        object.__setattr__(self, "origins", _normalize_entries(self.origins))

        code = self.response_code
        if isinstance(code, bool) or not isinstance(code, int) or not (
            MIN_RESPONSE_CODE <= code <= MAX_RESPONSE_CODE
        ):
            raise ValueError(
                f"response_code must be an integer HTTP status between "
                f"{MIN_RESPONSE_CODE} and {MAX_RESPONSE_CODE}, got {code!r}"
            )

        if self.list_mode is ListMode.CUSTOM and self.list_callback is None:
            logger.warning("list_mode is custom but no list_callback is set — every origin check will block")
        if self.response_mode is ResponseMode.CUSTOM and self.response_callback is None:
            logger.warning("response_mode is custom but no response_callback is set — using plain responses")

    @classmethod
    def defaults(cls) -> "GuardConfig":
        """Return a fully-default config: empty whitelist, plain 400 responses."""
        return cls()

    @classmethod
    def from_options(cls, **options: Any) -> "GuardConfig":
        """Build a config from the recognized option names.

        ``list`` holds the origin URLs; every other option maps onto the field
        of the same name. Unset options take their defaults.

        Raises:
            TypeError:          Unknown option name.
            InvalidOriginEntry: A ``list`` entry is not a parseable origin URL.
        """
        unknown = set(options) - OPTION_NAMES
        if unknown:
            raise TypeError(f"Unknown guard option(s): {sorted(unknown)}")

        kwargs = {name: value for name, value in options.items() if name != "list"}
        entries = options.get("list")
        if entries is not None:
            kwargs["origins"] = entries
        return cls(**kwargs)

    @classmethod
    def from_dict(cls, raw: dict, **callbacks: Any) -> "GuardConfig":
        """Construct a GuardConfig from a parsed YAML mapping.

        Unknown keys are silently ignored, but mode names must be exact:
        a misspelled ``list_mode`` is an error rather than a whitelist.
        ``request_filter`` in the mapping names a built-in filter. Keyword
        ``callbacks`` (list_callback, response_callback, request_filter) win
        over mapping values.

        Raises:
            ValueError:         ``list`` is not a sequence, or a mode or filter name is unknown.
            InvalidOriginEntry: A ``list`` entry is not a parseable origin URL.
        """
        entries = raw.get("list") or []
        if isinstance(entries, (str, bytes)) or not isinstance(entries, (list, tuple)):
            raise ValueError("'list' must be a sequence of origin URLs")

        request_filter = None
        filter_name = raw.get("request_filter")
        if filter_name is not None:
            if filter_name not in BUILTIN_FILTERS:
                raise ValueError(
                    f"Unknown request_filter '{filter_name}'. "
                    f"Built-in filters: {sorted(BUILTIN_FILTERS)}"
                )
            request_filter = BUILTIN_FILTERS[filter_name]

        options: dict[str, Any] = {
            "list_mode": _strict_mode(ListMode, "list_mode", raw.get("list_mode", "whitelist")),
            "list": entries,
            "response_code": raw.get("response_code", DEFAULT_RESPONSE_CODE),
            "response_mode": _strict_mode(ResponseMode, "response_mode", raw.get("response_mode", "plain")),
            "response_message": raw.get("response_message", DEFAULT_MESSAGE),
            "request_filter": request_filter,
        }
        options.update({name: value for name, value in callbacks.items() if value is not None})
        return cls.from_options(**options)


def _strict_mode(enum_cls: Any, key: str, value: Any) -> Any:
    supported = [member.value for member in enum_cls]
    if not isinstance(value, str) or value.strip().lower() not in supported:
        raise ValueError(f"Invalid {key}: {value!r}. Supported values: {supported}.")
    return enum_cls(value.strip().lower())


def _normalize_entries(entries: Iterable[str]) -> frozenset[str]:
    if isinstance(entries, (str, bytes)):
        raise TypeError("origins must be an iterable of URL strings, not a single string")
    normalized: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            normalized.add(normalize_origin(entry))
        except OriginParseError as exc:
            raise InvalidOriginEntry(entry, index, str(exc)) from exc
    return frozenset(normalized)


# ─── Config loading ───────────────────────────────────────────────────────────


def _config_error(msg: str) -> SystemExit:
    print(f"CONFIG ERROR: {msg}", file=sys.stderr)
    return SystemExit(1)


def load_config(config_path: Optional[str] = None, **callbacks: Any) -> GuardConfig:
    """Load and validate the guard configuration from YAML.

    If no file is found at any of the search paths, returns the default
    GuardConfig (not an error). If a file is found but invalid, writes an
    error to stderr and raises SystemExit(1).

    Args:
        config_path: Explicit file to try first.
        callbacks:   list_callback / response_callback / request_filter
                     functions; these cannot be expressed in YAML.

    Raises:
        SystemExit(1): On YAML parse error, non-mapping document, missing or
                       unsupported ``version``, unknown mode name,
                       invalid list / filter /
                       response_code, or an invalid ORIGINGUARD_RESPONSE_CODE.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("ORIGINGUARD_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        raw: dict = {}
    else:
        raw = _read_config_file(found_path)

    _apply_env_overrides(raw)

    source = found_path or "<defaults>"
    try:
        config = GuardConfig.from_dict(raw, **callbacks)
    except (TypeError, ValueError) as exc:
        raise _config_error(f"{source}: {exc}")

    logger.info(
        "Guard config loaded",
        path=found_path,
        list_mode=config.list_mode.value,
        origins=len(config.origins),
        response_mode=config.response_mode.value,
        response_code=config.response_code,
    )
    return config


def _read_config_file(path: str) -> dict:
    logger.info("Loading config", path=path)
    try:
        with open(path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise _config_error(
            f"Failed to parse {path}: {exc}\n"
            "OriginGuard refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        raise _config_error(f"Could not read {path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            raise _config_error(
                f"{path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        raise _config_error(
            f"{path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        raise _config_error(
            f"{path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        raise _config_error(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
    return raw


def _apply_env_overrides(raw: dict) -> None:
    """Apply environment variable overrides to the raw mapping in-place.

    Raises:
        SystemExit(1): If ORIGINGUARD_RESPONSE_CODE is set but not an integer.
    """
    env_code = os.environ.get("ORIGINGUARD_RESPONSE_CODE")
    if env_code is not None:
        try:
            raw["response_code"] = int(env_code)
        except ValueError:
            raise _config_error(
                "ORIGINGUARD_RESPONSE_CODE environment variable is not a valid "
                f"integer: '{env_code}'"
            )
