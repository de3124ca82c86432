"""Application configuration loaded from environment variables."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Domain constants
DEFAULT_RATE_LIMIT_CALLS = 10
DEFAULT_RATE_LIMIT_PERIOD = 1.5
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CrawlOptions:
    """What to crawl and how to shape the resulting records.

    Attributes:
        folders: Root folder IDs to start from. ``None`` is the virtual root
            (the whole drive, no parent filter).
        fields: Extra Drive file fields to request on top of the base set.
        ignored_folders: Folder names or IDs whose subtrees are skipped.
        fields_default: Values forced onto every record.
        fields_mapper: Keys renamed on every record (old key -> new key).
        debug: Log progress before every listing call.
    """

    folders: tuple[str | None, ...] = (None,)
    fields: tuple[str, ...] = ()
    ignored_folders: frozenset[str] = frozenset()
    fields_default: Mapping[str, Any] = field(default_factory=dict)
    fields_mapper: Mapping[str, str] = field(default_factory=dict)
    debug: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing.
    """

    # Required — no defaults, fail at startup if missing
    client_id: str
    client_secret: str
    token_json: str

    options: CrawlOptions = field(default_factory=CrawlOptions)
    rate_limit_calls: int = DEFAULT_RATE_LIMIT_CALLS
    rate_limit_period: float = DEFAULT_RATE_LIMIT_PERIOD


def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _json_mapping(name: str) -> dict[str, Any]:
    raw = os.environ.get(name)
    if not raw:
        return {}
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object")
    return value


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        GDOCS_CLIENT_ID: Google OAuth client ID.
        GDOCS_CLIENT_SECRET: Google OAuth client secret.
        GDOCS_TOKEN: OAuth token JSON (access_token, refresh_token, expiry_date).

    Optional environment variables (with defaults):
        GDOCS_FOLDERS: Comma separated root folder IDs (default: whole drive).
        GDOCS_FIELDS: Comma separated extra Drive fields to request.
        GDOCS_IGNORED_FOLDERS: Comma separated folder names or IDs to skip.
        GDOCS_FIELDS_DEFAULT: JSON object of values forced onto every record.
        GDOCS_FIELDS_MAPPER: JSON object of key renames (old -> new).
        GDOCS_DEBUG: Enable progress logging (1/true/yes).
        GDOCS_RATE_LIMIT_CALLS: Listing calls allowed per window (default: 10).
        GDOCS_RATE_LIMIT_PERIOD: Window length in seconds (default: 1.5).

    Returns:
        Configured AppConfig instance.

    Raises:
        KeyError: If a required variable is missing.
        ValueError: If a JSON or numeric variable is malformed.
    """
    folders = _split_list(os.environ.get("GDOCS_FOLDERS"))
    options = CrawlOptions(
        folders=folders or (None,),
        fields=_split_list(os.environ.get("GDOCS_FIELDS")),
        ignored_folders=frozenset(_split_list(os.environ.get("GDOCS_IGNORED_FOLDERS"))),
        fields_default=_json_mapping("GDOCS_FIELDS_DEFAULT"),
        fields_mapper=_json_mapping("GDOCS_FIELDS_MAPPER"),
        debug=os.environ.get("GDOCS_DEBUG", "").strip().lower() in _TRUTHY,
    )
    return AppConfig(
        client_id=os.environ["GDOCS_CLIENT_ID"],
        client_secret=os.environ["GDOCS_CLIENT_SECRET"],
        token_json=os.environ["GDOCS_TOKEN"],
        options=options,
        rate_limit_calls=int(
            os.environ.get("GDOCS_RATE_LIMIT_CALLS", str(DEFAULT_RATE_LIMIT_CALLS))
        ),
        rate_limit_period=float(
            os.environ.get("GDOCS_RATE_LIMIT_PERIOD", str(DEFAULT_RATE_LIMIT_PERIOD))
        ),
    )
