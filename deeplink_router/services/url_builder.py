"""Construction of universal, short and fallback URLs."""

import math
from collections.abc import Mapping
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

UNIVERSAL_PATH = "/u"
SHORT_PATH = "/s"

# Query keys owned by the router; they win over caller params
APP_KEY = "app"
ROUTE_KEY = "r"


def stringify_param(value: object) -> str:
    """Render one scalar parameter value as query string text.

    Raises ValueError for None and non-scalar values.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Parameter value must be finite, got {value!r}")
        return str(int(value)) if value.is_integer() else repr(value)
    raise ValueError(
        f"Parameter values must be strings, numbers or booleans, got {type(value).__name__}"
    )


def stringify_params(params: Mapping[str, object] | None) -> dict[str, str]:
    """Normalize a parameter mapping to string keys and string values."""
    if not params:
        return {}
    return {str(key): stringify_param(value) for key, value in params.items()}


def build_universal_url(
    domain: str,
    app_id: str,
    route: str,
    params: Mapping[str, str] | None = None,
) -> str:
    """Build the canonical long-form link for an app route.

    `app` and `r` are emitted first and replace same-named params.
    """
    query = {APP_KEY: app_id, ROUTE_KEY: route}
    for key, value in (params or {}).items():
        if key not in query:
            query[key] = value
    return f"https://{domain}{UNIVERSAL_PATH}/{quote(app_id, safe='')}?{urlencode(query)}"


def build_short_url(domain: str, slug: str) -> str:
    """Build the short link for a slug."""
    return f"https://{domain}{SHORT_PATH}/{slug}"


def build_fallback_url(
    base_url: str,
    route: str,
    params: Mapping[str, str] | None = None,
) -> str:
    """Build the web fallback for a route on top of a base URL.

    Each key replaces any existing same-named parameter of the base URL in
    place; new keys are appended.
    """
    parts = urlsplit(base_url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)

    updates = {ROUTE_KEY: route}
    updates.update(params or {})
    for key, value in updates.items():
        pairs = _set_query_param(pairs, key, value)

    path = parts.path or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(pairs), parts.fragment))


def _set_query_param(
    pairs: list[tuple[str, str]],
    key: str,
    value: str,
) -> list[tuple[str, str]]:
    result: list[tuple[str, str]] = []
    replaced = False
    for existing_key, existing_value in pairs:
        if existing_key != key:
            result.append((existing_key, existing_value))
        elif not replaced:
            result.append((key, value))
            replaced = True
    if not replaced:
        result.append((key, value))
    return result
