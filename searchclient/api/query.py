"""Query string builder for GET endpoints."""

from collections.abc import Mapping
from urllib.parse import urlencode


def _coerce(value: object) -> str:
    # Backend parses JSON-style booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_query(params: Mapping[str, object | None]) -> str:
    """Build a query string from optional parameters.

    Keys whose value is None or stringifies to "" are dropped. Remaining
    keys keep their input order.

    Args:
        params: Mapping of parameter name to optional value

    Returns:
        "" when no parameters remain, otherwise "?" followed by the encoded pairs
    """
    pairs = [(key, _coerce(value)) for key, value in params.items() if value is not None]
    pairs = [(key, value) for key, value in pairs if value]
    if not pairs:
        return ""
    return f"?{urlencode(pairs)}"
