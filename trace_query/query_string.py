"""Raw URL query string handling around the converters.

The converters work on mappings; these helpers turn them into the string an
HTTP client sends and back into the string-valued mapping a URL yields.
"""

from typing import Any, Dict, Mapping

import httpx


def to_query_string(parameters: Mapping[str, Any]) -> str:
    """Encode parameters as a query string, skipping None values."""
    return str(httpx.QueryParams({k: v for k, v in parameters.items() if v is not None}))


def from_query_string(query: str) -> Dict[str, str]:
    """Decode a query string into a flat mapping.

    A leading ``?`` is ignored. For repeated keys the first value wins, which
    is what the reverse converter expects.
    """
    params = httpx.QueryParams(query.lstrip("?"))
    return {key: params[key] for key in params.keys()}
