"""
Confirmation URL parameters.

The gateway redirect has carried the reference under two names over time.
Both are accepted here, in order, so nothing past this module needs to know.
"""

from typing import Mapping, Optional, Sequence, Union
from urllib.parse import parse_qs, urlencode, urlparse

REFERENCE_PARAM_NAMES: Sequence[str] = ("trxref", "reference")
STATUS_HINT_PARAM = "status"

QueryLike = Union[str, Mapping[str, object]]


def extract_reference(query: QueryLike) -> Optional[str]:
    """First non-empty candidate wins. Accepts a URL, a query string or a mapping."""
    params = _as_params(query)
    for name in REFERENCE_PARAM_NAMES:
        value = params.get(name)
        if isinstance(value, (list, tuple)):
            value = next((v for v in value if str(v).strip()), None)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def extract_status_hint(query: QueryLike) -> Optional[str]:
    """Non-authoritative; for display only."""
    value = _as_params(query).get(STATUS_HINT_PARAM)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return str(value) if value else None


def build_confirmation_url(path: str, reference: str, status_hint: Optional[str] = None) -> str:
    params = {REFERENCE_PARAM_NAMES[0]: reference}
    if status_hint:
        params[STATUS_HINT_PARAM] = status_hint
    return f"{path}?{urlencode(params)}"


def _as_params(query: QueryLike) -> Mapping[str, object]:
    if isinstance(query, str):
        raw = urlparse(query).query if ("?" in query or "://" in query) else query
        return parse_qs(raw.lstrip("?"))
    return query or {}
