"""Request signing helpers for the OKX DEX API."""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Mapping
from datetime import datetime, timezone
from urllib.parse import quote

from .config import AggregatorCredentials

# characters left unescaped in query keys and values
_URI_COMPONENT_SAFE = "-_.!~*'()"


def iso_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with milliseconds, e.g. ``2024-01-01T00:00:00.000Z``."""

    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_query_string(params: Mapping[str, str | int | None]) -> str:
    """Serialise parameters to ``?k=v&...``, omitting ``None`` and empty values."""

    pairs = [
        f"{quote(str(key), safe=_URI_COMPONENT_SAFE)}={quote(str(value), safe=_URI_COMPONENT_SAFE)}"
        for key, value in params.items()
        if value is not None and value != ""
    ]
    return f"?{'&'.join(pairs)}" if pairs else ""


def sign(
    secret_key: str,
    timestamp: str,
    method: str,
    request_path: str,
    query_string: str = "",
    body: str = "",
) -> str:
    """Return the Base64 HMAC-SHA256 signature of the canonical prehash string."""

    prehash = f"{timestamp}{method.upper()}{request_path}{query_string}{body}"
    digest = hmac.new(secret_key.encode("utf-8"), prehash.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_headers(
    credentials: AggregatorCredentials,
    method: str,
    request_path: str,
    query_string: str = "",
    *,
    timestamp: str | None = None,
) -> dict[str, str]:
    ts = timestamp or iso_timestamp()
    return {
        "OK-ACCESS-KEY": credentials.api_key,
        "OK-ACCESS-SIGN": sign(credentials.secret_key, ts, method, request_path, query_string),
        "OK-ACCESS-TIMESTAMP": ts,
        "OK-ACCESS-PASSPHRASE": credentials.passphrase,
        "Content-Type": "application/json",
    }
