"""Tests for request signing."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone

from okx_bridge.auth import build_query_string, generate_headers, iso_timestamp, sign
from okx_bridge.config import AggregatorCredentials


def _credentials() -> AggregatorCredentials:
    return AggregatorCredentials(api_key="key", secret_key="secret", passphrase="phrase")


def test_iso_timestamp_has_millisecond_precision():
    moment = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
    assert iso_timestamp(moment) == "2024-01-02T03:04:05.678Z"


def test_iso_timestamp_defaults_to_now_in_utc():
    stamp = iso_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-02T03:04:05.678Z")


def test_query_string_omits_empty_values():
    params = {"a": "1", "b": None, "c": "", "d": 2}
    assert build_query_string(params) == "?a=1&d=2"


def test_query_string_empty_params():
    assert build_query_string({}) == ""
    assert build_query_string({"only": None}) == ""


def test_query_string_escapes_reserved_characters():
    assert build_query_string({"q": "a b/c&d"}) == "?q=a%20b%2Fc%26d"
    assert build_query_string({"mark": "x-y_z.~*'()!"}) == "?mark=x-y_z.~*'()!"


def test_sign_matches_hmac_sha256_base64():
    timestamp = "2024-01-01T00:00:00.000Z"
    prehash = f"{timestamp}GET/api/v5/dex/cross-chain/quote?amount=1"
    expected = base64.b64encode(
        hmac.new(b"secret", prehash.encode(), hashlib.sha256).digest()
    ).decode()

    path = "/api/v5/dex/cross-chain/quote"
    assert sign("secret", timestamp, "GET", path, "?amount=1") == expected


def test_sign_uppercases_method():
    timestamp = "2024-01-01T00:00:00.000Z"
    assert sign("secret", timestamp, "get", "/path") == sign("secret", timestamp, "GET", "/path")


def test_sign_changes_with_query_string():
    timestamp = "2024-01-01T00:00:00.000Z"
    assert sign("secret", timestamp, "GET", "/path", "?a=1") != sign(
        "secret", timestamp, "GET", "/path", "?a=2"
    )


def test_generate_headers():
    timestamp = "2024-01-01T00:00:00.000Z"
    headers = generate_headers(_credentials(), "GET", "/path", "?a=1", timestamp=timestamp)

    assert headers["OK-ACCESS-KEY"] == "key"
    assert headers["OK-ACCESS-PASSPHRASE"] == "phrase"
    assert headers["OK-ACCESS-TIMESTAMP"] == timestamp
    assert headers["OK-ACCESS-SIGN"] == sign("secret", timestamp, "GET", "/path", "?a=1")
    assert headers["Content-Type"] == "application/json"


def test_generate_headers_uses_fresh_timestamp():
    headers = generate_headers(_credentials(), "GET", "/path")
    timestamp = headers["OK-ACCESS-TIMESTAMP"]

    assert timestamp.endswith("Z")
    assert headers["OK-ACCESS-SIGN"] == sign("secret", timestamp, "GET", "/path")
