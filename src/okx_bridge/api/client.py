"""Signed REST client for the OKX DEX cross-chain endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from ..auth import build_query_string, generate_headers
from ..config import AggregatorCredentials
from ..constants import (
    CROSS_CHAIN_BUILD,
    CROSS_CHAIN_QUOTE,
    CROSS_CHAIN_STATUS,
    DEFAULT_REQUEST_TIMEOUT,
    SUCCESS_CODE,
    SUPPORTED_BRIDGES,
    SUPPORTED_CHAINS,
    SUPPORTED_TOKENS,
)
from ..exceptions import AggregatorError, NetworkError, ValidationError
from ..types import BridgeEstimate, QuoteRequest, RouteOption, StatusRecord

logger = logging.getLogger(__name__)


class OKXDexClient:
    """Issue signed GET requests against the aggregator and decode its envelopes."""

    def __init__(
        self,
        credentials: AggregatorCredentials,
        *,
        session: requests.Session | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._credentials = credentials
        self._base_url = credentials.base_url.rstrip("/")
        self._session = session or requests.Session()
        self._request_timeout = request_timeout

    # ------------------------------------------------------------------
    # Cross-chain endpoints
    # ------------------------------------------------------------------
    def get_quote(self, request: QuoteRequest) -> list[RouteOption]:
        envelope = self._get(CROSS_CHAIN_QUOTE, request.to_params())

        routes: list[RouteOption] = []
        for entry in self._entries(envelope):
            routes.extend(RouteOption.from_quote_entry(entry))

        logger.debug("Quote returned %s route(s)", len(routes))
        return routes

    def build_transaction(self, request: QuoteRequest) -> list[RouteOption]:
        envelope = self._get(CROSS_CHAIN_BUILD, request.to_params(include_chain_ids=True))
        routes = [RouteOption.from_build_entry(entry) for entry in self._entries(envelope)]
        logger.debug("Build returned %s route(s)", len(routes))
        return routes

    def get_status(self, chain_id: str, tx_hash: str) -> StatusRecord:
        envelope = self._get(CROSS_CHAIN_STATUS, {"chainId": chain_id, "txHash": tx_hash})
        return StatusRecord.from_envelope(envelope, chain_id, tx_hash)

    def estimate_bridge(self, request: QuoteRequest) -> BridgeEstimate:
        """Quote the request and summarise the first route."""

        logger.debug(
            "Estimating bridge %s -> %s amount=%s slippage=%s",
            request.source_chain.name,
            request.dest_chain.name,
            request.amount,
            request.slippage,
        )
        routes = self.get_quote(request)
        if not routes:
            raise ValidationError(
                "No bridge routes available for this token pair and amount",
                field="data",
                value=request.amount,
            )
        return BridgeEstimate.from_route(request.amount, routes[0])

    # ------------------------------------------------------------------
    # Discovery endpoints (pass-through)
    # ------------------------------------------------------------------
    def list_supported_bridges(self) -> dict[str, Any]:
        return self._get(SUPPORTED_BRIDGES)

    def list_supported_chains(self) -> dict[str, Any]:
        return self._get(SUPPORTED_CHAINS)

    def list_supported_tokens(self, chain_id: str) -> dict[str, Any]:
        return self._get(SUPPORTED_TOKENS, {"chainId": chain_id})

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _get(
        self, endpoint: str, params: Mapping[str, str | int | None] | None = None
    ) -> dict[str, Any]:
        query_string = build_query_string(params or {})
        headers = generate_headers(self._credentials, "GET", endpoint, query_string)
        url = f"{self._base_url}{endpoint}{query_string}"
        logger.debug("GET %s%s", endpoint, query_string)

        try:
            response = self._session.get(url, headers=headers, timeout=self._request_timeout)
        except requests.RequestException as exc:
            raise NetworkError(
                "Aggregator request failed",
                endpoint=endpoint,
                details={"error": str(exc)},
            ) from exc

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"Aggregator returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
                details={"body": response.text},
            )

        try:
            envelope = response.json()
        except ValueError as exc:
            raise NetworkError(
                "Aggregator returned a non-JSON body",
                endpoint=endpoint,
                status_code=response.status_code,
                details={"error": str(exc)},
            ) from exc

        if not isinstance(envelope, Mapping):
            raise AggregatorError(
                "Unexpected response envelope", endpoint=endpoint, details={"body": envelope}
            )

        code = str(envelope.get("code"))
        if code != SUCCESS_CODE:
            message = envelope.get("msg") or "unknown error"
            logger.error("Aggregator rejected %s: code=%s msg=%s", endpoint, code, message)
            raise AggregatorError(
                f"OKX API error: {message}",
                code=code,
                endpoint=endpoint,
                details={"envelope": dict(envelope)},
            )

        return dict(envelope)

    def _entries(self, envelope: Mapping[str, Any]) -> list[Mapping[str, Any]]:
        data = envelope.get("data")
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, Mapping)]
