"""Exception hierarchy for the OKX USDC bridge."""

from typing import Any


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(BridgeError):
    """Raised when required settings are missing or inconsistent."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.missing = missing or []


class NetworkError(BridgeError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class AggregatorError(BridgeError):
    """Raised when the aggregator answers with a non-success envelope."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.endpoint = endpoint


class ValidationError(BridgeError):
    """Raised when input or response validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidAmountError(ValidationError):
    """Raised when a decimal amount cannot be expressed in token base units."""


class InsufficientFundsError(BridgeError):
    """Raised when the wallet cannot cover a required amount."""

    def __init__(
        self,
        message: str,
        required: int | None = None,
        available: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.required = required
        self.available = available


class InsufficientGasError(InsufficientFundsError):
    """Raised when the native balance does not cover the gas safety margin."""


class InsufficientBalanceError(InsufficientFundsError):
    """Raised when the token balance is below the transfer amount."""


class TransactionFailedError(BridgeError):
    """Raised when a submitted transaction reverts or is never mined."""

    def __init__(
        self,
        message: str,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash
