"""Custom exceptions for Polymarket API access, order execution and redemption."""

from __future__ import annotations


class PolymarketError(Exception):
    """Base exception for Polymarket-related errors."""

    pass


class MissingRequiredConfigError(PolymarketError):
    """Raised when a required configuration value is missing."""

    pass


class ConfigValidationError(PolymarketError):
    """Raised at startup when the copy strategy configuration is invalid.

    Carries every violation found, not only the first one.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid copy strategy configuration: " + "; ".join(errors))
        self.errors = list(errors)


class PolymarketAPIError(PolymarketError):
    """Raised when a Polymarket API request fails after retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimitError(PolymarketAPIError):
    """Raised when the API returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class OrderExecutionError(PolymarketError):
    """Base exception for a trade that could not be (fully) executed."""

    def __init__(self, message: str, *, asset: str | None = None) -> None:
        super().__init__(message)
        self.asset = asset


class NoLiquidityError(OrderExecutionError):
    """The order book is empty (or unreachable) on the side the trade needs."""

    pass


class SlippageExceededError(OrderExecutionError):
    """The best ask moved beyond the tolerated distance from the copied price."""

    pass


class InsufficientFundsOrAllowanceError(OrderExecutionError):
    """The exchange rejected the order for balance or allowance reasons. Terminal."""

    pass


class TransientExecutionError(OrderExecutionError):
    """Any other order submission failure; retried up to the configured limit."""

    pass


class ChainTransactionError(PolymarketError):
    """An on-chain transaction reverted, timed out or could not be sent."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
        self.cause = cause
