"""Exceptions raised by the swap client."""

from typing import Any, Optional


class SwapClientError(Exception):
    """Base class for all swap client errors."""

    pass


class ProviderError(SwapClientError):
    """An upstream data source (explorer, fee oracle) failed."""

    pass


class NoResponseError(ProviderError):
    """Transaction info lookup returned neither confidence nor fee data."""

    pass


class ProviderRejected(ProviderError):
    """Provider answered with its known rejection status."""

    def __init__(self, message: str, status_code: int, method: str = "", url: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url


class UnknownProviderError(ProviderError):
    """Any other HTTP, transport or parse failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InsufficientFunds(SwapClientError):
    """Spendable outputs cannot cover amount plus fee."""

    def __init__(self, total: int, required: int):
        super().__init__(f"Total less than fee: {total} < {required}")
        self.total = total
        self.required = required


class GasEstimationError(SwapClientError):
    """Gas estimation for a contract call failed."""

    pass


class TransactionReverted(SwapClientError):
    """A mined contract call has status 0."""

    def __init__(self, tx_hash: str, receipt: Any = None):
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash
        self.receipt = receipt


class RetryExhaustedError(SwapClientError):
    """A bounded poll ran out of retries without a usable result."""

    def __init__(self, attempts: int, last_result: Any = None):
        super().__init__(f"No result after {attempts} attempts")
        self.attempts = attempts
        self.last_result = last_result
