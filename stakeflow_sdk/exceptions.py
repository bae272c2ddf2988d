"""
Exceptions for the StakeFlow SDK.
"""
from typing import Optional


class StakeFlowError(Exception):
    """Base exception for all StakeFlow SDK errors."""
    pass


class ReadError(StakeFlowError):
    """Raised when on-chain state (allowance, epoch, lock, block time) cannot be read."""
    pass


class NetworkError(ReadError):
    """Raised when the RPC endpoint cannot be reached or times out."""
    pass


class DecodeError(ReadError):
    """Raised when the RPC endpoint returns a malformed or undecodable response."""
    pass


class BusinessRuleError(StakeFlowError):
    """Raised for terminal business-rule conditions, e.g. an empty bounty lock."""
    pass


class InvalidRequestError(StakeFlowError):
    """Raised when a transaction request is malformed. Never worth retrying."""
    pass


class SubmissionError(StakeFlowError):
    """Raised when a transaction cannot be signed, built or broadcast."""
    pass


class ConfirmationTimeoutError(StakeFlowError):
    """Raised when a transaction was not mined within the polling budget."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class ConfigurationError(StakeFlowError):
    """Raised when the client cannot be configured (bad URL, chain mismatch...)."""
    pass
