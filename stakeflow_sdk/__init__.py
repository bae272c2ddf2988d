"""
StakeFlow SDK - approve and claim orchestration for staking accounts.
"""
from .client import StakeFlowClient
from .builder import TransactionBuilder
from .config import NetworkConfig
from .exceptions import (
    StakeFlowError, ReadError, NetworkError, DecodeError, BusinessRuleError,
    InvalidRequestError, SubmissionError, ConfirmationTimeoutError, ConfigurationError
)
from .flows import ConditionalApprovalFlow, EpochGatedClaimFlow, needs_approval
from .models import (
    ZERO_HASH, BountyLock, ClaimPlan, ConfirmationStatus, SignerOptions,
    TransactionOptions, TransactionOutcome, TransactionRequest, TxReceipt
)
from .reader import ChainStateReader
from .signer import LocalSigner, Signer
from .submitter import TransactionSubmitter
from .version import __version__

__all__ = [
    "StakeFlowClient",
    "ChainStateReader",
    "TransactionBuilder",
    "TransactionSubmitter",
    "ConditionalApprovalFlow",
    "EpochGatedClaimFlow",
    "needs_approval",
    "NetworkConfig",
    "LocalSigner",
    "Signer",
    "ZERO_HASH",
    "BountyLock",
    "ClaimPlan",
    "ConfirmationStatus",
    "SignerOptions",
    "TransactionOptions",
    "TransactionOutcome",
    "TransactionRequest",
    "TxReceipt",
    "StakeFlowError",
    "ReadError",
    "NetworkError",
    "DecodeError",
    "BusinessRuleError",
    "InvalidRequestError",
    "SubmissionError",
    "ConfirmationTimeoutError",
    "ConfigurationError",
    "__version__",
]
