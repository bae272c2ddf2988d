"""
Data models for the StakeFlow SDK.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

# Hash returned when no transaction was sent
ZERO_HASH = "0x" + "00" * 32


class ConfirmationStatus(str, Enum):
    """Result of waiting for a transaction to be mined"""
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class SignerOptions(BaseModel):
    """
    Signer and gas settings supplied by the caller.

    The builder treats this as an opaque bag and copies it onto every
    request; only the submitter reads it.
    """
    account_address: str
    signer: Any = Field(..., repr=False)
    gas_limit: Optional[int] = Field(None, gt=0)
    gas_multiplier: float = Field(1.1, ge=1.0)
    gas_price: Optional[int] = Field(None, ge=0)

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class TransactionOptions(BaseModel):
    """Input to TransactionBuilder.build"""
    client: Any = Field(..., repr=False)
    signer_options: SignerOptions
    contract_address: str
    method_name: str
    abi: List[Dict[str, Any]]
    parameters: List[Any] = Field(default_factory=list)
    amount: Optional[int] = Field(None, ge=0)

    class Config:
        arbitrary_types_allowed = True


class TransactionRequest(BaseModel):
    """A validated, ready-to-submit contract call"""
    signer_address: str
    target_contract: str
    method_name: str
    abi: Tuple[Dict[str, Any], ...]
    parameters: Tuple[Any, ...] = ()
    amount: Optional[int] = None
    client: Any = Field(..., repr=False)
    signer_options: SignerOptions = Field(..., repr=False)

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class BountyLock(BaseModel):
    """Pending bounty reward, claimable once redeem_after is reached"""
    amount: int = Field(..., ge=0)
    redeem_after: int = Field(..., ge=0)
    bounty_hunter: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.amount == 0


class ClaimPlan(BaseModel):
    """Decision computed before a bounty is redeemed"""
    bounty_id: int
    epoch: int
    redeem_after: int
    amount: int
    epochs_remaining: int = 0
    block_time: Optional[float] = None
    wait_seconds: float = 0.0

    @property
    def ready(self) -> bool:
        return self.wait_seconds == 0


class TransactionOutcome(BaseModel):
    """
    Hash of a submitted transaction.

    ``tx_hash == ZERO_HASH`` means nothing was sent; ``error`` is only set
    when a submission failure was suppressed rather than raised.
    """
    tx_hash: str = ZERO_HASH
    error: Optional[str] = None
    status: Optional[ConfirmationStatus] = None

    @property
    def is_noop(self) -> bool:
        return self.tx_hash == ZERO_HASH


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        extra = "ignore"
