"""
Read-then-act flows for staking accounts.

Both flows take their collaborators (reader, builder, submitter) through the
constructor and read every piece of state they decide on before anything is
submitted. Neither retries on failure.
"""
import logging
import time
from enum import Enum
from typing import Callable, Optional

from web3 import Web3

from .abi import ERC20_ABI, STAKE_MANAGER_ABI
from .builder import TransactionBuilder
from .exceptions import BusinessRuleError, InvalidRequestError, SubmissionError
from .models import (
    ZERO_HASH, ClaimPlan, SignerOptions, TransactionOptions, TransactionOutcome
)
from .reader import ChainStateReader
from .submitter import TransactionSubmitter

logger = logging.getLogger(__name__)


class ApprovalState(str, Enum):
    CHECKING_ALLOWANCE = "checking_allowance"
    SKIP = "skip"
    APPROVING = "approving"
    DONE = "done"


class ClaimState(str, Enum):
    READING_EPOCH = "reading_epoch"
    READING_LOCK = "reading_lock"
    INELIGIBLE = "ineligible"
    WAITING = "waiting"
    REDEEMING = "redeeming"
    DONE = "done"


def needs_approval(allowance: int, amount: int) -> bool:
    """True when the current allowance cannot cover ``amount``."""
    return allowance < amount


def epochs_to_seconds(epochs: int, epoch_length: int, block_time: float) -> float:
    """Wall-clock estimate for ``epochs`` epochs of ``epoch_length`` blocks."""
    return epochs * epoch_length * block_time


class ConditionalApprovalFlow:
    """
    Approve the spender for ``amount`` tokens unless it already may spend that much.

    Repeated runs with a sufficient allowance never submit anything.
    """

    def __init__(
        self,
        reader: ChainStateReader,
        builder: TransactionBuilder,
        submitter: TransactionSubmitter,
        token_address: str,
        spender_address: str,
        token_abi=ERC20_ABI,
        logger: Optional[logging.Logger] = None
    ):
        self.reader = reader
        self.builder = builder
        self.submitter = submitter
        self.token_address = Web3.to_checksum_address(token_address)
        self.spender_address = Web3.to_checksum_address(spender_address)
        self.token_abi = token_abi
        self.logger = logger or logging.getLogger(__name__)

    def run(self, client: Web3, signer_options: SignerOptions, amount: int) -> TransactionOutcome:
        """
        Args:
            client: Web3 client owned by the caller
            signer_options: Account and gas settings for the approval
            amount: Allowance the spender needs, in token base units

        Returns:
            Outcome with ZERO_HASH when no approval was needed, otherwise the
            approval transaction hash

        Raises:
            InvalidRequestError: If ``amount`` is negative
            ReadError: If the allowance cannot be read (nothing is submitted)
            SubmissionError: If the approval cannot be sent
        """
        if amount < 0:
            raise InvalidRequestError(f"amount must be non-negative, got {amount}")

        self._transition(ApprovalState.CHECKING_ALLOWANCE)
        allowance = self.reader.get_allowance(client, signer_options.account_address, self.spender_address)

        if not needs_approval(allowance, amount):
            self._transition(ApprovalState.SKIP)
            self.logger.debug("Sufficient allowance, no need to increase")
            return TransactionOutcome(tx_hash=ZERO_HASH)

        self._transition(ApprovalState.APPROVING)
        self.logger.info("Sending Approve transaction...")
        request = self.builder.build(TransactionOptions(
            client=client,
            signer_options=signer_options,
            contract_address=self.token_address,
            method_name="approve",
            abi=self.token_abi,
            parameters=[self.spender_address, amount]
        ))
        tx_hash = self.submitter.submit(request)
        self._transition(ApprovalState.DONE)
        return TransactionOutcome(tx_hash=tx_hash)

    def _transition(self, state: ApprovalState) -> None:
        self.logger.debug(f"Approval flow -> {state.value}")


class EpochGatedClaimFlow:
    """
    Redeem a bounty, waiting once for its lock to expire if necessary.

    The flow is split into ``plan`` (reads and decision) and ``redeem``
    (submission) so the wait between them can be scheduled by the caller;
    ``run`` performs both with a blocking sleep in between.
    """

    def __init__(
        self,
        reader: ChainStateReader,
        builder: TransactionBuilder,
        submitter: TransactionSubmitter,
        stake_manager_address: str,
        epoch_length: int,
        stake_manager_abi=STAKE_MANAGER_ABI,
        sleep: Optional[Callable[[float], None]] = None,
        suppress_submission_errors: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        if epoch_length <= 0:
            raise ValueError("epoch_length must be positive")
        self.reader = reader
        self.builder = builder
        self.submitter = submitter
        self.stake_manager_address = Web3.to_checksum_address(stake_manager_address)
        self.epoch_length = epoch_length
        self.stake_manager_abi = stake_manager_abi
        self._sleep = sleep or time.sleep
        self.suppress_submission_errors = suppress_submission_errors
        self.logger = logger or logging.getLogger(__name__)

    def plan(self, client: Web3, bounty_id: int) -> ClaimPlan:
        """
        Read the epoch and bounty lock and work out how long to wait.

        The block time is only read when the lock has not expired yet.

        Raises:
            ReadError: If the epoch, lock or block time cannot be read
            BusinessRuleError: If the bounty lock holds no amount
        """
        self._transition(ClaimState.READING_EPOCH)
        epoch = self.reader.get_epoch(client)

        self._transition(ClaimState.READING_LOCK)
        lock = self.reader.get_bounty_lock(client, bounty_id)

        if lock.is_empty:
            self._transition(ClaimState.INELIGIBLE)
            self.logger.error(f"Bounty {bounty_id} has no amount to redeem")
            raise BusinessRuleError("bounty amount is 0")

        plan = ClaimPlan(
            bounty_id=bounty_id,
            epoch=epoch,
            redeem_after=lock.redeem_after,
            amount=lock.amount
        )
        if epoch >= lock.redeem_after:
            return plan

        epochs_remaining = lock.redeem_after - epoch
        block_time = self.reader.estimate_block_time_seconds(client)
        return plan.model_copy(update={
            "epochs_remaining": epochs_remaining,
            "block_time": block_time,
            "wait_seconds": epochs_to_seconds(epochs_remaining, self.epoch_length, block_time),
        })

    def redeem(self, client: Web3, signer_options: SignerOptions, plan: ClaimPlan) -> TransactionOutcome:
        """
        Submit ``redeemBounty`` for the planned bounty once.

        Raises:
            InvalidRequestError: If the request cannot be built
            SubmissionError: If sending fails and errors are not suppressed
        """
        self._transition(ClaimState.REDEEMING)
        self.logger.info("Claiming bounty transaction...")
        request = self.builder.build(TransactionOptions(
            client=client,
            signer_options=signer_options,
            contract_address=self.stake_manager_address,
            method_name="redeemBounty",
            abi=self.stake_manager_abi,
            parameters=[plan.bounty_id]
        ))
        try:
            tx_hash = self.submitter.submit(request)
        except SubmissionError as e:
            if not self.suppress_submission_errors:
                raise
            self.logger.error(f"Error in redeeming bounty: {e}")
            return TransactionOutcome(tx_hash=ZERO_HASH, error=str(e))

        self._transition(ClaimState.DONE)
        return TransactionOutcome(tx_hash=tx_hash)

    def run(self, client: Web3, signer_options: SignerOptions, bounty_id: int) -> TransactionOutcome:
        """
        Plan, wait once if the lock is still active, then redeem.

        A redeem that lands too early is rejected by the contract and
        surfaces as a SubmissionError; it is not retried here.
        """
        plan = self.plan(client, bounty_id)
        if not plan.ready:
            self._transition(ClaimState.WAITING)
            self.logger.info(
                f"Waiting for lock to expire: {plan.epochs_remaining} epoch(s), "
                f"about {plan.wait_seconds:.0f}s"
            )
            self._sleep(plan.wait_seconds)
        return self.redeem(client, signer_options, plan)

    def _transition(self, state: ClaimState) -> None:
        self.logger.debug(f"Claim flow -> {state.value}")
