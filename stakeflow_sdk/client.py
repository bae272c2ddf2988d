"""
StakeFlowClient - Main client for staking account actions.
"""
import logging
import time
import urllib.parse
from typing import Callable, Optional

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from .builder import TransactionBuilder
from .config import NetworkConfig
from .exceptions import ConfigurationError, ConfirmationTimeoutError, NetworkError
from .flows import ConditionalApprovalFlow, EpochGatedClaimFlow
from .models import BountyLock, ConfirmationStatus, SignerOptions, TransactionOutcome
from .reader import ChainStateReader
from .signer import LocalSigner, Signer
from .submitter import DEFAULT_GAS, TransactionSubmitter


class StakeFlowClient:
    """
    Client for approving and claiming on the staking network.

    This client handles:
    1. Approving the StakeManager to spend the account's tokens, only when needed
    2. Redeeming bounties once their lock has expired

    To use this client, you'll need:
    - An Ethereum RPC endpoint
    - Either a private key or a custom signer
    - The token and StakeManager contract addresses and the epoch length
    """

    def __init__(
        self,
        rpc_url: str,
        token_address: str,
        stake_manager_address: str,
        epoch_length: int,
        priv_key: Optional[str] = None,
        signer: Optional[Signer] = None,
        expected_chain_id: Optional[int] = None,
        gas_limit: Optional[int] = None,
        gas_multiplier: float = 1.1,
        gas_price: Optional[int] = None,
        default_gas: int = DEFAULT_GAS,
        block_time_sample_size: int = 10,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 120,
        timeout: int = 30,
        suppress_claim_errors: bool = False,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the StakeFlowClient

        Args:
            rpc_url: Ethereum RPC endpoint URL
            token_address: Address of the staking token (ERC20)
            stake_manager_address: Address of the StakeManager contract
            epoch_length: Number of blocks per epoch
            priv_key: Ethereum private key (optional if signer provided)
            signer: Custom signer object (optional if priv_key provided)
            expected_chain_id: If set, the RPC endpoint must report this chain id
            gas_limit: Fixed gas limit; estimated when None
            gas_multiplier: Multiplier applied to gas estimates
            gas_price: Fixed gas price in wei; network price when None
            default_gas: Gas limit used when estimation fails
            block_time_sample_size: Number of blocks averaged for block time
            poll_interval: Seconds between receipt polls
            max_poll_attempts: Receipt polls before giving up
            timeout: Timeout for RPC requests in seconds
            suppress_claim_errors: Return an empty hash instead of raising when
                a redeemBounty submission fails
            sleep: Replacement for time.sleep in waits and polls
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ConfigurationError: If neither priv_key nor signer is provided, the
                URL is not https (except localhost), or the chain id differs
            NetworkError: If the chain id cannot be read from the endpoint
        """
        if not priv_key and not signer:
            raise ConfigurationError("Either priv_key or signer must be provided")

        # Check if it's a localhost or 127.0.0.1 address (with or without port)
        parsed = urllib.parse.urlparse(rpc_url)
        host = parsed.netloc.split(':')[0]
        is_local = host in ('localhost', '127.0.0.1')
        if parsed.scheme != 'https' and not is_local:
            raise ConfigurationError(f"rpc_url must use https:// for security (got: {parsed.scheme}://)")

        self.rpc_url = rpc_url
        self.logger = logger or logging.getLogger(__name__)
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

        self.signer: Signer = signer or LocalSigner(priv_key)
        self.gas_limit = gas_limit
        self.gas_multiplier = gas_multiplier
        self.gas_price = gas_price

        if expected_chain_id is not None:
            self._check_chain_id(expected_chain_id)

        sleep = sleep or time.sleep
        self.reader = ChainStateReader(
            token_address=token_address,
            stake_manager_address=stake_manager_address,
            epoch_length=epoch_length,
            block_time_sample_size=block_time_sample_size,
            logger=self.logger
        )
        self.builder = TransactionBuilder(logger=self.logger)
        self.submitter = TransactionSubmitter(
            default_gas=default_gas,
            poll_interval=poll_interval,
            max_poll_attempts=max_poll_attempts,
            sleep=sleep,
            logger=self.logger
        )
        self.approval_flow = ConditionalApprovalFlow(
            self.reader, self.builder, self.submitter,
            token_address=token_address,
            spender_address=stake_manager_address,
            logger=self.logger
        )
        self.claim_flow = EpochGatedClaimFlow(
            self.reader, self.builder, self.submitter,
            stake_manager_address=stake_manager_address,
            epoch_length=epoch_length,
            sleep=sleep,
            suppress_submission_errors=suppress_claim_errors,
            logger=self.logger
        )

    @classmethod
    def from_network(
        cls,
        network: str,
        rpc_url: Optional[str] = None,
        **kwargs
    ) -> "StakeFlowClient":
        """
        Create a client for a network defined in networks.json.

        Args:
            network: Network name, e.g. "local"
            rpc_url: Optional RPC URL override
            **kwargs: Passed through to the constructor (priv_key, signer...)
        """
        try:
            config = NetworkConfig.get_network(network)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        kwargs.setdefault("expected_chain_id", int(config["chainId"]))
        return cls(
            rpc_url=NetworkConfig.get_rpc_url(network, override=rpc_url),
            token_address=config["razorToken"],
            stake_manager_address=config["stakeManager"],
            epoch_length=int(config["epochLength"]),
            **kwargs
        )

    def _check_chain_id(self, expected_chain_id: int) -> None:
        try:
            actual = self.w3.eth.chain_id
        except (requests.RequestException, ConnectionError, TimeoutError, Web3Exception) as e:
            raise NetworkError(f"Failed to read chain id from {self.rpc_url}: {e}") from e
        if actual != expected_chain_id:
            raise ConfigurationError(
                f"Chain ID mismatch: expected {expected_chain_id}, connected to {actual}"
            )

    @property
    def address(self) -> str:
        """
        Get the account address

        Raises:
            ConfigurationError: If no signer is available
        """
        if not self.signer:
            raise ConfigurationError("No signer available")
        return self.signer.address

    def signer_options(self) -> SignerOptions:
        return SignerOptions(
            account_address=self.address,
            signer=self.signer,
            gas_limit=self.gas_limit,
            gas_multiplier=self.gas_multiplier,
            gas_price=self.gas_price
        )

    def get_allowance(self) -> int:
        """Allowance the StakeManager currently holds over this account's tokens."""
        return self.reader.get_allowance(self.w3, self.address, self.reader.stake_manager_address)

    def get_epoch(self) -> int:
        return self.reader.get_epoch(self.w3)

    def get_bounty_lock(self, bounty_id: int) -> BountyLock:
        return self.reader.get_bounty_lock(self.w3, bounty_id)

    def approve(self, amount: int, wait_for_confirmation: bool = False) -> TransactionOutcome:
        """
        Approve the StakeManager for ``amount`` tokens if the allowance is short.

        Returns:
            Outcome whose hash is ZERO_HASH when no approval was necessary

        Raises:
            ReadError: If the allowance cannot be read
            SubmissionError: If the approval cannot be sent
            ConfirmationTimeoutError: If waiting and the approval is not mined in time
        """
        outcome = self.approval_flow.run(self.w3, self.signer_options(), amount)
        if wait_for_confirmation and not outcome.is_noop:
            outcome = self._confirm(outcome)
        return outcome

    def claim_bounty(self, bounty_id: int, wait_for_confirmation: bool = True) -> TransactionOutcome:
        """
        Redeem ``bounty_id``, waiting for its lock to expire first if needed.

        Returns:
            Outcome of the redeemBounty transaction; when waiting, ``status``
            tells whether it was confirmed or failed on-chain

        Raises:
            ReadError: If the epoch, lock or block time cannot be read
            BusinessRuleError: If the bounty holds no amount
            SubmissionError: If the redeem cannot be sent (unless suppressed)
            ConfirmationTimeoutError: If waiting and the redeem is not mined in time
        """
        outcome = self.claim_flow.run(self.w3, self.signer_options(), bounty_id)
        if wait_for_confirmation and not outcome.is_noop:
            outcome = self._confirm(outcome)
        return outcome

    def wait_for_confirmation(self, tx_hash: str) -> ConfirmationStatus:
        return self.submitter.await_confirmation(self.w3, tx_hash)

    def _confirm(self, outcome: TransactionOutcome) -> TransactionOutcome:
        status = self.wait_for_confirmation(outcome.tx_hash)
        if status == ConfirmationStatus.TIMED_OUT:
            raise ConfirmationTimeoutError(
                f"Transaction {outcome.tx_hash} was not mined in time", tx_hash=outcome.tx_hash
            )
        return outcome.model_copy(update={"status": status})
