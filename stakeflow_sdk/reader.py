"""
Read-only access to the on-chain state the flows decide on.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import requests
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, Web3Exception

from .abi import ERC20_ABI, STAKE_MANAGER_ABI
from .exceptions import DecodeError, NetworkError, ReadError
from .models import BountyLock

logger = logging.getLogger(__name__)


@contextmanager
def _reading(what: str) -> Iterator[None]:
    """Translate transport and decoding failures into ReadError subclasses."""
    try:
        yield
    except ReadError:
        raise
    except (requests.RequestException, ConnectionError, TimeoutError) as e:
        raise NetworkError(f"Failed to read {what}: {e}") from e
    except (BadFunctionCallOutput, ValueError, TypeError, KeyError, IndexError) as e:
        raise DecodeError(f"Malformed response while reading {what}: {e}") from e
    except Web3Exception as e:
        raise ReadError(f"Failed to read {what}: {e}") from e


class ChainStateReader:
    """
    Fetch allowance, epoch, bounty locks and block time from the network.

    The reader holds configuration only; the Web3 client is passed into every
    call and owned by the caller.
    """

    def __init__(
        self,
        token_address: str,
        stake_manager_address: str,
        epoch_length: int,
        block_time_sample_size: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        if epoch_length <= 0:
            raise ValueError("epoch_length must be positive")
        if block_time_sample_size <= 0:
            raise ValueError("block_time_sample_size must be positive")
        self.token_address = Web3.to_checksum_address(token_address)
        self.stake_manager_address = Web3.to_checksum_address(stake_manager_address)
        self.epoch_length = epoch_length
        self.block_time_sample_size = block_time_sample_size
        self.logger = logger or logging.getLogger(__name__)

    def get_allowance(self, client: Web3, owner: str, spender: str) -> int:
        """
        Amount of tokens ``spender`` may transfer on behalf of ``owner``.

        Raises:
            ReadError: If the allowance cannot be fetched or decoded
        """
        with _reading("allowance"):
            token = client.eth.contract(address=self.token_address, abi=ERC20_ABI)
            allowance = token.functions.allowance(
                Web3.to_checksum_address(owner),
                Web3.to_checksum_address(spender)
            ).call()
            allowance = _as_int(allowance, "allowance")
        self.logger.debug(f"Allowance of {spender} over {owner}: {allowance}")
        return allowance

    def get_epoch(self, client: Web3) -> int:
        """Current epoch, derived from the latest block number."""
        with _reading("epoch"):
            block_number = _as_int(client.eth.block_number, "block number")
        epoch = block_number // self.epoch_length
        self.logger.debug(f"Block {block_number} is in epoch {epoch}")
        return epoch

    def get_bounty_lock(self, client: Web3, bounty_id: int) -> BountyLock:
        """
        Bounty lock stored by the StakeManager for ``bounty_id``.

        Raises:
            ReadError: If the lock cannot be fetched or decoded
        """
        with _reading(f"bounty lock {bounty_id}"):
            stake_manager = client.eth.contract(address=self.stake_manager_address, abi=STAKE_MANAGER_ABI)
            redeem_after, bounty_hunter, amount = stake_manager.functions.bountyLocks(bounty_id).call()
            lock = BountyLock(
                amount=_as_int(amount, "bounty amount"),
                redeem_after=_as_int(redeem_after, "redeemAfter"),
                bounty_hunter=bounty_hunter
            )
        self.logger.debug(f"Bounty lock {bounty_id}: amount={lock.amount} redeem_after={lock.redeem_after}")
        return lock

    def estimate_block_time_seconds(self, client: Web3) -> float:
        """
        Average seconds per block over the last ``block_time_sample_size`` blocks.

        This is a scheduling heuristic only.

        Raises:
            ReadError: If the blocks cannot be read
            DecodeError: If there are not enough blocks to estimate from
        """
        with _reading("block time"):
            latest = client.eth.get_block("latest")
            latest_number = _as_int(latest["number"], "block number")
            if latest_number < 1:
                raise DecodeError("Not enough blocks to estimate block time")
            earlier_number = max(0, latest_number - self.block_time_sample_size)
            earlier = client.eth.get_block(earlier_number)
            elapsed = _as_int(latest["timestamp"], "timestamp") - _as_int(earlier["timestamp"], "timestamp")

        span = latest_number - earlier_number
        if elapsed <= 0:
            raise DecodeError(f"Non-increasing block timestamps between blocks {earlier_number} and {latest_number}")
        block_time = elapsed / span
        self.logger.debug(f"Estimated block time: {block_time:.2f}s over {span} blocks")
        return block_time


def _as_int(value: Any, what: str) -> int:
    # bool is an int subclass but never a valid chain quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Expected integer {what}, got {type(value).__name__}")
    return value
