"""
Pytest fixtures for the StakeFlow SDK tests.
"""
import time
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from stakeflow_sdk.builder import TransactionBuilder
from stakeflow_sdk.models import SignerOptions
from stakeflow_sdk.reader import ChainStateReader
from stakeflow_sdk.signer import LocalSigner
from stakeflow_sdk.submitter import TransactionSubmitter

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_TOKEN = "0x1234567890123456789012345678901234567890"
TEST_STAKE_MANAGER = "0x0987654321098765432109876543210987654321"
TEST_EPOCH_LENGTH = 300
TEST_TX_HASH = "0x" + "00" * 31 + "01"


# Make time.sleep instantaneous so waits and polls don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture
def local_signer():
    """Deterministic signer for the test key"""
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def signer_options(local_signer):
    return SignerOptions(account_address=local_signer.address, signer=local_signer)


@pytest.fixture
def mock_w3():
    """
    Web3 double with a contract factory whose functions can be configured
    per test through ``mock_w3.eth.contract.return_value.functions``.
    """
    w3 = MagicMock(spec=Web3)
    eth = MagicMock()
    eth.chain_id = 31337
    eth.gas_price = 1000000000  # 1 gwei
    eth.block_number = 21000
    eth.get_transaction_count = MagicMock(return_value=12)
    eth.send_raw_transaction = MagicMock(return_value=bytes.fromhex(TEST_TX_HASH[2:]))
    w3.eth = eth
    return w3


@pytest.fixture
def reader():
    return ChainStateReader(
        token_address=TEST_TOKEN,
        stake_manager_address=TEST_STAKE_MANAGER,
        epoch_length=TEST_EPOCH_LENGTH
    )


@pytest.fixture
def builder():
    return TransactionBuilder()


@pytest.fixture
def submitter():
    return TransactionSubmitter(poll_interval=0.01, max_poll_attempts=5)


@pytest.fixture
def mock_reader():
    """Reader double; tests set return values or side effects per call"""
    return MagicMock(spec=ChainStateReader)


@pytest.fixture
def mock_submitter():
    sub = MagicMock(spec=TransactionSubmitter)
    sub.submit.return_value = TEST_TX_HASH
    return sub


def checksum(address: str) -> str:
    return Web3.to_checksum_address(address)
