"""
Reader and receipt polling tests against a real Web3 HTTP provider with a mocked JSON-RPC endpoint.
"""
import pytest
import requests
from web3 import Web3

from stakeflow_sdk.exceptions import NetworkError
from stakeflow_sdk.models import ConfirmationStatus
from stakeflow_sdk.reader import ChainStateReader
from stakeflow_sdk.submitter import TransactionSubmitter
from tests.conftest import TEST_TOKEN, TEST_STAKE_MANAGER, TEST_TX_HASH

RPC_URL = "https://rpc.example.com"


def _block(number, timestamp):
    return {
        "number": hex(number),
        "timestamp": hex(timestamp),
        "hash": "0x" + f"{number:064x}",
        "parentHash": "0x" + f"{max(number - 1, 0):064x}",
        "transactions": [],
    }


@pytest.fixture
def rpc(requests_mock):
    """JSON-RPC endpoint serving blocks 12000 (t=24000) and 11990 (t=23970)."""
    blocks = {12000: _block(12000, 24000), 11990: _block(11990, 23970)}

    def respond(request, context):
        body = request.json()
        method, params = body["method"], body.get("params", [])
        if method == "eth_blockNumber":
            result = hex(12000)
        elif method == "eth_getBlockByNumber":
            number = 12000 if params[0] == "latest" else int(params[0], 16)
            result = blocks.get(number)
        elif method == "eth_chainId":
            result = "0x7a69"
        else:
            result = None
        return {"jsonrpc": "2.0", "id": body["id"], "result": result}

    requests_mock.post(RPC_URL, json=respond)
    return requests_mock


@pytest.fixture
def w3():
    return Web3(Web3.HTTPProvider(RPC_URL))


@pytest.fixture
def rpc_reader():
    return ChainStateReader(TEST_TOKEN, TEST_STAKE_MANAGER, epoch_length=300, block_time_sample_size=10)


def test_get_epoch_over_http(rpc, w3, rpc_reader):
    assert rpc_reader.get_epoch(w3) == 40


def test_block_time_over_http(rpc, w3, rpc_reader):
    assert rpc_reader.estimate_block_time_seconds(w3) == pytest.approx(3.0)


def test_connection_error_over_http(requests_mock, w3, rpc_reader):
    requests_mock.post(RPC_URL, exc=requests.ConnectionError("down"))

    with pytest.raises(NetworkError, match="Failed to read epoch"):
        rpc_reader.get_epoch(w3)


@pytest.mark.parametrize("status_code", [429, 502, 503])
def test_http_error_status_over_http(requests_mock, w3, rpc_reader, status_code):
    requests_mock.post(RPC_URL, status_code=status_code)

    with pytest.raises(NetworkError, match="Failed to read epoch"):
        rpc_reader.get_epoch(w3)


def test_receipt_polls_survive_http_errors(requests_mock, w3):
    requests_mock.post(RPC_URL, status_code=503)
    submitter = TransactionSubmitter(poll_interval=0, max_poll_attempts=2)

    assert submitter.await_confirmation(w3, TEST_TX_HASH) == ConfirmationStatus.TIMED_OUT
