"""
Tests for TransactionSubmitter.
"""
import logging
from unittest.mock import MagicMock

import pytest
import requests
from web3.exceptions import TransactionNotFound, Web3Exception, Web3RPCError

from stakeflow_sdk.abi import ERC20_ABI
from stakeflow_sdk.exceptions import SubmissionError
from stakeflow_sdk.models import ConfirmationStatus, SignerOptions, TransactionOptions
from stakeflow_sdk.submitter import TransactionSubmitter
from tests.conftest import TEST_TOKEN, TEST_STAKE_MANAGER, TEST_TX_HASH, checksum


class BadSigner:
    address = None

    def __init__(self, address):
        self.address = address

    def sign_transaction(self, _):
        raise RuntimeError("nope")


@pytest.fixture
def approve_fn(mock_w3):
    fn = mock_w3.eth.contract.return_value.functions.approve.return_value
    fn.estimate_gas.return_value = 50000
    fn.build_transaction.side_effect = lambda params: {**params, "to": checksum(TEST_TOKEN), "data": "0x095ea7b3"}
    return fn


def _request(builder, mock_w3, signer_options, amount=None):
    return builder.build(TransactionOptions(
        client=mock_w3,
        signer_options=signer_options,
        contract_address=TEST_TOKEN,
        method_name="approve",
        abi=ERC20_ABI,
        parameters=[TEST_STAKE_MANAGER, 1000],
        amount=amount,
    ))


def test_submit_signs_and_sends(submitter, builder, mock_w3, signer_options, approve_fn):
    tx_hash = submitter.submit(_request(builder, mock_w3, signer_options))

    assert tx_hash == TEST_TX_HASH
    mock_w3.eth.contract.return_value.functions.approve.assert_called_once_with(TEST_STAKE_MANAGER, 1000)
    params = approve_fn.build_transaction.call_args[0][0]
    assert params["from"] == signer_options.account_address
    assert params["nonce"] == 12
    assert params["chainId"] == 31337
    assert params["gas"] == int(50000 * 1.1)
    assert params["gasPrice"] == 1000000000
    assert "value" not in params
    mock_w3.eth.get_transaction_count.assert_called_once_with(signer_options.account_address, "pending")
    assert mock_w3.eth.send_raw_transaction.call_count == 1


def test_submit_uses_gas_overrides(submitter, builder, mock_w3, local_signer, approve_fn):
    options = SignerOptions(
        account_address=local_signer.address,
        signer=local_signer,
        gas_limit=90000,
        gas_price=7,
    )
    submitter.submit(_request(builder, mock_w3, options, amount=5))

    params = approve_fn.build_transaction.call_args[0][0]
    assert params["gas"] == 90000
    assert params["gasPrice"] == 7
    assert params["value"] == 5
    approve_fn.estimate_gas.assert_not_called()


def test_gas_estimation_falls_back_to_default(builder, mock_w3, signer_options, approve_fn, caplog):
    approve_fn.estimate_gas.side_effect = Web3Exception("execution reverted")
    submitter = TransactionSubmitter(default_gas=123456)

    caplog.set_level(logging.WARNING)
    submitter.submit(_request(builder, mock_w3, signer_options))

    assert approve_fn.build_transaction.call_args[0][0]["gas"] == 123456
    assert any("Gas estimation failed" in msg for msg in caplog.messages)


def test_signing_failure_raises_submission_error(submitter, builder, mock_w3, local_signer, approve_fn):
    options = SignerOptions(account_address=local_signer.address, signer=BadSigner(local_signer.address))

    with pytest.raises(SubmissionError, match="Failed to sign transaction"):
        submitter.submit(_request(builder, mock_w3, options))
    mock_w3.eth.send_raw_transaction.assert_not_called()


def test_broadcast_rejection_raises_submission_error(submitter, builder, mock_w3, signer_options, approve_fn):
    mock_w3.eth.send_raw_transaction.side_effect = Web3Exception("nonce too low")

    with pytest.raises(SubmissionError, match="nonce too low"):
        submitter.submit(_request(builder, mock_w3, signer_options))


def test_build_failure_raises_submission_error(submitter, builder, mock_w3, signer_options, approve_fn):
    approve_fn.build_transaction.side_effect = ValueError("bad params")

    with pytest.raises(SubmissionError, match="Failed to prepare transaction"):
        submitter.submit(_request(builder, mock_w3, signer_options))


def test_mismatched_signer_rejected(submitter, builder, mock_w3, local_signer, approve_fn):
    other = MagicMock()
    other.address = "0x2222222222222222222222222222222222222222"
    options = SignerOptions(account_address=local_signer.address, signer=other)

    with pytest.raises(SubmissionError, match="does not match"):
        submitter.submit(_request(builder, mock_w3, options))
    other.sign_transaction.assert_not_called()


def _receipt(status):
    return {
        "transactionHash": bytes.fromhex(TEST_TX_HASH[2:]),
        "blockNumber": 12345,
        "blockHash": bytes.fromhex("ab" * 32),
        "status": status,
        "gasUsed": 46000,
        "from": "0x1234567890123456789012345678901234567890",
        "to": TEST_TOKEN,
        "logs": [],
    }


def test_get_receipt_pending_returns_none(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("pending")
    assert submitter.get_receipt(mock_w3, TEST_TX_HASH) is None


def test_get_receipt_converts_bytes(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.return_value = _receipt(1)

    receipt = submitter.get_receipt(mock_w3, TEST_TX_HASH)

    assert receipt.tx_hash == TEST_TX_HASH
    assert receipt.block_hash == "0x" + "ab" * 32
    assert receipt.block_number == 12345


def test_await_confirmation_confirmed_after_pending(mock_w3):
    sleep = MagicMock()
    submitter = TransactionSubmitter(poll_interval=2.5, max_poll_attempts=5, sleep=sleep)
    mock_w3.eth.get_transaction_receipt.side_effect = [
        TransactionNotFound("pending"),
        TransactionNotFound("pending"),
        _receipt(1),
    ]

    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.CONFIRMED
    assert sleep.call_count == 2
    sleep.assert_called_with(2.5)


def test_await_confirmation_failed_on_chain(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.return_value = _receipt(0)
    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.FAILED


def test_await_confirmation_times_out(mock_w3):
    sleep = MagicMock()
    submitter = TransactionSubmitter(poll_interval=1.0, max_poll_attempts=3, sleep=sleep)
    mock_w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("pending")

    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.TIMED_OUT
    assert mock_w3.eth.get_transaction_receipt.call_count == 3
    assert sleep.call_count == 2


def test_await_confirmation_survives_connection_errors(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.side_effect = [
        requests.ConnectionError("down"),
        _receipt(1),
    ]
    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.CONFIRMED


def test_await_confirmation_survives_http_and_rpc_errors(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.side_effect = [
        requests.HTTPError("503 Server Error"),
        Web3RPCError("header not found"),
        _receipt(1),
    ]
    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.CONFIRMED


def test_await_confirmation_times_out_on_persistent_http_errors(submitter, mock_w3):
    mock_w3.eth.get_transaction_receipt.side_effect = requests.HTTPError("502 Server Error")

    assert submitter.await_confirmation(mock_w3, TEST_TX_HASH) == ConfirmationStatus.TIMED_OUT
    assert mock_w3.eth.get_transaction_receipt.call_count == submitter.max_poll_attempts


def test_submitter_rejects_zero_poll_budget():
    with pytest.raises(ValueError):
        TransactionSubmitter(max_poll_attempts=0)
