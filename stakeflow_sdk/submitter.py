"""
Signing, broadcasting and confirmation of transaction requests.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception, Web3RPCError

from .exceptions import SubmissionError
from .models import ConfirmationStatus, TransactionRequest, TxReceipt

logger = logging.getLogger(__name__)

DEFAULT_GAS = 300000


class TransactionSubmitter:
    """
    Send built requests and wait for them to be mined.

    Submission is attempted exactly once per call; retrying is left to the
    caller.
    """

    def __init__(
        self,
        default_gas: int = DEFAULT_GAS,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 120,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        if max_poll_attempts <= 0:
            raise ValueError("max_poll_attempts must be positive")
        self.default_gas = default_gas
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self._sleep = sleep or time.sleep
        self.logger = logger or logging.getLogger(__name__)

    def submit(self, request: TransactionRequest) -> str:
        """
        Sign and broadcast ``request``.

        Args:
            request: Request produced by TransactionBuilder

        Returns:
            Transaction hash as a 0x-prefixed hex string

        Raises:
            SubmissionError: If the transaction cannot be built, signed or sent
        """
        w3 = request.client
        options = request.signer_options
        signer = options.signer

        if signer is None:
            raise SubmissionError("No signer available")
        if signer.address.lower() != request.signer_address.lower():
            raise SubmissionError(
                f"Signer address {signer.address} does not match request signer {request.signer_address}"
            )

        try:
            contract = w3.eth.contract(address=request.target_contract, abi=list(request.abi))
            fn = getattr(contract.functions, request.method_name)(*request.parameters)

            tx_params: Dict[str, Any] = {
                'from': request.signer_address,
                'nonce': w3.eth.get_transaction_count(request.signer_address, 'pending'),
                'chainId': w3.eth.chain_id,
            }
            if request.amount:
                tx_params['value'] = request.amount

            tx_params['gas'] = self._gas_limit(fn, request, tx_params)
            if options.gas_price is not None:
                tx_params['gasPrice'] = options.gas_price
            else:
                tx_params['gasPrice'] = w3.eth.gas_price

            tx = fn.build_transaction(tx_params)
        except (Web3Exception, ValueError, requests.RequestException) as e:
            self.logger.error(f"Failed to prepare {request.method_name} transaction: {e}")
            raise SubmissionError(f"Failed to prepare transaction: {str(e)}") from e

        try:
            signed_tx = signer.sign_transaction(tx)
        except Exception as e:
            self.logger.error(f"Transaction signing failed: {e}")
            raise SubmissionError(f"Failed to sign transaction: {str(e)}") from e

        try:
            tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            self.logger.error(f"Failed to send transaction: {e}")
            raise SubmissionError(f"Failed to send transaction: {str(e)}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        self.logger.info(f"Txn Hash: {tx_hash_hex}")
        return tx_hash_hex

    def _gas_limit(self, fn: Any, request: TransactionRequest, tx_params: Dict[str, Any]) -> int:
        options = request.signer_options
        if options.gas_limit is not None:
            return options.gas_limit
        try:
            estimate = fn.estimate_gas({
                'from': tx_params['from'],
                'value': tx_params.get('value', 0)
            })
            gas = int(estimate * options.gas_multiplier)
            self.logger.debug(f"Estimated gas: {estimate}, using {gas}")
            return gas
        except Exception as e:
            self.logger.warning(f"Gas estimation failed, using default: {self.default_gas}. Error: {e}")
            return self.default_gas

    def get_receipt(self, client: Web3, tx_hash: str) -> Optional[TxReceipt]:
        """
        Fetch the receipt of ``tx_hash``, or None while it is still pending.
        """
        try:
            receipt = client.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        if receipt is None:
            return None
        return self._convert_receipt(receipt)

    def await_confirmation(self, client: Web3, tx_hash: str) -> ConfirmationStatus:
        """
        Poll until ``tx_hash`` is mined or the attempt budget runs out.

        Blocks for at most ``max_poll_attempts * poll_interval`` seconds plus
        request latency.

        Transport and RPC errors during a poll count as a pending attempt.

        Returns:
            CONFIRMED or FAILED from the receipt status, TIMED_OUT otherwise
        """
        for attempt in range(1, self.max_poll_attempts + 1):
            try:
                receipt = self.get_receipt(client, tx_hash)
            except (requests.RequestException, ConnectionError, TimeoutError, Web3RPCError) as e:
                self.logger.warning(f"Receipt poll {attempt} for {tx_hash} failed: {e}")
                receipt = None

            if receipt is not None:
                if receipt.status == 1:
                    self.logger.info(f"Transaction mined successfully in block {receipt.block_number}")
                    return ConfirmationStatus.CONFIRMED
                self.logger.error(f"Transaction {tx_hash} failed on-chain in block {receipt.block_number}")
                return ConfirmationStatus.FAILED

            if attempt < self.max_poll_attempts:
                self._sleep(self.poll_interval)

        self.logger.warning(f"Timed out waiting for {tx_hash} after {self.max_poll_attempts} attempts")
        return ConfirmationStatus.TIMED_OUT

    def _convert_receipt(self, web3_receipt: Any) -> TxReceipt:
        """
        Convert a Web3 receipt to our TxReceipt model
        """
        receipt_dict = dict(web3_receipt)

        # Convert bytes to hex strings
        for key, value in list(receipt_dict.items()):
            if isinstance(value, bytes):
                receipt_dict[key] = Web3.to_hex(value)
        receipt_dict['logs'] = [dict(log) for log in receipt_dict.get('logs', [])]

        return TxReceipt.model_validate(receipt_dict)
