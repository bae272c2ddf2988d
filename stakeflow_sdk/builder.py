"""
Assembly of contract calls into submittable requests.
"""
import logging
from typing import Any, Dict, List, Optional

from web3 import Web3

from .exceptions import InvalidRequestError
from .models import TransactionOptions, TransactionRequest

logger = logging.getLogger(__name__)


class TransactionBuilder:
    """
    Validate transaction options and freeze them into a TransactionRequest.

    Building is pure: nothing is read from or sent to the network.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def build(self, options: TransactionOptions) -> TransactionRequest:
        """
        Build a request for ``options.method_name`` on ``options.contract_address``.

        Args:
            options: Target contract, method, ABI, parameters and signer options

        Returns:
            An immutable TransactionRequest

        Raises:
            InvalidRequestError: If the contract, method or ABI is missing, the
                address is invalid, or the parameter count matches no overload
        """
        if not options.contract_address:
            raise InvalidRequestError("contract_address must not be empty")
        if not options.method_name:
            raise InvalidRequestError("method_name must not be empty")
        if not options.abi:
            raise InvalidRequestError("abi must not be empty")
        if not Web3.is_address(options.contract_address):
            raise InvalidRequestError(f"Invalid contract address: {options.contract_address}")
        if not Web3.is_address(options.signer_options.account_address):
            raise InvalidRequestError(f"Invalid signer address: {options.signer_options.account_address}")

        self._check_arity(options.abi, options.method_name, options.parameters)

        request = TransactionRequest(
            signer_address=Web3.to_checksum_address(options.signer_options.account_address),
            target_contract=Web3.to_checksum_address(options.contract_address),
            method_name=options.method_name,
            abi=tuple(options.abi),
            parameters=tuple(options.parameters),
            amount=options.amount,
            client=options.client,
            signer_options=options.signer_options
        )
        self.logger.debug(f"Built {request.method_name}{request.parameters} for {request.target_contract}")
        return request

    @staticmethod
    def _check_arity(abi: List[Dict[str, Any]], method_name: str, parameters: List[Any]) -> None:
        overloads = [
            entry for entry in abi
            if entry.get("type") == "function" and entry.get("name") == method_name
        ]
        if not overloads:
            raise InvalidRequestError(f"Method '{method_name}' not found in ABI")

        arities = sorted({len(entry.get("inputs", [])) for entry in overloads})
        if len(parameters) not in arities:
            expected = " or ".join(str(n) for n in arities)
            raise InvalidRequestError(
                f"Method '{method_name}' expects {expected} parameter(s), got {len(parameters)}"
            )
