"""
Transaction signers for the StakeFlow SDK.
"""
from typing import Any, Dict, Protocol

from .local import LocalSigner

__all__ = ["Signer", "LocalSigner"]


class Signer(Protocol):
    """Protocol for custom signers"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object"""
        ...
