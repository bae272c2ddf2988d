"""
Local signer backed by an in-memory private key.
"""
import json
import logging
import os
from typing import Any, Dict, Optional, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount

logger = logging.getLogger(__name__)


class LocalSigner:
    """
    Sign transactions with a private key held in process memory.

    The key can be given directly or decrypted from a V3 keystore file.
    """

    def __init__(self, private_key: Union[str, bytes]):
        if not private_key:
            raise ValueError("private_key must not be empty")
        self._account: LocalAccount = Account.from_key(private_key)

    @classmethod
    def from_keystore(cls, path: str, password: str) -> "LocalSigner":
        """
        Decrypt a keystore file and build a signer from it.

        Args:
            path: Path to an Ethereum V3 keystore JSON file
            password: Password that unlocks the keystore

        Raises:
            FileNotFoundError: If the keystore does not exist
            ValueError: If the password is wrong or the file is malformed
        """
        with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
            keystore = json.load(f)
        private_key = Account.decrypt(keystore, password)
        logger.debug(f"Unlocked keystore {path}")
        return cls(bytes(private_key))

    @classmethod
    def from_env(cls, var_name: str) -> Optional["LocalSigner"]:
        """Build a signer from a private key stored in an environment variable."""
        value = os.environ.get(var_name)
        if not value:
            return None
        return cls(value)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        return self._account.sign_transaction(transaction_dict)
