"""
Network configuration for the StakeFlow SDK.

Networks are described in the packaged ``networks.json``; RPC URLs may be
overridden per call or through ``<NETWORK>_RPC_URL`` environment variables.
"""
import importlib.resources
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class NetworkConfig:
    """Read-only accessors over the packaged network definitions."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load all network definitions, caching them after the first read.

        Returns:
            Mapping of network name to its configuration dictionary
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        resource = importlib.resources.files("stakeflow_sdk").joinpath("networks.json")
        with resource.open("r", encoding="utf-8") as f:
            cls._networks_cache = json.load(f)
        logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the configuration for a single network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: explicit override, then ``<NETWORK>_RPC_URL``, then the
        packaged default.
        """
        if override:
            return override

        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            logger.debug(f"Using RPC URL from {env_var}")
            return env_url

        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_token_address(cls, network: str) -> str:
        return cls.get_network(network)["razorToken"]

    @classmethod
    def get_stake_manager_address(cls, network: str) -> str:
        return cls.get_network(network)["stakeManager"]

    @classmethod
    def get_epoch_length(cls, network: str) -> int:
        """Number of blocks per epoch."""
        return int(cls.get_network(network)["epochLength"])
