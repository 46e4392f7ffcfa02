"""
Network Connection
Creates Web3 connections and signers for a configured network
"""

from typing import Union
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware
from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger

from .config import NetworkConfig
from .errors import ConfigurationError, NetworkConnectionError


def connect(network: NetworkConfig, request_timeout: int = 60) -> Web3:
    """
    Connect to a network's RPC endpoint

    Args:
        network: Resolved network entry
        request_timeout: HTTP request timeout in seconds

    Returns:
        Connected Web3 instance
    """
    w3 = Web3(Web3.HTTPProvider(network.url, request_kwargs={'timeout': request_timeout}))

    # Polygon and the clique testnets put more than 32 bytes in extraData
    if network.poa:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    if not w3.is_connected():
        raise NetworkConnectionError(f"Failed to connect to {network.name} at {network.url}")

    logger.info(f"Connected to {network.name}")
    return w3


def load_signer(network: NetworkConfig, w3: Web3) -> Union[LocalAccount, str]:
    """
    Pick the deploying account for a network

    The first configured private key wins. A network without keys (a local
    node) deploys from the node's first unlocked account.

    Returns:
        LocalAccount for key-based signing, or the unlocked account address
    """
    if network.accounts:
        try:
            account = Account.from_key(network.accounts[0])
        except Exception as e:
            raise ConfigurationError(f"Invalid private key for network '{network.name}'") from e

        logger.info(f"Deploying from: {account.address}")
        return account

    node_accounts = w3.eth.accounts
    if not node_accounts:
        raise ConfigurationError(
            f"Network '{network.name}' has no accounts configured and the node exposes none"
        )

    logger.info(f"Deploying from node account: {node_accounts[0]}")
    return node_accounts[0]


def signer_address(signer: Union[LocalAccount, str]) -> str:
    return signer if isinstance(signer, str) else signer.address
