"""
Deployment Configuration
Loads compiler version, networks and explorer credentials from config/deploy_config.json
"""

import os
import re
import json
from types import MappingProxyType
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple
from loguru import logger
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/deploy_config.json"

ENV_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
UNFILLED_PLACEHOLDER = re.compile(r"<ADD [^>]*>")


@dataclass(frozen=True)
class NetworkConfig:
    """A named RPC endpoint and the keys used to deploy through it"""

    name: str
    url: str
    accounts: Tuple[str, ...] = ()
    chain_id: Optional[int] = None
    poa: bool = False
    explorer_api_url: Optional[str] = None


@dataclass(frozen=True)
class DeployConfig:
    """Read-only deployment configuration record"""

    solidity: str
    default_network: str
    networks: Mapping[str, Mapping]
    etherscan_api_key: Optional[str] = None
    confirmation_timeout: int = 300
    gas_buffer: float = 1.2
    path: Optional[str] = None

    def network_names(self) -> List[str]:
        return list(self.networks.keys())

    def get_network(self, name: Optional[str] = None) -> NetworkConfig:
        """
        Resolve a network entry, substituting ${VAR} placeholders from the environment

        Only the selected network is resolved, so credentials for other
        networks may stay unset.

        Args:
            name: Network name (None = DEPLOY_NETWORK env var, then default_network)

        Returns:
            Resolved NetworkConfig
        """
        name = name or os.getenv('DEPLOY_NETWORK') or self.default_network

        if name not in self.networks:
            raise ConfigurationError(
                f"Unknown network '{name}' (configured: {', '.join(self.networks)})"
            )

        entry = self.networks[name]

        url = entry.get('url')
        if not url:
            raise ConfigurationError(f"Network '{name}' has no url")

        accounts = entry.get('accounts', [])
        if not isinstance(accounts, list):
            raise ConfigurationError(f"Network '{name}': accounts must be a list")

        chain_id = entry.get('chain_id')

        return NetworkConfig(
            name=name,
            url=resolve_placeholders(url, f"networks.{name}.url"),
            accounts=tuple(
                resolve_placeholders(account, f"networks.{name}.accounts[{i}]")
                for i, account in enumerate(accounts)
            ),
            chain_id=int(chain_id) if chain_id is not None else None,
            poa=bool(entry.get('poa', False)),
            explorer_api_url=entry.get('explorer_api_url')
        )

    def get_explorer_api_key(self) -> str:
        """Resolve the block-explorer API key"""
        if not self.etherscan_api_key:
            raise ConfigurationError("etherscan.api_key is not configured")
        return resolve_placeholders(self.etherscan_api_key, "etherscan.api_key")


def resolve_placeholders(value: str, location: str) -> str:
    """
    Substitute ${VAR} references with environment values

    Args:
        value: Raw configuration string
        location: Dotted config path, used in error messages

    Returns:
        Resolved string
    """
    if not isinstance(value, str):
        raise ConfigurationError(f"{location} must be a string")

    def substitute(match):
        var = match.group(1)
        resolved = os.getenv(var)
        if not resolved:
            raise ConfigurationError(f"{location}: environment variable {var} is not set")
        return resolved

    resolved = ENV_PLACEHOLDER.sub(substitute, value)

    if UNFILLED_PLACEHOLDER.search(resolved):
        raise ConfigurationError(f"{location} still contains a placeholder: {resolved}")

    return resolved


def _section(data: dict, key: str, path: str) -> dict:
    if key not in data:
        return {}
    section = data[key]
    if not isinstance(section, dict):
        raise ConfigurationError(f"{path}: '{key}' must be an object")
    return section


def load_config(path: Optional[str] = None) -> DeployConfig:
    """
    Load the deployment configuration file

    Args:
        path: Config file path (None = DEPLOY_CONFIG_PATH env var, then config/deploy_config.json)

    Returns:
        DeployConfig
    """
    load_dotenv(find_dotenv(usecwd=True))

    path = path or os.getenv('DEPLOY_CONFIG_PATH') or DEFAULT_CONFIG_PATH

    if not os.path.exists(path):
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be an object")

    solidity = data.get('solidity')
    if not solidity:
        raise ConfigurationError(f"{path}: 'solidity' compiler version is required")

    networks = data.get('networks')
    if not networks or not isinstance(networks, dict):
        raise ConfigurationError(f"{path}: at least one network must be defined")

    for name, entry in networks.items():
        if not isinstance(entry, dict):
            raise ConfigurationError(f"{path}: network '{name}' must be an object")

    default_network = data.get('default_network', 'hardhat')
    if default_network not in networks:
        raise ConfigurationError(
            f"{path}: default_network '{default_network}' is not in networks"
        )

    etherscan = _section(data, 'etherscan', path)
    deployment = _section(data, 'deployment', path)

    try:
        confirmation_timeout = int(deployment.get('confirmation_timeout', 300))
        gas_buffer = float(deployment.get('gas_buffer', 1.2))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{path}: invalid deployment setting: {e}") from e

    config = DeployConfig(
        solidity=str(solidity),
        default_network=default_network,
        networks=MappingProxyType({
            name: MappingProxyType(dict(entry)) for name, entry in networks.items()
        }),
        etherscan_api_key=etherscan.get('api_key'),
        confirmation_timeout=confirmation_timeout,
        gas_buffer=gas_buffer,
        path=path
    )

    logger.debug(
        f"Loaded {path}: solc {config.solidity}, "
        f"{len(networks)} networks, default '{default_network}'"
    )

    return config
