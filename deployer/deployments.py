"""
Deployment Records
Persists deployed addresses under deployments/<network>/<Name>.json
"""

import os
import json
from datetime import datetime, timezone
from typing import Dict
from loguru import logger

from .artifacts import ContractArtifact
from .contract_deployer import DeploymentResult
from .errors import ConfigurationError

DEFAULT_DEPLOYMENTS_DIR = "deployments"


def deployment_path(network: str, contract_name: str,
                    deployments_dir: str = DEFAULT_DEPLOYMENTS_DIR) -> str:
    return os.path.join(deployments_dir, network, f"{contract_name}.json")


def save_deployment(
    result: DeploymentResult,
    artifact: ContractArtifact,
    deployments_dir: str = DEFAULT_DEPLOYMENTS_DIR,
    constructor_args: tuple = ()
) -> str:
    """
    Record a deployment so later steps (verification) can find it

    Returns:
        Path of the written record
    """
    path = deployment_path(result.network, result.contract_name, deployments_dir)
    os.makedirs(os.path.dirname(path), exist_ok=True)

    record = result.to_dict()
    record.update({
        'source_name': artifact.source_name,
        'constructor_args': list(constructor_args),
        'abi': artifact.abi,
        'deployed_at': datetime.now(timezone.utc).isoformat()
    })

    with open(path, 'w') as f:
        json.dump(record, f, indent=2)

    logger.debug(f"Saved deployment record {path}")
    return path


def load_deployment(network: str, contract_name: str,
                    deployments_dir: str = DEFAULT_DEPLOYMENTS_DIR) -> Dict:
    """Read a deployment record written by save_deployment"""
    path = deployment_path(network, contract_name, deployments_dir)

    if not os.path.exists(path):
        raise ConfigurationError(
            f"No {contract_name} deployment recorded for {network} ({path})"
        )

    with open(path, 'r') as f:
        return json.load(f)
