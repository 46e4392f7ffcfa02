"""
Deployment Toolkit Package
Handles configuration, compilation, deployment and explorer verification
"""

from .config import DeployConfig, NetworkConfig, load_config
from .artifacts import ContractArtifact, load_artifact
from .compiler import SolidityCompiler
from .contract_deployer import ContractDeployer, DeploymentResult
from .explorer import ExplorerClient

__all__ = [
    'DeployConfig',
    'NetworkConfig',
    'load_config',
    'ContractArtifact',
    'load_artifact',
    'SolidityCompiler',
    'ContractDeployer',
    'DeploymentResult',
    'ExplorerClient'
]
