"""
Deployment Errors
Exception types raised by the deployment toolkit
"""


class DeployToolError(Exception):
    """Base class for every error raised by the deployment toolkit"""


class ConfigurationError(DeployToolError):
    """Configuration file is malformed or a network cannot be resolved"""


class ArtifactError(DeployToolError):
    """Compiled contract artifact is unusable"""


class ArtifactNotFoundError(ArtifactError):
    """Contract source or artifact file does not exist"""


class CompilationError(DeployToolError):
    """solc rejected the contract sources"""


class NetworkConnectionError(DeployToolError):
    """RPC endpoint is unreachable"""


class DeploymentError(DeployToolError):
    """Deployment transaction could not be sent or was not confirmed"""

    def __init__(self, message: str, transaction_hash: str = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ExplorerError(DeployToolError):
    """Block explorer refused or failed a verification request"""
