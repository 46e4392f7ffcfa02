"""
Contract Artifacts
Reads and writes compiled contracts in the artifacts/contracts/<Name>.sol/<Name>.json layout
"""

import os
import json
from dataclasses import dataclass
from typing import Dict, List, Optional
from loguru import logger

from .errors import ArtifactError, ArtifactNotFoundError

DEFAULT_ARTIFACTS_DIR = "artifacts"


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of one compiled contract"""

    contract_name: str
    abi: List[Dict]
    bytecode: str
    source_name: str

    @property
    def constructor_inputs(self) -> List[Dict]:
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return entry.get('inputs', [])
        return []


def artifact_path(contract_name: str, artifacts_dir: str = DEFAULT_ARTIFACTS_DIR,
                  source_name: Optional[str] = None) -> str:
    source_name = source_name or f"contracts/{contract_name}.sol"
    return os.path.join(artifacts_dir, source_name, f"{contract_name}.json")


def load_artifact(
    contract_name: str,
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR,
    source_name: Optional[str] = None
) -> ContractArtifact:
    """
    Load a compiled contract artifact

    Args:
        contract_name: Contract name, e.g. 'ParkPics'
        artifacts_dir: Artifacts root directory
        source_name: Source unit, defaults to contracts/<Name>.sol

    Returns:
        ContractArtifact
    """
    path = artifact_path(contract_name, artifacts_dir, source_name)

    if not os.path.exists(path):
        raise ArtifactNotFoundError(
            f"Contract artifact not found: {path} (compile first with --compile)"
        )

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Invalid artifact JSON {path}: {e}") from e

    abi = data.get('abi')
    if abi is None:
        raise ArtifactError(f"Artifact {path} has no abi")

    bytecode = data.get('bytecode') or ''
    if bytecode in ('', '0x'):
        raise ArtifactError(
            f"Artifact {path} has no bytecode - {contract_name} is abstract or an interface"
        )

    if not bytecode.startswith('0x'):
        bytecode = '0x' + bytecode

    logger.debug(f"Loaded artifact {path}")

    return ContractArtifact(
        contract_name=data.get('contractName', contract_name),
        abi=abi,
        bytecode=bytecode,
        source_name=data.get('sourceName', source_name or f"contracts/{contract_name}.sol")
    )


def write_artifact(artifact: ContractArtifact, artifacts_dir: str = DEFAULT_ARTIFACTS_DIR) -> str:
    """Write an artifact to disk and return its path"""
    path = artifact_path(artifact.contract_name, artifacts_dir, artifact.source_name)
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, 'w') as f:
        json.dump({
            'contractName': artifact.contract_name,
            'sourceName': artifact.source_name,
            'abi': artifact.abi,
            'bytecode': artifact.bytecode
        }, f, indent=2)

    logger.debug(f"Wrote artifact {path}")
    return path
