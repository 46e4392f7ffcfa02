"""
Solidity Compiler
Compiles contracts/ sources with the configured solc version via py-solc-x
"""

import os
import re
import posixpath
from typing import Dict, Optional
import solcx
from solcx.exceptions import SolcError
from loguru import logger

from .artifacts import ContractArtifact, write_artifact, DEFAULT_ARTIFACTS_DIR
from .errors import ArtifactNotFoundError, CompilationError

IMPORT_PATTERN = re.compile(
    r"""^\s*import\s+(?:[^'";]*?\s+from\s+)?["']([^"']+)["']""",
    re.MULTILINE
)


class SolidityCompiler:
    """
    Builds solc standard-JSON input for a contract and all of its imports

    Relative imports resolve against the importing file, package imports
    (e.g. @openzeppelin/...) against node_modules/.
    """

    def __init__(
        self,
        version: str,
        project_root: str = ".",
        contracts_dir: str = "contracts",
        artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    ):
        self.version = version
        self.project_root = project_root
        self.contracts_dir = contracts_dir
        self.artifacts_dir = artifacts_dir

    def ensure_installed(self):
        """Install the configured solc release if it is missing"""
        installed = [str(v) for v in solcx.get_installed_solc_versions()]

        if self.version not in installed:
            logger.info(f"Installing solc {self.version}...")
            solcx.install_solc(self.version)

    def long_version(self) -> str:
        """Compiler version with commit hash, e.g. v0.8.2+commit.661d1103"""
        self.ensure_installed()
        solcx.set_solc_version(self.version, silent=True)
        return f"v{solcx.get_solc_version(with_commit_hash=True)}"

    def source_name(self, contract_name: str) -> str:
        return posixpath.join(self.contracts_dir, f"{contract_name}.sol")

    def _resolve_import(self, importer: str, path: str) -> str:
        if path.startswith('.'):
            return posixpath.normpath(posixpath.join(posixpath.dirname(importer), path))
        return path

    def _read_source(self, unit: str) -> Optional[str]:
        candidates = [
            os.path.join(self.project_root, unit),
            os.path.join(self.project_root, "node_modules", unit)
        ]

        for candidate in candidates:
            if os.path.exists(candidate):
                with open(candidate, 'r', encoding='utf-8') as f:
                    return f.read()

        return None

    def collect_sources(self, contract_name: str) -> Dict[str, Dict[str, str]]:
        """
        Gather the contract source and every file it transitively imports

        Returns:
            Mapping of source unit name to {'content': ...}
        """
        root = self.source_name(contract_name)
        sources = {}
        pending = [root]

        while pending:
            unit = pending.pop()
            if unit in sources:
                continue

            content = self._read_source(unit)
            if content is None:
                if unit == root:
                    raise ArtifactNotFoundError(f"Contract source not found: {unit}")
                raise CompilationError(f"Import not found: {unit}")

            sources[unit] = {'content': content}

            for imported in IMPORT_PATTERN.findall(content):
                pending.append(self._resolve_import(unit, imported))

        logger.debug(f"Collected {len(sources)} source files for {contract_name}")
        return sources

    def standard_input(self, contract_name: str) -> Dict:
        """Solc standard-JSON input for one contract"""
        return {
            'language': 'Solidity',
            'sources': self.collect_sources(contract_name),
            'settings': {
                'optimizer': {'enabled': False, 'runs': 200},
                'outputSelection': {
                    '*': {
                        '*': ['abi', 'evm.bytecode.object', 'metadata']
                    }
                }
            }
        }

    def compile(self, contract_name: str) -> ContractArtifact:
        """
        Compile a contract and write its artifact

        Args:
            contract_name: Contract name, source expected at contracts/<Name>.sol

        Returns:
            ContractArtifact
        """
        standard_input = self.standard_input(contract_name)
        source_name = self.source_name(contract_name)

        self.ensure_installed()
        logger.info(f"Compiling {source_name} with solc {self.version}...")

        try:
            output = solcx.compile_standard(
                standard_input,
                solc_version=self.version,
                allow_paths=os.path.abspath(self.project_root)
            )
        except SolcError as e:
            raise CompilationError(f"Compilation of {source_name} failed: {e}") from e

        for message in output.get('errors', []):
            if message.get('severity') == 'warning':
                logger.warning(message.get('formattedMessage', message.get('message')).strip())

        try:
            contract = output['contracts'][source_name][contract_name]
        except KeyError as e:
            raise CompilationError(
                f"solc output has no contract {contract_name} in {source_name}"
            ) from e

        artifact = ContractArtifact(
            contract_name=contract_name,
            abi=contract['abi'],
            bytecode='0x' + contract['evm']['bytecode']['object'],
            source_name=source_name
        )

        write_artifact(artifact, self.artifacts_dir)
        logger.success(f"Compiled {contract_name}")
        return artifact
