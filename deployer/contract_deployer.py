"""
Contract Deployer
Deploys a compiled contract through its factory and waits for confirmation
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Union
from web3 import Web3
from web3.exceptions import TimeExhausted
from eth_account.signers.local import LocalAccount
from loguru import logger

from .artifacts import ContractArtifact
from .config import NetworkConfig
from .errors import DeploymentError
from .network import signer_address


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a confirmed deployment"""

    contract_name: str
    address: str
    transaction_hash: str
    gas_used: int
    block_number: int
    network: str

    def to_dict(self) -> Dict:
        return asdict(self)


class ContractDeployer:
    """
    Sends one contract-creation transaction and blocks until it is mined

    There is no retry: any failure surfaces as DeploymentError.
    """

    def __init__(
        self,
        w3: Web3,
        signer: Union[LocalAccount, str],
        network: NetworkConfig,
        confirmation_timeout: int = 300,
        gas_buffer: float = 1.2
    ):
        """
        Initialize Contract Deployer

        Args:
            w3: Connected Web3 instance
            signer: LocalAccount (signs locally) or unlocked node account address
            network: Network being deployed to
            confirmation_timeout: Seconds to wait for the receipt
            gas_buffer: Multiplier applied to the gas estimate
        """
        self.w3 = w3
        self.signer = signer
        self.network = network
        self.confirmation_timeout = confirmation_timeout
        self.gas_buffer = gas_buffer
        self.deployer_address = signer_address(signer)

    def get_contract_factory(self, artifact: ContractArtifact):
        """Contract factory for an artifact"""
        return self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    def _chain_id(self) -> int:
        if self.network.chain_id is not None:
            return self.network.chain_id
        return self.w3.eth.chain_id

    def _send_signed(self, constructor) -> bytes:
        """Estimate, build, sign and broadcast the creation transaction"""
        gas_estimate = constructor.estimate_gas({'from': self.deployer_address})
        gas_limit = int(gas_estimate * self.gas_buffer)
        gas_price = self.w3.eth.gas_price

        logger.info(f"Gas limit: {gas_limit}")
        logger.info(f"Gas price: {self.w3.from_wei(gas_price, 'gwei')} gwei")

        transaction = constructor.build_transaction({
            'from': self.deployer_address,
            'nonce': self.w3.eth.get_transaction_count(self.deployer_address, 'pending'),
            'gas': gas_limit,
            'gasPrice': gas_price,
            'chainId': self._chain_id()
        })

        signed_tx = self.signer.sign_transaction(transaction)
        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    def deploy(self, artifact: ContractArtifact, *constructor_args) -> DeploymentResult:
        """
        Deploy a contract and wait for it to be mined

        Args:
            artifact: Compiled contract
            *constructor_args: Constructor arguments

        Returns:
            DeploymentResult
        """
        name = artifact.contract_name
        tx_hash: Optional[str] = None

        logger.info(f"Deploying {name} to {self.network.name}...")

        try:
            factory = self.get_contract_factory(artifact)
            constructor = factory.constructor(*constructor_args)

            if isinstance(self.signer, str):
                raw_hash = constructor.transact({'from': self.deployer_address})
            else:
                raw_hash = self._send_signed(constructor)

            tx_hash = Web3.to_hex(raw_hash)
            logger.info(f"Transaction sent: {tx_hash}")
            logger.info("Waiting for confirmation...")

            receipt = self.w3.eth.wait_for_transaction_receipt(
                raw_hash,
                timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            raise DeploymentError(
                f"{name} deployment not confirmed within {self.confirmation_timeout}s",
                transaction_hash=tx_hash
            ) from e
        except Exception as e:
            raise DeploymentError(f"{name} deployment failed: {e}", transaction_hash=tx_hash) from e

        if receipt['status'] != 1:
            raise DeploymentError(f"{name} deployment reverted", transaction_hash=tx_hash)

        address = receipt.get('contractAddress')
        if not address:
            raise DeploymentError(
                f"{name} deployment receipt has no contract address",
                transaction_hash=tx_hash
            )

        result = DeploymentResult(
            contract_name=name,
            address=address,
            transaction_hash=tx_hash,
            gas_used=receipt['gasUsed'],
            block_number=receipt['blockNumber'],
            network=self.network.name
        )

        logger.debug(f"Gas used: {result.gas_used}, block {result.block_number}")
        return result
