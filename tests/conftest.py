"""
Shared fixtures: a throwaway project directory with config and artifact
"""

import json
import pytest
from unittest.mock import MagicMock

from deployer.artifacts import ContractArtifact, write_artifact
from deployer.config import load_config

# creation code that returns a one-byte (STOP) runtime
TINY_BYTECODE = "0x6001600c60003960016000f300"

DEPLOYED_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
NODE_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def config_data():
    """Configuration mirroring config/deploy_config.json"""
    return {
        'solidity': '0.8.2',
        'default_network': 'hardhat',
        'networks': {
            'hardhat': {
                'url': 'http://127.0.0.1:8545',
                'accounts': [],
                'chain_id': 31337
            },
            'mumbai': {
                'url': 'https://rpc-mumbai.maticvigil.com',
                'accounts': ['${PRIVATE_KEY}'],
                'chain_id': 80001,
                'poa': True,
                'explorer_api_url': 'https://api.etherscan.io/v2/api'
            },
            'polygon': {
                'url': 'https://polygon-mainnet.infura.io/v3/${INFURA_API_KEY}',
                'accounts': ['${PRIVATE_KEY}'],
                'chain_id': 137,
                'poa': True
            },
            'legacy': {
                'url': 'https://example.org/rpc',
                'accounts': ['<ADD WALLET PRIVATE KEY>']
            }
        },
        'etherscan': {'api_key': '${ETHERSCAN_API_KEY}'},
        'deployment': {'confirmation_timeout': 30, 'gas_buffer': 1.5}
    }


@pytest.fixture
def project_dir(tmp_path, monkeypatch, config_data):
    """Temporary project root with config/deploy_config.json, used as cwd"""
    for var in ('PRIVATE_KEY', 'INFURA_API_KEY', 'ETHERSCAN_API_KEY',
                'DEPLOY_NETWORK', 'DEPLOY_CONFIG_PATH'):
        monkeypatch.delenv(var, raising=False)

    (tmp_path / 'config').mkdir()
    (tmp_path / 'config' / 'deploy_config.json').write_text(json.dumps(config_data))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config(project_dir):
    return load_config()


@pytest.fixture
def artifact(project_dir):
    """ParkPics artifact written under artifacts/"""
    artifact = ContractArtifact(
        contract_name='ParkPics',
        abi=[],
        bytecode=TINY_BYTECODE,
        source_name='contracts/ParkPics.sol'
    )
    write_artifact(artifact)
    return artifact


@pytest.fixture
def w3():
    """Mock Web3 connected to a node that mines everything"""
    w3 = MagicMock()
    w3.eth.accounts = [NODE_ACCOUNT]
    w3.eth.gas_price = 30_000_000_000
    w3.eth.chain_id = 31337

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.transact.return_value = b'\x12' * 32
    w3.eth.send_raw_transaction.return_value = b'\x34' * 32
    constructor.estimate_gas.return_value = 100_000
    constructor.build_transaction.side_effect = lambda tx: dict(tx, data=TINY_BYTECODE)

    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': DEPLOYED_ADDRESS,
        'gasUsed': 53_000,
        'blockNumber': 1
    }
    return w3
