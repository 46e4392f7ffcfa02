"""
Contract Verification Script
Publishes a deployed contract's source on the network's block explorer
"""

import sys
import asyncio
import argparse
from loguru import logger

from deployer.compiler import SolidityCompiler
from deployer.config import load_config
from deployer.deployments import load_deployment
from deployer.errors import ConfigurationError
from deployer.explorer import ExplorerClient, encode_constructor_args
from deployer.log_setup import setup_logging

DEFAULT_CONTRACT = "ParkPics"


async def verify_contract(config, network_name=None, contract_name=DEFAULT_CONTRACT,
                          address=None, client=None) -> bool:
    """
    Verify a recorded (or explicitly addressed) deployment

    Args:
        config: Loaded deployment configuration
        network_name: Network the contract lives on
        contract_name: Contract name
        address: Contract address (None = read deployments/<network>/<Name>.json)
        client: ExplorerClient override

    Returns:
        True when verified
    """
    network = config.get_network(network_name)

    constructor_args = []
    if address is None:
        record = load_deployment(network.name, contract_name)
        address = record['address']
        constructor_args = record.get('constructor_args', [])

    if client is None:
        if not network.explorer_api_url:
            raise ConfigurationError(f"Network '{network.name}' has no explorer_api_url")
        client = ExplorerClient(
            network.explorer_api_url,
            config.get_explorer_api_key(),
            chain_id=network.chain_id
        )

    compiler = SolidityCompiler(config.solidity)
    artifact = compiler.compile(contract_name)

    logger.info(f"Verifying {contract_name} at {address} on {network.name}...")

    guid = await client.submit_verification(
        address=address,
        contract_name=contract_name,
        source_name=artifact.source_name,
        standard_input=compiler.standard_input(contract_name),
        compiler_version=compiler.long_version(),
        constructor_arguments=encode_constructor_args(
            artifact.constructor_inputs,
            constructor_args
        )
    )

    if guid is None:
        return True

    return await client.wait_for_verification(guid)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Verify a deployed contract on the block explorer")
    parser.add_argument('--network', help="network name from the config file")
    parser.add_argument('--contract', default=DEFAULT_CONTRACT, help="contract name")
    parser.add_argument('--address', help="contract address (default: recorded deployment)")
    parser.add_argument('--config', help="path to deploy_config.json")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        config = load_config(args.config)
        asyncio.run(verify_contract(
            config,
            network_name=args.network,
            contract_name=args.contract,
            address=args.address
        ))
    except Exception:
        logger.exception(f"{args.contract} verification failed")
        return 1

    logger.success(f"✅ {args.contract} verified")
    return 0


if __name__ == "__main__":
    sys.exit(main())
