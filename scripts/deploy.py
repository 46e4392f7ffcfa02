"""
Smart Contract Deployment Script
Deploys the ParkPics contract to the selected network and prints its address
"""

import sys
import json
import argparse
from loguru import logger

from deployer.artifacts import load_artifact
from deployer.compiler import SolidityCompiler
from deployer.config import DeployConfig, load_config
from deployer.contract_deployer import ContractDeployer, DeploymentResult
from deployer.deployments import save_deployment
from deployer.log_setup import setup_logging
from deployer.network import connect, load_signer

DEFAULT_CONTRACT = "ParkPics"


def run_deployment(
    config: DeployConfig,
    network_name: str = None,
    contract_name: str = DEFAULT_CONTRACT,
    compile_first: bool = False,
    constructor_args: tuple = ()
) -> DeploymentResult:
    """
    Compile (optionally), connect, deploy and record one contract

    Args:
        config: Loaded deployment configuration
        network_name: Network to deploy to (None = configured default)
        contract_name: Contract to deploy
        compile_first: Rebuild the artifact with the configured solc first
        constructor_args: Constructor arguments

    Returns:
        DeploymentResult
    """
    network = config.get_network(network_name)

    if compile_first:
        artifact = SolidityCompiler(config.solidity).compile(contract_name)
    else:
        artifact = load_artifact(contract_name)

    w3 = connect(network)
    signer = load_signer(network, w3)

    deployer = ContractDeployer(
        w3,
        signer,
        network,
        confirmation_timeout=config.confirmation_timeout,
        gas_buffer=config.gas_buffer
    )

    result = deployer.deploy(artifact, *constructor_args)

    # the contract is live at this point, a lost record must not fail the run
    try:
        save_deployment(result, artifact, constructor_args=constructor_args)
    except OSError as e:
        logger.warning(f"Could not record deployment of {result.address}: {e}")

    return result


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Deploy a compiled contract")
    parser.add_argument('--network', help="network name from the config file")
    parser.add_argument('--contract', default=DEFAULT_CONTRACT, help="contract name")
    parser.add_argument('--config', help="path to deploy_config.json")
    parser.add_argument('--compile', action='store_true', help="compile before deploying")
    parser.add_argument(
        '--constructor-args',
        default='[]',
        help="constructor arguments as a JSON array"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Deploy and map the outcome to a process exit code"""
    args = parse_args(argv)
    setup_logging(log_file="data/logs/deploy.log")

    try:
        constructor_args = json.loads(args.constructor_args)
        if not isinstance(constructor_args, list):
            raise ValueError("--constructor-args must be a JSON array")

        config = load_config(args.config)
        result = run_deployment(
            config,
            network_name=args.network,
            contract_name=args.contract,
            compile_first=args.compile,
            constructor_args=tuple(constructor_args)
        )
    except Exception:
        logger.exception(f"{args.contract} deployment failed")
        return 1

    logger.info(f"{result.contract_name} deployed to: {result.address}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
