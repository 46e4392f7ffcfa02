"""
Deployment Setup Check
Verifies configuration, credentials and connectivity before deploying
"""

import sys
import argparse
from loguru import logger

from deployer.artifacts import load_artifact
from deployer.config import load_config
from deployer.log_setup import setup_logging
from deployer.network import connect, load_signer, signer_address

MIN_BALANCE_ETHER = 0.01

# later checks need what these produce
BLOCKING_CHECKS = ("Configuration File", "Network Credentials", "RPC Connection")


class SetupChecker:
    """Runs the pre-deployment checks for one network"""

    def __init__(self, config_path=None, network_name=None, contract_name="ParkPics"):
        self.config_path = config_path
        self.network_name = network_name
        self.contract_name = contract_name

        self.config = None
        self.network = None
        self.w3 = None

    def check_config_file(self) -> bool:
        logger.info("Checking configuration file...")
        self.config = load_config(self.config_path)
        logger.success(f"  ✓ {self.config.path} (solc {self.config.solidity})")
        return True

    def check_network_credentials(self) -> bool:
        logger.info("Checking network credentials...")
        self.network = self.config.get_network(self.network_name)
        logger.success(
            f"  ✓ {self.network.name}: {len(self.network.accounts)} signing key(s) resolved"
        )
        return True

    def check_rpc_connection(self) -> bool:
        logger.info("Checking RPC connection...")
        self.w3 = connect(self.network)
        logger.success(f"  ✓ {self.network.name}: Connected (Block: {self.w3.eth.block_number})")

        chain_id = self.w3.eth.chain_id
        if self.network.chain_id is not None and chain_id != self.network.chain_id:
            logger.error(
                f"  ✗ Node reports chain id {chain_id}, config expects {self.network.chain_id}"
            )
            return False

        return True

    def check_signer_balance(self) -> bool:
        logger.info("Checking deployer balance...")
        address = signer_address(load_signer(self.network, self.w3))

        balance = self.w3.from_wei(self.w3.eth.get_balance(address), 'ether')
        logger.info(f"  {address}: {balance:.4f}")

        if balance < MIN_BALANCE_ETHER:
            logger.warning(f"  ⚠ Balance low (need at least {MIN_BALANCE_ETHER})")
            return False

        logger.success("  ✓ Balance sufficient")
        return True

    def check_artifact(self) -> bool:
        logger.info("Checking contract artifact...")
        load_artifact(self.contract_name)
        logger.success(f"  ✓ {self.contract_name} artifact present")
        return True

    def run(self) -> int:
        """
        Run every check in order; a check that raises counts as failed

        Returns:
            0 if all checks passed, 1 otherwise
        """
        checks = [
            ("Configuration File", self.check_config_file),
            ("Network Credentials", self.check_network_credentials),
            ("RPC Connection", self.check_rpc_connection),
            ("Deployer Balance", self.check_signer_balance),
            ("Contract Artifact", self.check_artifact)
        ]

        results = []

        for name, check_func in checks:
            try:
                results.append((name, check_func()))
            except Exception as e:
                logger.error(f"  ✗ {name}: {e}")
                results.append((name, False))
                if name in BLOCKING_CHECKS:
                    break

        logger.info("")
        logger.info("=" * 70)
        logger.info("Summary")
        logger.info("=" * 70)

        for name, result in results:
            status = "✓ PASS" if result else "✗ FAIL"
            logger.info(f"  {status}: {name}")

        passed = sum(1 for _, result in results if result)
        logger.info(f"Total: {passed}/{len(checks)} checks passed")

        if passed == len(checks):
            logger.success("✅ Ready to deploy: python scripts/deploy.py")
            return 0

        logger.error("❌ Not ready - fix issues above")
        return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check deployment prerequisites")
    parser.add_argument('--network', help="network name from the config file")
    parser.add_argument('--contract', default="ParkPics", help="contract name")
    parser.add_argument('--config', help="path to deploy_config.json")
    args = parser.parse_args(argv)

    setup_logging()

    return SetupChecker(args.config, args.network, args.contract).run()


if __name__ == "__main__":
    sys.exit(main())
