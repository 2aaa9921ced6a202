"""
Deployment Script for FundMe

Runs the deploy steps whose tags match --tags, in order:
  00 deploy_mocks     (all, mocks)   MockV3Aggregator on development chains
  01 deploy_fund_me   (all, fundme)  FundMe wired to the price feed

Run with: python -m scripts.deploy --network localnet --tags all

Environment variables:
- NETWORK: localnet | testnet | mainnet (default for --network)
- ALGOD_SERVER / ALGOD_TOKEN / INDEXER_SERVER: node overrides
- DEPLOYER_MNEMONIC: 25-word mnemonic for deployer account
- VERIFIER_API_KEY: enables verification outside development chains
"""

import argparse
import logging
import os
from functools import partial

from dotenv import load_dotenv

from scripts import deploy_fund_me, deploy_mocks
from scripts.accounts import get_named_accounts
from scripts.deployments import RECORDS_DIR, DeployEnvironment, Deployments, get_algod_client
from scripts.errors import ConfigurationError
from scripts.helper_config import get_network_settings, select_network
from scripts.verify import get_indexer_client, verify

load_dotenv()

STEPS = (deploy_mocks, deploy_fund_me)


def run_steps(env: DeployEnvironment, tags, steps=STEPS) -> list:
    """
    Run every step that has at least one of the given tags.

    Returns:
        Names of the steps that ran
    """
    tags = set(tags)
    ran = []
    for step in steps:
        if tags & set(step.TAGS):
            step.deploy(env)
            ran.append(step.__name__.rsplit(".", 1)[-1])
    return ran


def build_environment(network_name: str, reset: bool = False) -> DeployEnvironment:
    settings = get_network_settings(network_name)
    network = select_network(settings["chain_id"])
    client = get_algod_client(settings)

    deployments = Deployments(client, network_name, records_dir=RECORDS_DIR)
    if reset and deployments.records_path.exists():
        deployments.records_path.unlink()
        deployments = Deployments(client, network_name, records_dir=RECORDS_DIR)

    verifier = None
    api_key = os.getenv("VERIFIER_API_KEY")
    if api_key:
        verifier = partial(
            verify,
            algod_client=client,
            indexer_client=get_indexer_client(settings, api_key),
        )

    return DeployEnvironment(
        network=network,
        deployments=deployments,
        named_accounts=get_named_accounts(network),
        verify=verifier,
    )


def main():
    parser = argparse.ArgumentParser(description="Deploy the FundMe contracts")
    parser.add_argument(
        "--network",
        default=os.getenv("NETWORK", "localnet"),
        help="Network to deploy to (localnet, testnet, mainnet)",
    )
    parser.add_argument(
        "--tags",
        default="all",
        help="Comma-separated deploy step tags",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Forget recorded deployments and deploy everything again",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("=" * 60)
    print("FundMe - Smart Contract Deployment")
    print("=" * 60)

    env = build_environment(args.network, reset=args.reset)
    print(f"\nNetwork: {env.network.name} (chain ID {env.network.chain_id})")
    print(f"Deployer: {env.named_accounts['deployer'].address}\n")

    ran = run_steps(env, [tag.strip() for tag in args.tags.split(",") if tag.strip()])
    if not ran:
        print(f"No deploy steps match tags: {args.tags}")
        return

    print("\n" + "=" * 60)
    print("Deployment Summary")
    print("=" * 60)
    for name in ("MockV3Aggregator", "FundMe"):
        try:
            deployment = env.deployments.get(name)
        except ConfigurationError:
            continue
        print(f"{name}: App ID {deployment.app_id} ({deployment.address})")

    print(f"\nDeployment records: {env.deployments.records_path}")


if __name__ == "__main__":
    main()
