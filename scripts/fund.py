"""
Fund the deployed FundMe contract.

Usage:
    python -m scripts.fund --amount 1
    python -m scripts.fund --amount 0.5 --network testnet
"""

import argparse
import logging
import os

from dotenv import load_dotenv

from scripts.accounts import get_named_accounts
from scripts.deployments import RECORDS_DIR, Deployments, get_algod_client
from scripts.fund_me_client import FundMeClient
from scripts.helper_config import get_network_settings, select_network

load_dotenv()


def main():
    parser = argparse.ArgumentParser(description="Fund the FundMe contract")
    parser.add_argument(
        "--amount",
        type=float,
        default=1,
        help="Amount in ALGO to fund",
    )
    parser.add_argument(
        "--network",
        default=os.getenv("NETWORK", "localnet"),
        help="Network the contract is deployed on",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    settings = get_network_settings(args.network)
    network = select_network(settings["chain_id"])
    client = get_algod_client(settings)
    deployer = get_named_accounts(network)["deployer"]

    fund_me = Deployments(client, args.network, records_dir=RECORDS_DIR).get("FundMe")
    fund_me_client = FundMeClient(client, fund_me.app_id)

    print(f"Got contract FundMe at app {fund_me.app_id}")
    print("Funding contract...")
    fund_me_client.fund(deployer, int(args.amount * 1_000_000))
    print("Funded!")


if __name__ == "__main__":
    main()
