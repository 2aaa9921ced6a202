"""
Deploy step 00: mock price feed.

A LocalNet is reset between sessions, so no real price feed lives there.
On development chains this step deploys MockV3Aggregator for
deploy_fund_me to pick up; on any other network it does nothing.
"""

import logging

from scripts.deployments import DeployEnvironment
from scripts.helper_config import DECIMALS, INITIAL_PRICE, LocalSimulator

logger = logging.getLogger(__name__)

TAGS = ("all", "mocks")


def deploy(env: DeployEnvironment) -> None:
    if not isinstance(env.network, LocalSimulator):
        return

    logger.info("Local network detected! Deploying mocks...")
    env.deployments.deploy(
        "MockV3Aggregator",
        from_account=env.named_accounts["deployer"],
        args=[DECIMALS, INITIAL_PRICE],
    )
    logger.info("Mocks deployed!")
    logger.info("-" * 29)
