"""
Deploy step 01: FundMe.

The price feed is the mock from step 00 on a development chain and the
NETWORK_CONFIG entry everywhere else. Outside development chains the
deployment is verified when VERIFIER_API_KEY is set; a failed verification
is logged and does not undo the deployment.
"""

import logging
import os

from scripts.deployments import APP_ACCOUNT_MIN_BALANCE, DeployEnvironment, Deployment
from scripts.errors import VerificationFailure
from scripts.helper_config import LocalSimulator

logger = logging.getLogger(__name__)

TAGS = ("all", "fundme")


def resolve_price_feed(env: DeployEnvironment) -> int:
    if isinstance(env.network, LocalSimulator):
        return env.deployments.get("MockV3Aggregator").app_id
    return env.network.entry.algo_usd_price_feed


def deploy(env: DeployEnvironment) -> Deployment:
    deployer = env.named_accounts["deployer"]
    price_feed = resolve_price_feed(env)

    fund_me = env.deployments.deploy(
        "FundMe",
        from_account=deployer,
        args=[price_feed],
        wait_confirmations=env.network.block_confirmations,
    )

    # Application accounts hold no ALGO until someone pays them the base
    # minimum balance; funders pay for the boxes they create
    if fund_me.newly_deployed:
        env.deployments.fund_app_account(
            fund_me,
            from_account=deployer,
            amount=APP_ACCOUNT_MIN_BALANCE,
            wait_confirmations=env.network.block_confirmations,
        )

    logger.info("-" * 21)

    if not env.network.is_development and os.getenv("VERIFIER_API_KEY"):
        try:
            env.verify(fund_me.app_id, [price_feed], contract_name="FundMe")
        except VerificationFailure as e:
            logger.warning("Verification of FundMe at app %d failed: %s", fund_me.app_id, e)

    return fund_me
