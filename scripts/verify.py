"""
Contract verification.

Checks that a deployed application runs the programs in build/ and was
created with the expected arguments. Program bytes come from algod, the
creation transaction from the indexer.
"""

import base64
import logging
from pathlib import Path

from algosdk.error import AlgodHTTPError, IndexerHTTPError
from algosdk.v2client import algod, indexer

from scripts.deployments import BUILD_DIR, compile_program, encode_method_args, get_artifact
from scripts.errors import VerificationFailure

logger = logging.getLogger(__name__)


def get_indexer_client(settings: dict, api_key: str) -> indexer.IndexerClient:
    return indexer.IndexerClient(api_key, settings["indexer_server"])


def find_creation_txn(indexer_client: indexer.IndexerClient, app_id: int) -> dict:
    response = indexer_client.search_transactions(application_id=app_id, txn_type="appl")
    for txn in response.get("transactions", []):
        if txn.get("created-application-index") == app_id:
            return txn
    raise VerificationFailure(f"No creation transaction found for app {app_id}")


def verify(
    app_id: int,
    args: list,
    *,
    contract_name: str,
    algod_client: algod.AlgodClient,
    indexer_client: indexer.IndexerClient,
    build_dir: Path = BUILD_DIR,
) -> None:
    """
    Verify a deployed application against the local build.

    Args:
        app_id: Deployed application ID
        args: Create method arguments used for the deployment
        contract_name: Contract name (key of ARTIFACTS)

    Raises:
        VerificationFailure: Programs or create arguments differ, or the
            application could not be looked up
    """
    logger.info("Verifying %s at app %d...", contract_name, app_id)

    artifact = get_artifact(contract_name)
    approval_source, clear_source = artifact.read_teal(build_dir)
    expected_args, expected_foreign_apps = encode_method_args(artifact.create_method, args)

    try:
        params = algod_client.application_info(app_id)["params"]
        approval_program = compile_program(algod_client, approval_source)
        clear_program = compile_program(algod_client, clear_source)
        creation = find_creation_txn(indexer_client, app_id)
    except (AlgodHTTPError, IndexerHTTPError) as e:
        raise VerificationFailure(f"Could not look up app {app_id}: {e}") from e

    if base64.b64decode(params["approval-program"]) != approval_program:
        raise VerificationFailure(f"Approval program of app {app_id} does not match {contract_name}")
    if base64.b64decode(params["clear-state-program"]) != clear_program:
        raise VerificationFailure(f"Clear program of app {app_id} does not match {contract_name}")

    app_call = creation.get("application-transaction", {})
    actual_args = [base64.b64decode(arg) for arg in app_call.get("application-args", [])]
    actual_foreign_apps = app_call.get("foreign-apps", [])
    if actual_args != expected_args or actual_foreign_apps != expected_foreign_apps:
        raise VerificationFailure(f"App {app_id} was created with different arguments")

    logger.info("Verified %s at app %d", contract_name, app_id)
