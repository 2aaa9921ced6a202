"""
Deployment bookkeeping for the compiled FundMe contracts.

Deployments compiles the TEAL that scripts/build.py leaves in build/, creates
the application with its ABI create method, and records the result per
network. A contract whose TEAL and create arguments are unchanged since the
recorded deployment, and whose application still exists, is reused instead
of being created again.
"""

import base64
import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional

from algosdk import abi, logic, transaction
from algosdk.error import AlgodHTTPError
from algosdk.v2client import algod

from scripts.accounts import NamedAccount
from scripts.errors import ConfigurationError

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent
BUILD_DIR = ROOT_DIR / "build"
RECORDS_DIR = ROOT_DIR / "deployments"


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract layout: create method and state schema."""

    name: str
    create_method: str
    global_ints: int
    global_bytes: int
    local_ints: int = 0
    local_bytes: int = 0

    def read_teal(self, build_dir: Path = BUILD_DIR) -> tuple[str, str]:
        """
        Returns:
            Tuple of (approval_source, clear_source)

        Raises:
            ConfigurationError: Contract has not been built
        """
        approval_path = Path(build_dir) / f"{self.name}.approval.teal"
        clear_path = Path(build_dir) / f"{self.name}.clear.teal"
        if not approval_path.exists() or not clear_path.exists():
            raise ConfigurationError(
                f"No TEAL for {self.name} in {build_dir} (run: python -m scripts.build)"
            )
        return approval_path.read_text(), clear_path.read_text()


ARTIFACTS = {
    "MockV3Aggregator": ContractArtifact(
        name="MockV3Aggregator",
        create_method="create(uint8,uint64)void",
        global_ints=4,
        global_bytes=0,
    ),
    "FundMe": ContractArtifact(
        name="FundMe",
        create_method="create(application)void",
        global_ints=2,
        global_bytes=1,
    ),
}

# AVM base minimum balance for an account, in microALGO
APP_ACCOUNT_MIN_BALANCE = 100_000


def get_artifact(name: str) -> ContractArtifact:
    if name not in ARTIFACTS:
        raise ConfigurationError(f"Unknown contract '{name}'")
    return ARTIFACTS[name]


def get_algod_client(settings: dict) -> algod.AlgodClient:
    """Create Algorand client from network settings."""
    return algod.AlgodClient(settings["algod_token"], settings["algod_server"])


def sha256_hex(source: str) -> str:
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def compile_program(client: algod.AlgodClient, source: str) -> bytes:
    """Compile TEAL source code using the Algorand node."""
    response = client.compile(source)
    return base64.b64decode(response["result"])


def encode_method_args(signature: str, args: list) -> tuple[list[bytes], list[int]]:
    """
    ABI-encode a method call as application args.

    Application references go into the foreign apps array and are passed by
    index; index 0 is the called application itself.

    Args:
        signature: ABI method signature, e.g. "create(application)void"
        args: Argument values, in method order

    Returns:
        Tuple of (app_args, foreign_apps)
    """
    method = abi.Method.from_signature(signature)
    if len(args) != len(method.args):
        raise ValueError(
            f"{method.name} takes {len(method.args)} arguments, got {len(args)}"
        )

    app_args = [method.get_selector()]
    foreign_apps = []
    for arg, value in zip(method.args, args):
        if arg.type == abi.ABIReferenceType.APPLICATION:
            foreign_apps.append(value)
            app_args.append(abi.UintType(8).encode(len(foreign_apps)))
        elif isinstance(arg.type, abi.ABIType):
            app_args.append(arg.type.encode(value))
        else:
            raise ValueError(f"Unsupported argument type '{arg.type}' in {signature}")

    return app_args, foreign_apps


@dataclass
class Deployment:
    name: str
    app_id: int
    address: str
    tx_id: Optional[str]
    args: list
    approval_sha256: str
    clear_sha256: str
    newly_deployed: bool = False


class Deployments:
    """
    Deploy and look up contracts on one network.

    Records are kept in memory and, when records_dir is set, in
    records_dir/<network>.json.
    """

    def __init__(
        self,
        client: algod.AlgodClient,
        network_name: str,
        build_dir: Path = BUILD_DIR,
        records_dir: Optional[Path] = None,
    ):
        self.client = client
        self.network_name = network_name
        self.build_dir = Path(build_dir)
        self.records_dir = Path(records_dir) if records_dir else None
        self._records: dict[str, Deployment] = {}
        self._load_records()

    @property
    def records_path(self) -> Optional[Path]:
        if self.records_dir is None:
            return None
        return self.records_dir / f"{self.network_name}.json"

    def _load_records(self) -> None:
        path = self.records_path
        if path is None or not path.exists():
            return
        with open(path) as f:
            for name, record in json.load(f).items():
                self._records[name] = Deployment(**record)

    def _save_records(self) -> None:
        path = self.records_path
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        records = {
            name: {**asdict(record), "newly_deployed": False}
            for name, record in self._records.items()
        }
        with open(path, "w") as f:
            json.dump(records, f, indent=2)

    def get(self, name: str) -> Deployment:
        """
        Look up a contract deployed on this network.

        Raises:
            ConfigurationError: Nothing recorded under name
        """
        if name not in self._records:
            raise ConfigurationError(f"No deployment found for {name} on {self.network_name}")
        return self._records[name]

    def deploy(
        self,
        name: str,
        from_account: NamedAccount,
        args: list = (),
        wait_confirmations: int = 1,
    ) -> Deployment:
        """
        Create an application, or reuse the recorded one if nothing changed.

        Args:
            name: Contract name (key of ARTIFACTS)
            from_account: Creator, becomes Txn.sender of the create call
            args: Create method arguments
            wait_confirmations: Rounds to wait after the confirming round

        Returns:
            Deployment record
        """
        artifact = get_artifact(name)
        approval_source, clear_source = artifact.read_teal(self.build_dir)
        approval_sha256 = sha256_hex(approval_source)
        clear_sha256 = sha256_hex(clear_source)
        args = list(args)

        existing = self._records.get(name)
        if (
            existing is not None
            and existing.approval_sha256 == approval_sha256
            and existing.clear_sha256 == clear_sha256
            and existing.args == args
            and self._exists(existing.app_id)
        ):
            logger.info("reusing \"%s\" at app %d", name, existing.app_id)
            reused = replace(existing, newly_deployed=False)
            self._records[name] = reused
            return reused

        app_args, foreign_apps = encode_method_args(artifact.create_method, args)

        txn = transaction.ApplicationCreateTxn(
            sender=from_account.address,
            sp=self.client.suggested_params(),
            on_complete=transaction.OnComplete.NoOpOC,
            approval_program=compile_program(self.client, approval_source),
            clear_program=compile_program(self.client, clear_source),
            global_schema=transaction.StateSchema(artifact.global_ints, artifact.global_bytes),
            local_schema=transaction.StateSchema(artifact.local_ints, artifact.local_bytes),
            app_args=app_args,
            foreign_apps=foreign_apps or None,
        )

        signed_txn = txn.sign(from_account.private_key)
        tx_id = self.client.send_transaction(signed_txn)
        logger.info("deploying \"%s\" (tx: %s)...", name, tx_id)

        result = self._wait(tx_id, wait_confirmations)
        app_id = result["application-index"]

        deployment = Deployment(
            name=name,
            app_id=app_id,
            address=logic.get_application_address(app_id),
            tx_id=tx_id,
            args=args,
            approval_sha256=approval_sha256,
            clear_sha256=clear_sha256,
            newly_deployed=True,
        )
        self._records[name] = deployment
        self._save_records()

        logger.info("deployed \"%s\" at app %d (%s)", name, app_id, deployment.address)
        return deployment

    def fund_app_account(
        self,
        deployment: Deployment,
        from_account: NamedAccount,
        amount: int = APP_ACCOUNT_MIN_BALANCE,
        wait_confirmations: int = 1,
    ) -> str:
        """
        Send ALGO to an application account.

        Returns:
            Transaction ID
        """
        txn = transaction.PaymentTxn(
            sender=from_account.address,
            sp=self.client.suggested_params(),
            receiver=deployment.address,
            amt=amount,
        )
        tx_id = self.client.send_transaction(txn.sign(from_account.private_key))
        self._wait(tx_id, wait_confirmations)

        logger.info("funded \"%s\" account with %d microALGO", deployment.name, amount)
        return tx_id

    def _exists(self, app_id: int) -> bool:
        """Whether a recorded application is still on chain (LocalNet resets drop it)."""
        try:
            self.client.application_info(app_id)
        except AlgodHTTPError as e:
            if e.code == 404:
                logger.info("app %d no longer exists, deploying again", app_id)
                return False
            raise
        return True

    def _wait(self, tx_id: str, wait_confirmations: int) -> dict:
        result = transaction.wait_for_confirmation(self.client, tx_id, 4)
        if wait_confirmations > 1:
            self.client.status_after_block(result["confirmed-round"] + wait_confirmations - 1)
        return result


@dataclass
class DeployEnvironment:
    """Everything a deploy step needs."""

    network: object
    deployments: Deployments
    named_accounts: dict = field(default_factory=dict)
    verify: Optional[Callable] = None
