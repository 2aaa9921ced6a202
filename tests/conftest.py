import pytest

from fakes import APPROVAL_TEAL, CLEAR_TEAL, FakeAlgodClient, make_account
from scripts.accounts import NamedAccount


@pytest.fixture
def deployer() -> NamedAccount:
    return make_account()


@pytest.fixture
def algod_client() -> FakeAlgodClient:
    return FakeAlgodClient()


@pytest.fixture
def build_dir(tmp_path):
    """build/ with TEAL for every contract."""
    path = tmp_path / "build"
    path.mkdir()
    for name in ("MockV3Aggregator", "FundMe"):
        (path / f"{name}.approval.teal").write_text(APPROVAL_TEAL)
        (path / f"{name}.clear.teal").write_text(CLEAR_TEAL)
    return path
