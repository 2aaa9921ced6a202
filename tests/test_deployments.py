"""
Tests for deployment bookkeeping

Tests cover:
- ABI encoding of create arguments
- Application creation and records
- Reuse of unchanged deployments
- Confirmation waiting
"""

import json

import pytest
from algosdk import abi, logic

from fakes import FakeAlgodClient
from scripts.deployments import (
    Deployments,
    encode_method_args,
    get_artifact,
)
from scripts.errors import ConfigurationError


class TestEncodeMethodArgs:
    def test_value_arguments(self):
        """Test that plain ABI values are encoded after the selector."""
        app_args, foreign_apps = encode_method_args("create(uint8,uint64)void", [8, 200000000000])

        assert app_args == [
            abi.Method.from_signature("create(uint8,uint64)void").get_selector(),
            b"\x08",
            (200000000000).to_bytes(8, "big"),
        ]
        assert foreign_apps == []

    def test_application_reference(self):
        """Test that an application argument is passed by foreign app index."""
        app_args, foreign_apps = encode_method_args("create(application)void", [1234])

        assert app_args[1:] == [b"\x01"]
        assert foreign_apps == [1234]

    def test_wrong_argument_count(self):
        with pytest.raises(ValueError, match="takes 1 arguments, got 2"):
            encode_method_args("create(application)void", [1, 2])


class TestDeployments:
    """Test suite for Deployments."""

    @pytest.fixture
    def deployments(self, algod_client: FakeAlgodClient, build_dir) -> Deployments:
        return Deployments(algod_client, "localnet", build_dir=build_dir)

    def test_deploy_creates_application(self, deployments: Deployments, algod_client, deployer):
        """Test that deploy sends an app create with the encoded create call."""
        # Act
        deployment = deployments.deploy("MockV3Aggregator", from_account=deployer, args=[8, 200000000000])

        # Assert
        assert deployment.app_id == 1001
        assert deployment.address == logic.get_application_address(1001)
        assert deployment.newly_deployed

        txn = algod_client.sent[0].transaction
        assert txn.sender == deployer.address
        assert txn.app_args == encode_method_args("create(uint8,uint64)void", [8, 200000000000])[0]
        assert txn.global_schema.num_uints == 4
        assert txn.global_schema.num_byte_slices == 0

    def test_deploy_passes_price_feed_as_foreign_app(self, deployments: Deployments, algod_client, deployer):
        deployments.deploy("FundMe", from_account=deployer, args=[4242])

        txn = algod_client.sent[0].transaction
        assert txn.foreign_apps == [4242]
        assert txn.global_schema.num_uints == 2
        assert txn.global_schema.num_byte_slices == 1

    def test_get_returns_deployment(self, deployments: Deployments, deployer):
        deployed = deployments.deploy("MockV3Aggregator", from_account=deployer, args=[8, 1])

        assert deployments.get("MockV3Aggregator").app_id == deployed.app_id

    def test_get_unknown_contract(self, deployments: Deployments):
        with pytest.raises(ConfigurationError, match="No deployment found for FundMe on localnet"):
            deployments.get("FundMe")

    def test_unchanged_deployment_is_reused(self, deployments: Deployments, algod_client, deployer):
        """Test that the same TEAL and args do not create a second app."""
        # Arrange
        first = deployments.deploy("FundMe", from_account=deployer, args=[4242])

        # Act
        second = deployments.deploy("FundMe", from_account=deployer, args=[4242])

        # Assert
        assert second.app_id == first.app_id
        assert not second.newly_deployed
        assert len(algod_client.sent) == 1

    def test_changed_args_redeploy(self, deployments: Deployments, algod_client, deployer):
        first = deployments.deploy("FundMe", from_account=deployer, args=[4242])
        second = deployments.deploy("FundMe", from_account=deployer, args=[4243])

        assert second.app_id != first.app_id
        assert second.newly_deployed
        assert len(algod_client.sent) == 2

    def test_changed_teal_redeploys(self, deployments: Deployments, algod_client, deployer, build_dir):
        """Test that a rebuilt contract is deployed again."""
        first = deployments.deploy("FundMe", from_account=deployer, args=[4242])
        (build_dir / "FundMe.approval.teal").write_text("#pragma version 10\nint 0\nreturn\n")

        second = deployments.deploy("FundMe", from_account=deployer, args=[4242])

        assert second.app_id != first.app_id

    def test_records_persist(self, algod_client, build_dir, tmp_path, deployer):
        """Test that a named network's records survive a new Deployments."""
        # Arrange
        records_dir = tmp_path / "deployments"
        deployments = Deployments(algod_client, "testnet", build_dir=build_dir, records_dir=records_dir)
        deployed = deployments.deploy("FundMe", from_account=deployer, args=[4242])

        # Act
        reloaded = Deployments(algod_client, "testnet", build_dir=build_dir, records_dir=records_dir)

        # Assert
        assert reloaded.get("FundMe").app_id == deployed.app_id
        with open(records_dir / "testnet.json") as f:
            assert json.load(f)["FundMe"]["args"] == [4242]

        again = reloaded.deploy("FundMe", from_account=deployer, args=[4242])
        assert not again.newly_deployed
        assert len(algod_client.sent) == 1

    def test_record_of_vanished_app_redeploys(self, algod_client, build_dir, tmp_path, deployer):
        """Test that a recorded app missing after a LocalNet reset is created again."""
        # Arrange
        records_dir = tmp_path / "deployments"
        deployments = Deployments(algod_client, "localnet", build_dir=build_dir, records_dir=records_dir)
        first = deployments.deploy("MockV3Aggregator", from_account=deployer, args=[8, 200000000000])
        del algod_client.applications[first.app_id]

        # Act
        reloaded = Deployments(algod_client, "localnet", build_dir=build_dir, records_dir=records_dir)
        second = reloaded.deploy("MockV3Aggregator", from_account=deployer, args=[8, 200000000000])

        # Assert
        assert second.newly_deployed
        assert second.app_id != first.app_id
        assert len(algod_client.sent) == 2
        assert reloaded.get("MockV3Aggregator").app_id == second.app_id

    def test_waits_for_extra_confirmations(self, deployments: Deployments, algod_client, deployer):
        deployments.deploy("FundMe", from_account=deployer, args=[4242], wait_confirmations=3)

        assert algod_client.waited_for_rounds == [algod_client.current_round + 2]

    def test_missing_build_output(self, algod_client, tmp_path, deployer):
        deployments = Deployments(algod_client, "localnet", build_dir=tmp_path / "empty")

        with pytest.raises(ConfigurationError, match="No TEAL for FundMe"):
            deployments.deploy("FundMe", from_account=deployer, args=[4242])

    def test_unknown_contract(self, deployments: Deployments, deployer):
        with pytest.raises(ConfigurationError, match="Unknown contract 'FundYou'"):
            deployments.deploy("FundYou", from_account=deployer)

    def test_fund_app_account(self, deployments: Deployments, algod_client, deployer):
        """Test that the application account receives a payment."""
        deployment = deployments.deploy("FundMe", from_account=deployer, args=[4242])

        deployments.fund_app_account(deployment, from_account=deployer, amount=100_000)

        payment = algod_client.sent[-1].transaction
        assert payment.receiver == deployment.address
        assert payment.amt == 100_000

    def test_artifact_lookup(self):
        assert get_artifact("FundMe").create_method == "create(application)void"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
