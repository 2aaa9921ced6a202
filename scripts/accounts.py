"""
Named accounts for deployments and scripts.

The deployer comes from DEPLOYER_MNEMONIC. On a development chain without a
mnemonic, accounts are taken from LocalNet's KMD default wallet, which
AlgoKit pre-funds.

Environment variables:
- DEPLOYER_MNEMONIC: 25-word mnemonic for the deployer account
- KMD_SERVER / KMD_TOKEN: LocalNet KMD connection
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv
from algosdk import account, kmd, mnemonic

from scripts.errors import ConfigurationError

load_dotenv()

LOCALNET_WALLET = "unencrypted-default-wallet"


@dataclass(frozen=True)
class NamedAccount:
    address: str
    private_key: str = field(repr=False)


def account_from_mnemonic(phrase: str) -> NamedAccount:
    private_key = mnemonic.to_private_key(phrase)
    return NamedAccount(account.address_from_private_key(private_key), private_key)


def get_kmd_client() -> kmd.KMDClient:
    """Create KMD client for LocalNet."""
    server = os.getenv("KMD_SERVER", "http://localhost:4002")
    token = os.getenv("KMD_TOKEN", "a" * 64)
    return kmd.KMDClient(token, server)


def get_localnet_accounts(
    kmd_client: kmd.KMDClient = None,
    wallet_name: str = LOCALNET_WALLET,
    password: str = "",
) -> list[NamedAccount]:
    """
    Export every account in a LocalNet KMD wallet.

    Args:
        kmd_client: KMD client (default from environment)
        wallet_name: Wallet to read
        password: Wallet password

    Returns:
        Accounts in KMD key order
    """
    if kmd_client is None:
        kmd_client = get_kmd_client()

    wallet_id = None
    for wallet in kmd_client.list_wallets():
        if wallet["name"] == wallet_name:
            wallet_id = wallet["id"]
            break
    if wallet_id is None:
        raise ConfigurationError(f"KMD wallet '{wallet_name}' not found")

    wallet_handle = kmd_client.init_wallet_handle(wallet_id, password)
    try:
        return [
            NamedAccount(address, kmd_client.export_key(wallet_handle, password, address))
            for address in kmd_client.list_keys(wallet_handle)
        ]
    finally:
        kmd_client.release_wallet_handle(wallet_handle)


def get_named_accounts(network, kmd_client: kmd.KMDClient = None) -> dict[str, NamedAccount]:
    """
    Resolve the named accounts for a network.

    Returns:
        Mapping with a "deployer" entry

    Raises:
        ConfigurationError: No mnemonic set outside a development chain
    """
    phrase = os.getenv("DEPLOYER_MNEMONIC")
    if phrase:
        return {"deployer": account_from_mnemonic(phrase)}

    if not network.is_development:
        raise ConfigurationError(f"DEPLOYER_MNEMONIC not set for {network.name}")

    accounts = get_localnet_accounts(kmd_client)
    if not accounts:
        raise ConfigurationError(f"KMD wallet '{LOCALNET_WALLET}' has no accounts")
    return {"deployer": accounts[0]}
