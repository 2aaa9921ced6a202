"""
Off-chain client for a deployed FundMe application.

Reads state straight from algod (global state and boxes) and submits fund
and withdraw calls. The contract's assertions only surface as a failed
transaction, so the client checks the same preconditions first and raises
InsufficientFundingError, Unauthorized or IndexOutOfRange instead.
"""

import base64
import copy
import logging

from algosdk import abi, encoding, logic, transaction
from algosdk.error import AlgodHTTPError
from algosdk.v2client import algod

from contracts.fund_me.constants import (
    AMOUNT_BOX_MIN_BALANCE,
    FUNDER_BOX_MIN_BALANCE,
    MINIMUM_USD,
    NATIVE_DECIMALS,
)
from scripts.accounts import NamedAccount
from scripts.errors import FundMeError, IndexOutOfRange, InsufficientFundingError, Unauthorized

logger = logging.getLogger(__name__)

FUND = abi.Method.from_signature("fund(pay,pay)void")
WITHDRAW = abi.Method.from_signature("withdraw()void")
GET_FUNDERS_COUNT = abi.Method.from_signature("get_funders_count()uint64")

MAX_REFERENCES = 8
MAX_GROUP_SIZE = 16


def funder_box_name(index: int) -> bytes:
    return b"f" + index.to_bytes(8, "big")


def amount_box_name(address: str) -> bytes:
    return b"a" + encoding.decode_address(address)


def read_global_state(client: algod.AlgodClient, app_id: int) -> dict:
    """Read global state of an application."""
    app_info = client.application_info(app_id)

    state = {}
    for item in app_info.get("params", {}).get("global-state", []):
        key = base64.b64decode(item["key"]).decode("utf-8")
        value = item["value"]
        if value["type"] == 1:  # bytes
            state[key] = base64.b64decode(value["bytes"])
        else:  # uint
            state[key] = value["uint"]

    return state


class FundMeClient:
    def __init__(self, client: algod.AlgodClient, app_id: int):
        self.client = client
        self.app_id = app_id

    @property
    def address(self) -> str:
        return logic.get_application_address(self.app_id)

    def _state(self) -> dict:
        return read_global_state(self.client, self.app_id)

    def _read_box(self, name: bytes):
        try:
            response = self.client.application_box_by_name(self.app_id, name)
        except AlgodHTTPError as e:
            if e.code == 404:
                return None
            raise
        return base64.b64decode(response["value"])

    def get_owner(self) -> str:
        return encoding.encode_address(self._state()["owner"])

    def get_price_feed(self) -> int:
        return self._state()["price_feed"]

    def get_funders_count(self) -> int:
        return self._state().get("funder_count", 0)

    def get_funder(self, index: int) -> str:
        count = self.get_funders_count()
        if index < 0 or index >= count:
            raise IndexOutOfRange(index, count)
        return encoding.encode_address(self._read_box(funder_box_name(index)))

    def get_funders(self) -> list[str]:
        return [self.get_funder(index) for index in range(self.get_funders_count())]

    def get_address_to_amount_funded(self, address: str) -> int:
        value = self._read_box(amount_box_name(address))
        if value is None:
            return 0
        return int.from_bytes(value, "big")

    def get_conversion_rate(self, amount: int) -> int:
        """
        Convert microALGO to USD scaled by 10^NATIVE_DECIMALS, using the
        price feed's latest answer.
        """
        feed = read_global_state(self.client, self.get_price_feed())
        return amount * feed["latest_answer"] // 10 ** feed["decimals"]

    def get_storage_cost(self, address: str) -> int:
        """Box minimum balance a contribution from address must pay."""
        cost = FUNDER_BOX_MIN_BALANCE
        if self._read_box(amount_box_name(address)) is None:
            cost += AMOUNT_BOX_MIN_BALANCE
        return cost

    def fund(self, sender: NamedAccount, amount: int) -> str:
        """
        Fund the contract.

        Args:
            sender: Funding account
            amount: Contribution in microALGO

        Returns:
            Transaction ID of the app call

        Raises:
            InsufficientFundingError: amount is worth less than MINIMUM_USD
        """
        usd_value = self.get_conversion_rate(amount)
        minimum = MINIMUM_USD * 10**NATIVE_DECIMALS
        if usd_value < minimum:
            raise InsufficientFundingError(amount, usd_value, minimum)

        state = self._state()
        sp = self.client.suggested_params()

        payment = transaction.PaymentTxn(
            sender=sender.address,
            sp=sp,
            receiver=self.address,
            amt=amount,
        )
        storage_payment = transaction.PaymentTxn(
            sender=sender.address,
            sp=sp,
            receiver=self.address,
            amt=self.get_storage_cost(sender.address),
            note=b"box storage",
        )
        call = transaction.ApplicationCallTxn(
            sender=sender.address,
            sp=sp,
            index=self.app_id,
            on_complete=transaction.OnComplete.NoOpOC,
            app_args=[FUND.get_selector()],
            foreign_apps=[state["price_feed"]],
            boxes=[
                (0, funder_box_name(state.get("funder_count", 0))),
                (0, amount_box_name(sender.address)),
            ],
        )

        tx_id = self._submit([payment, storage_payment, call], sender)
        logger.info("%s funded %d microALGO (tx: %s)", sender.address, amount, tx_id)
        return tx_id

    def withdraw(self, sender: NamedAccount) -> str:
        """
        Withdraw the spendable balance to the owner.

        Every funder box is referenced in the group; references beyond the
        first call's quota ride on extra get_funders_count calls.

        Returns:
            Transaction ID of the withdraw call

        Raises:
            Unauthorized: sender is not the owner
        """
        owner = self.get_owner()
        if sender.address != owner:
            raise Unauthorized(sender.address)

        funders = self.get_funders()
        boxes = [funder_box_name(index) for index in range(len(funders))]
        boxes += [amount_box_name(funder) for funder in dict.fromkeys(funders)]
        chunks = [boxes[i:i + MAX_REFERENCES] for i in range(0, len(boxes), MAX_REFERENCES)] or [[]]
        if len(chunks) > MAX_GROUP_SIZE:
            raise FundMeError(
                f"{len(funders)} funders need {len(chunks)} transactions, "
                f"more than a group of {MAX_GROUP_SIZE} allows"
            )

        sp = self.client.suggested_params()
        withdraw_sp = copy.copy(sp)
        withdraw_sp.flat_fee = True
        withdraw_sp.fee = 2 * sp.min_fee  # covers the inner payment

        txns = []
        for position, chunk in enumerate(chunks):
            method = WITHDRAW if position == 0 else GET_FUNDERS_COUNT
            txns.append(
                transaction.ApplicationCallTxn(
                    sender=sender.address,
                    sp=withdraw_sp if position == 0 else sp,
                    index=self.app_id,
                    on_complete=transaction.OnComplete.NoOpOC,
                    app_args=[method.get_selector()],
                    boxes=[(0, name) for name in chunk],
                )
            )

        self._submit(txns, sender)
        tx_id = txns[0].get_txid()
        logger.info("%s withdrew from app %d (tx: %s)", sender.address, self.app_id, tx_id)
        return tx_id

    def _submit(self, txns: list, signer: NamedAccount) -> str:
        """Group, sign, send and wait; returns the last transaction's ID."""
        if len(txns) > 1:
            transaction.assign_group_id(txns)
        signed = [txn.sign(signer.private_key) for txn in txns]
        self.client.send_transactions(signed)
        tx_id = txns[-1].get_txid()
        transaction.wait_for_confirmation(self.client, tx_id, 4)
        return tx_id
