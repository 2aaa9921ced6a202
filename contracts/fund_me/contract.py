"""
FundMe Crowdfunding Smart Contract

Anyone can fund the contract with ALGO worth at least MINIMUM_USD according
to the configured price feed. Only the account that created the contract can
withdraw, and a withdrawal sweeps the whole spendable balance to it.

Features:
- Price-feed backed minimum contribution (ALGO -> USD)
- Ordered funder list (repeat funders appear once per contribution)
- Per-address contribution totals
- Owner-only withdrawal that resets the ledger

Algorand Primitives Used:
- AVM Application (smart contract)
- Grouped payment transactions (contributions, box storage)
- Inner Transactions (withdrawal)
- Boxes (funder list and contribution totals)
- Foreign application global state (price feed)
"""

from algopy import (
    ARC4Contract,
    Account,
    Application,
    BoxMap,
    Global,
    GlobalState,
    Txn,
    UInt64,
    arc4,
    gtxn,
    itxn,
    subroutine,
    urange,
)

from contracts.fund_me.constants import AMOUNT_BOX_MIN_BALANCE, FUNDER_BOX_MIN_BALANCE
from contracts.fund_me.price_converter import get_conversion_rate, minimum_usd


class FundMe(ARC4Contract):
    """
    Crowdfunding contract with owner-only withdrawal.

    State Schema:
    - Global State:
        - owner: Account that created the contract
        - price_feed: ALGO/USD price feed application
        - funder_count: Number of entries in the funder list

    - Boxes:
        - f{index}: Funder address at position index
        - a{address}: Total microALGO funded by address
    """

    owner: GlobalState[Account]
    price_feed: GlobalState[Application]
    funder_count: GlobalState[UInt64]

    def __init__(self) -> None:
        self.funders = BoxMap(UInt64, Account, key_prefix=b"f")
        self.amount_funded = BoxMap(Account, UInt64, key_prefix=b"a")

    @arc4.abimethod(create="require")
    def create(self, price_feed: Application) -> None:
        """
        Create the contract.

        Args:
            price_feed: ALGO/USD price feed application
        """
        self.owner.value = Txn.sender
        self.price_feed.value = price_feed
        self.funder_count.value = UInt64(0)

    @arc4.abimethod
    def fund(
        self,
        payment: gtxn.PaymentTransaction,
        storage_payment: gtxn.PaymentTransaction,
    ) -> None:
        """
        Fund the contract.
        Must be grouped with two payments from the caller to the application:
        the contribution and the minimum balance of the boxes it creates.

        Args:
            payment: Contribution payment
            storage_payment: Exactly the box minimum balance, see storage_cost
        """
        app_account = Global.current_application_address
        assert payment.sender == Txn.sender, "payment sender must be the caller"
        assert payment.receiver == app_account, "payment receiver must be the application"
        assert (
            get_conversion_rate(payment.amount, self.price_feed.value) >= minimum_usd()
        ), "insufficient funding amount"

        assert storage_payment.sender == Txn.sender, "payment sender must be the caller"
        assert (
            storage_payment.receiver == app_account
        ), "payment receiver must be the application"
        assert (
            storage_payment.amount == self.storage_cost(Txn.sender)
        ), "storage payment must match new boxes"

        self.funders[self.funder_count.value] = Txn.sender
        self.funder_count.value += 1

        self.amount_funded[Txn.sender] = (
            self.amount_funded.get(Txn.sender, default=UInt64(0)) + payment.amount
        )

    @arc4.abimethod
    def withdraw(self) -> None:
        """
        Send the spendable balance to the owner and reset the ledger.
        Deleting the boxes releases their storage payments, which go out
        with the contributions. The caller covers the inner transaction fee
        (fee pooling).
        """
        assert Txn.sender == self.owner.value, "unauthorized"

        # Ledger must be zeroed before the payment goes out
        for index in urange(self.funder_count.value):
            funder = self.funders[index]
            if funder in self.amount_funded:
                del self.amount_funded[funder]

        for index in urange(self.funder_count.value):
            del self.funders[index]
        self.funder_count.value = UInt64(0)

        app_account = Global.current_application_address
        itxn.Payment(
            receiver=self.owner.value,
            amount=app_account.balance - app_account.min_balance,
            fee=0,
        ).submit()

    @arc4.abimethod(readonly=True)
    def get_owner(self) -> arc4.Address:
        return arc4.Address(self.owner.value)

    @arc4.abimethod(readonly=True)
    def get_price_feed(self) -> arc4.UInt64:
        return arc4.UInt64(self.price_feed.value.id)

    @arc4.abimethod(readonly=True)
    def get_funder(self, index: arc4.UInt64) -> arc4.Address:
        """
        Get the funder at a position in the funder list.

        Args:
            index: Position in the funder list

        Returns:
            Funder address
        """
        assert index.native < self.funder_count.value, "funder index out of range"
        return arc4.Address(self.funders[index.native])

    @arc4.abimethod(readonly=True)
    def get_address_to_amount_funded(self, funder: arc4.Address) -> arc4.UInt64:
        """
        Get the total funded by an address since the last withdrawal.

        Returns:
            Amount in microALGO, 0 for unknown addresses
        """
        return arc4.UInt64(self.amount_funded.get(funder.native, default=UInt64(0)))

    @arc4.abimethod(readonly=True)
    def get_funders_count(self) -> arc4.UInt64:
        return arc4.UInt64(self.funder_count.value)

    @subroutine
    def storage_cost(self, funder: Account) -> UInt64:
        """Minimum balance of the boxes a contribution from funder creates."""
        cost = UInt64(FUNDER_BOX_MIN_BALANCE)
        if funder not in self.amount_funded:
            cost += AMOUNT_BOX_MIN_BALANCE
        return cost
