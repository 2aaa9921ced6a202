"""
Mock ALGO/USD Price Feed

Stand-in price feed for LocalNet deployments and tests. Publishes the latest
answer and its decimals in global state, which is where FundMe reads them.
Anyone may update the answer.
"""

from algopy import ARC4Contract, Global, GlobalState, UInt64, arc4, subroutine


class MockV3Aggregator(ARC4Contract):
    """
    State Schema:
    - Global State:
        - decimals: Decimal precision of the answer
        - latest_answer: Latest price, scaled by 10^decimals
        - latest_timestamp: Time of the latest update
        - latest_round: Round of the latest update
    """

    def __init__(self) -> None:
        self.answer_decimals = GlobalState(UInt64, key="decimals")
        self.latest_answer = GlobalState(UInt64)
        self.latest_timestamp = GlobalState(UInt64)
        self.latest_round = GlobalState(UInt64)

    @arc4.abimethod(create="require")
    def create(self, decimals: arc4.UInt8, initial_answer: arc4.UInt64) -> None:
        """
        Create the price feed.

        Args:
            decimals: Decimal precision of answers
            initial_answer: First answer, scaled by 10^decimals
        """
        self.answer_decimals.value = decimals.native
        self.latest_round.value = UInt64(0)
        self._update_answer(initial_answer.native)

    @arc4.abimethod
    def update_answer(self, answer: arc4.UInt64) -> None:
        self._update_answer(answer.native)

    @arc4.abimethod
    def update_round_data(
        self,
        round_id: arc4.UInt64,
        answer: arc4.UInt64,
        timestamp: arc4.UInt64,
    ) -> None:
        """
        Overwrite the latest round wholesale.

        Args:
            round_id: Round to report as latest
            answer: Answer for that round
            timestamp: Update time for that round
        """
        self.latest_round.value = round_id.native
        self.latest_answer.value = answer.native
        self.latest_timestamp.value = timestamp.native

    @arc4.abimethod(readonly=True)
    def latest_round_data(
        self,
    ) -> arc4.Tuple[arc4.UInt64, arc4.UInt64, arc4.UInt64, arc4.UInt64, arc4.UInt64]:
        """
        Returns:
            Tuple of (round_id, answer, started_at, updated_at, answered_in_round)
        """
        return arc4.Tuple((
            arc4.UInt64(self.latest_round.value),
            arc4.UInt64(self.latest_answer.value),
            arc4.UInt64(self.latest_timestamp.value),
            arc4.UInt64(self.latest_timestamp.value),
            arc4.UInt64(self.latest_round.value),
        ))

    @arc4.abimethod(readonly=True)
    def decimals(self) -> arc4.UInt8:
        return arc4.UInt8(self.answer_decimals.value)

    @arc4.abimethod(readonly=True)
    def description(self) -> arc4.String:
        return arc4.String("MockV3Aggregator ALGO / USD")

    @arc4.abimethod(readonly=True)
    def version(self) -> arc4.UInt64:
        return arc4.UInt64(0)

    @subroutine
    def _update_answer(self, answer: UInt64) -> None:
        self.latest_answer.value = answer
        self.latest_timestamp.value = Global.latest_timestamp
        self.latest_round.value += 1
