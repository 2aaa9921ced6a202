"""
Price conversion subroutines for FundMe.

The price feed is any application that publishes its latest ALGO/USD answer
and the answer's decimal precision in global state under the keys
``latest_answer`` and ``decimals`` (see MockV3Aggregator).
"""

from algopy import Application, BigUInt, UInt64, op, subroutine

from contracts.fund_me.constants import MINIMUM_USD, NATIVE_DECIMALS


@subroutine
def get_price(price_feed: Application) -> tuple[UInt64, UInt64]:
    """
    Read the latest answer and its decimals from the price feed.

    Args:
        price_feed: Price feed application

    Returns:
        Tuple of (answer, decimals)
    """
    answer, answer_exists = op.AppGlobal.get_ex_uint64(price_feed, b"latest_answer")
    assert answer_exists, "price feed has no answer"

    decimals, decimals_exists = op.AppGlobal.get_ex_uint64(price_feed, b"decimals")
    assert decimals_exists, "price feed has no decimals"

    return answer, decimals


@subroutine
def get_conversion_rate(amount: UInt64, price_feed: Application) -> BigUInt:
    """
    Convert a microALGO amount to USD scaled by 10^NATIVE_DECIMALS.

    usd = amount * answer / 10^decimals
    """
    price, decimals = get_price(price_feed)
    return BigUInt(amount) * BigUInt(price) // BigUInt(UInt64(10) ** decimals)


@subroutine
def minimum_usd() -> BigUInt:
    """MINIMUM_USD scaled by 10^NATIVE_DECIMALS."""
    return BigUInt(UInt64(MINIMUM_USD) * UInt64(10) ** UInt64(NATIVE_DECIMALS))
