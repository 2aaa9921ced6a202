"""Errors raised by the FundMe deploy scripts and client."""


class FundMeError(Exception):
    """Base class for FundMe errors."""


class ConfigurationError(FundMeError):
    """Network or deployment configuration is missing or invalid."""


class InsufficientFundingError(FundMeError):
    """Contribution is worth less than the minimum in USD."""

    def __init__(self, amount: int, usd_value: int, minimum: int):
        self.amount = amount
        self.usd_value = usd_value
        self.minimum = minimum
        super().__init__(
            f"insufficient funding amount: {amount} microALGO is worth "
            f"{usd_value} (minimum {minimum})"
        )


class Unauthorized(FundMeError):
    """Caller is not the contract owner."""

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"unauthorized: {caller} is not the owner")


class IndexOutOfRange(FundMeError):
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"funder index {index} out of range (funders: {length})")


class VerificationFailure(FundMeError):
    """Deployed application does not match the local build."""
