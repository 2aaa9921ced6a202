"""
Constants shared by the FundMe contract and its off-chain client.

Plain integers only, so the client can import them without algopy.
"""

# Minimum contribution, in whole USD
MINIMUM_USD = 50

# Decimal precision of the native currency (microALGO)
NATIVE_DECIMALS = 6

# Box minimum balance is 2_500 per box plus 400 per byte of key and value.
# Funder box: key b"f" + uint64 index (9 bytes), value address (32 bytes)
FUNDER_BOX_MIN_BALANCE = 18_900
# Amount box: key b"a" + address (33 bytes), value uint64 (8 bytes)
AMOUNT_BOX_MIN_BALANCE = 18_900
