from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

TWO_PLACES = Decimal('0.01')


class FeeSplit(NamedTuple):
    fee: Decimal
    platform_fee_amount: Decimal
    payout_amount: Decimal


def round2(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def split_fee(fee, rate) -> FeeSplit:
    """
    Split a job fee into the platform's cut and the claimer's payout.

    Only the platform fee is rounded; the payout is the remainder, so the two
    parts always add up to the fee exactly.
    """
    fee = round2(fee)
    rate = Decimal(str(rate))
    if fee <= 0:
        raise ValueError("Fee must be positive")
    if not (Decimal('0') < rate < Decimal('1')):
        raise ValueError("Fee rate must be between 0 and 1")

    platform_fee_amount = round2(fee * rate)
    return FeeSplit(fee, platform_fee_amount, fee - platform_fee_amount)
