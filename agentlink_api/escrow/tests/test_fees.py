from decimal import Decimal

import pytest

from escrow.fees import round2, split_fee


def test_scenario_split():
    split = split_fee(Decimal('100.00'), Decimal('0.20'))
    assert split.platform_fee_amount == Decimal('20.00')
    assert split.payout_amount == Decimal('80.00')


@pytest.mark.parametrize('fee', ['0.01', '0.05', '1.00', '33.33', '99.99', '100.01', '123.45', '9999.99'])
@pytest.mark.parametrize('rate', ['0.01', '0.125', '0.15', '0.20', '0.333', '0.99'])
def test_parts_always_sum_to_fee(fee, rate):
    split = split_fee(Decimal(fee), Decimal(rate))
    assert split.platform_fee_amount + split.payout_amount == Decimal(fee)
    assert split.platform_fee_amount.as_tuple().exponent == -2
    assert split.payout_amount.as_tuple().exponent == -2


def test_platform_fee_rounds_half_up():
    split = split_fee(Decimal('0.125'), Decimal('0.20'))
    assert split.fee == Decimal('0.13')
    assert split.platform_fee_amount == Decimal('0.03')
    assert split.payout_amount == Decimal('0.10')


def test_accepts_strings_and_floats():
    assert split_fee('19.99', 0.2).platform_fee_amount == Decimal('4.00')


@pytest.mark.parametrize('fee', ['0', '-1.00'])
def test_rejects_non_positive_fee(fee):
    with pytest.raises(ValueError):
        split_fee(Decimal(fee), Decimal('0.20'))


@pytest.mark.parametrize('rate', ['0', '1', '1.5', '-0.1'])
def test_rejects_rate_outside_unit_interval(rate):
    with pytest.raises(ValueError):
        split_fee(Decimal('10.00'), Decimal(rate))


def test_round2():
    assert round2('2.675') == Decimal('2.68')
    assert round2(Decimal('2.674')) == Decimal('2.67')
