from types import SimpleNamespace

import pytest

from src.services.errors import InvalidInput
from src.services.pricing import freight_for, price_line
from src.services.pricing_settings import DEFAULT_SETTINGS, DEFAULT_SETTINGS_DOCUMENT, parse_settings


def _product(cost=26.95, cpp=49):
    return SimpleNamespace(cost_per_case=cost, cases_per_pallet=cpp)


def _settings(**overrides):
    doc = dict(DEFAULT_SETTINGS_DOCUMENT)
    doc.update(overrides)
    return parse_settings(doc)


def test_gala_apples_100_cases_40_miles():
    p = price_line(_product(), 100, "Food Bank", 40, DEFAULT_SETTINGS)
    assert p.pallets == 3
    assert p.freight_before_discount == pytest.approx(477.0)
    assert p.volume_discount_percent == 8
    assert p.freight_cost == pytest.approx(438.84)
    assert p.margin_percent == 20
    assert p.sale_price_per_case == pytest.approx(32.34)
    assert p.line_total == pytest.approx(3672.84)
    assert p.product_total == pytest.approx(3234.0)


def test_rounded_keeps_cents():
    p = price_line(_product(), 100, "Food Bank", 40, DEFAULT_SETTINGS).rounded()
    assert p.freight_cost == 438.84
    assert p.sale_price_per_case == 32.34
    assert p.line_total == 3672.84


def test_freight_floor_applies():
    settings = _settings(baseFreightRate=10, perMileRate=0, minFreight=75)
    p = price_line(_product(cpp=10), 10, None, 0, settings)
    assert p.freight_before_discount == pytest.approx(10.0)
    assert p.freight_cost == 75


def test_floor_applies_after_discount():
    settings = _settings(baseFreightRate=40, perMileRate=0, minFreight=75)
    # 2 pallets * 40 = 80, tier 51-150 takes 8% -> 73.6, floored to 75
    p = price_line(_product(cpp=50), 100, None, 0, settings)
    assert p.freight_before_discount == pytest.approx(80.0)
    assert p.freight_cost == 75


def test_pallet_break_surcharge_on_partial_pallet():
    pallets, raw, discount, total = freight_for(10, 40, 0, DEFAULT_SETTINGS)
    # 125 for the pallet + 15% of a quarter pallet's freight
    assert pallets == 1
    assert raw == pytest.approx(125 + 125 * 0.25 * 0.15)
    assert discount == 0
    assert total == pytest.approx(raw)


def test_no_surcharge_on_exact_full_pallet():
    pallets, raw, _, total = freight_for(49, 49, 0, DEFAULT_SETTINGS)
    assert pallets == 1
    assert raw == pytest.approx(125.0)
    assert total == pytest.approx(125.0)


def test_volume_tier_discount():
    p = price_line(_product(cpp=100), 200, None, 0, DEFAULT_SETTINGS)
    assert p.pallets == 2
    assert p.volume_discount_percent == 15
    assert p.freight_cost == pytest.approx(212.5)


def test_cases_above_last_tier_use_top_discount():
    p = price_line(_product(cpp=1000), 50000, None, 0, DEFAULT_SETTINGS)
    assert p.volume_discount_percent == 22


def test_tier_boundaries_are_inclusive():
    assert price_line(_product(), 50, None, 0, DEFAULT_SETTINGS).volume_discount_percent == 0
    assert price_line(_product(), 51, None, 0, DEFAULT_SETTINGS).volume_discount_percent == 8
    assert price_line(_product(), 150, None, 0, DEFAULT_SETTINGS).volume_discount_percent == 8
    assert price_line(_product(), 151, None, 0, DEFAULT_SETTINGS).volume_discount_percent == 15


def test_customer_type_margins():
    cost = 10.0
    school = price_line(_product(cost=cost), 10, "School District", 0, DEFAULT_SETTINGS)
    corporate = price_line(_product(cost=cost), 10, "corporate", 0, DEFAULT_SETTINGS)
    other = price_line(_product(cost=cost), 10, "Restaurant", 0, DEFAULT_SETTINGS)
    assert school.margin_percent == 15
    assert school.sale_price_per_case == pytest.approx(11.5)
    assert corporate.margin_percent == 25
    assert other.margin_percent == 20


def test_explicit_margin_wins():
    p = price_line(_product(cost=10.0), 10, "Food Bank", 0, DEFAULT_SETTINGS, margin_percent=0)
    assert p.margin_percent == 0
    assert p.sale_price_per_case == pytest.approx(10.0)


def test_same_inputs_same_output():
    a = price_line(_product(), 73, "Corporate", 55, DEFAULT_SETTINGS)
    b = price_line(_product(), 73, "Corporate", 55, DEFAULT_SETTINGS)
    assert a == b


def test_freight_grows_with_distance():
    near = price_line(_product(), 100, None, 10, DEFAULT_SETTINGS)
    far = price_line(_product(), 100, None, 400, DEFAULT_SETTINGS)
    assert far.freight_cost > near.freight_cost
    assert far.line_total > near.line_total


def test_freight_never_below_minimum():
    for cases in (1, 5, 49, 50, 51, 300, 301, 1000):
        p = price_line(_product(), cases, None, 0, DEFAULT_SETTINGS)
        assert p.freight_cost >= DEFAULT_SETTINGS.min_freight


@pytest.mark.parametrize("cases", [0, -1, 1.5, True, None, "10"])
def test_bad_case_counts(cases):
    with pytest.raises(InvalidInput):
        price_line(_product(), cases, None, 0, DEFAULT_SETTINGS)


def test_negative_distance_rejected():
    with pytest.raises(InvalidInput):
        price_line(_product(), 10, None, -5, DEFAULT_SETTINGS)


def test_nan_distance_rejected():
    with pytest.raises(InvalidInput):
        price_line(_product(), 10, None, float("nan"), DEFAULT_SETTINGS)


def test_empty_pallet_size_rejected():
    with pytest.raises(InvalidInput):
        price_line(_product(cpp=0), 10, None, 0, DEFAULT_SETTINGS)


def test_margin_out_of_range_rejected():
    with pytest.raises(InvalidInput):
        price_line(_product(), 10, None, 0, DEFAULT_SETTINGS, margin_percent=101)


CASE_SWEEP = range(1, 401)


@pytest.mark.parametrize("customer_type", ["Food Bank", "School District", "Corporate"])
def test_product_value_never_drops_as_cases_grow(customer_type):
    previous = None
    for cases in CASE_SWEEP:
        p = price_line(_product(), cases, customer_type, 40, DEFAULT_SETTINGS)
        if previous is not None:
            assert p.product_total >= previous
        previous = p.product_total


@pytest.mark.parametrize("distance", [0, 40, 400])
def test_discount_never_shrinks_as_cases_grow(distance):
    previous = None
    for cases in CASE_SWEEP:
        p = price_line(_product(), cases, None, distance, DEFAULT_SETTINGS)
        if previous is not None:
            assert p.volume_discount_percent >= previous
        previous = p.volume_discount_percent


@pytest.mark.parametrize("distance", [0, 40, 400])
def test_freight_per_case_never_rises_with_tier(distance):
    # one case per pallet: freight per case only moves with the tier discount
    previous = None
    for cases in CASE_SWEEP:
        p = price_line(_product(cpp=1), cases, None, distance, DEFAULT_SETTINGS)
        per_case = p.freight_cost / cases
        if previous is not None:
            assert per_case <= previous + 1e-9
        previous = per_case


def test_freight_per_pallet_falls_across_tier_boundaries():
    # same pallet count on both sides of each boundary
    for below, above in ((50, 51), (150, 151), (300, 301)):
        lo = price_line(_product(cpp=1000), below, None, 40, DEFAULT_SETTINGS)
        hi = price_line(_product(cpp=1000), above, None, 40, DEFAULT_SETTINGS)
        assert hi.pallets == lo.pallets
        assert hi.freight_cost < lo.freight_cost
