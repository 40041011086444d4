#!/usr/bin/env python3
"""Test the cost estimate calculation."""

import os
import sys
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from estimator import (
    CostEstimator,
    InternalError,
    InvalidInput,
    LineItem,
    MAX_QUANTITY,
    PricingDatabase,
    compute_estimate,
    round2,
)


def test_paint_scenario():
    """2 gallons of paint with the default labor block and 10% fee."""
    estimate = compute_estimate([{"name": "paint", "quantity": 2}], "90210")

    assert len(estimate.materials) == 1
    paint = estimate.materials[0]
    assert paint.unit_cost == Decimal("55.00")
    assert paint.total_cost == Decimal("110.00")

    assert len(estimate.labor) == 1
    labor = estimate.labor[0]
    assert labor.item == "General Labor & Installation"
    assert labor.quantity == Decimal("8")
    assert labor.unit_cost == Decimal("70.00")
    assert labor.total_cost == Decimal("560.00")

    assert estimate.total_material_cost == Decimal("110.00")
    assert estimate.total_labor_cost == Decimal("560.00")
    assert estimate.subtotal == Decimal("670.00")
    assert estimate.platform_fee_percent == Decimal("10.00")
    assert estimate.platform_fee == Decimal("67.00")
    assert estimate.total_project_cost == Decimal("737.00")
    assert estimate.region_code == "90210"
    assert "10% platform fee" in estimate.notes


def test_unknown_item_uses_default_price():
    estimate = compute_estimate([LineItem("exotic marble", 3)], "10001")

    marble = estimate.materials[0]
    assert marble.unit_cost == PricingDatabase.DEFAULT_UNIT_PRICE == Decimal("150.00")
    assert marble.total_cost == Decimal("450.00")
    assert marble.price_source == "default"


def test_lookup_is_case_insensitive():
    estimate = compute_estimate([{"name": "  Modern   ARMCHAIR ", "quantity": 1}], "10001")

    chair = estimate.materials[0]
    assert chair.unit_cost == Decimal("479.99")
    assert chair.price_source == "table"
    # the name as sent is kept for display
    assert chair.item == "  Modern   ARMCHAIR "


def test_empty_items_rejected():
    with pytest.raises(InvalidInput):
        compute_estimate([], "90210")


def test_negative_quantity_names_the_item():
    with pytest.raises(InvalidInput) as exc_info:
        compute_estimate([{"name": "Modern Armchair", "quantity": -1}], "90210")
    assert "Modern Armchair" in str(exc_info.value)


@pytest.mark.parametrize("quantity", [0, float("nan"), float("inf"), "2", None, True])
def test_bad_quantities_rejected(quantity):
    with pytest.raises(InvalidInput) as exc_info:
        compute_estimate([{"name": "floor lamp", "quantity": quantity}], "90210")
    assert "floor lamp" in str(exc_info.value)


def test_quantity_above_maximum_names_the_item():
    with pytest.raises(InvalidInput) as exc_info:
        compute_estimate([{"name": "paint", "quantity": 1e30}], "90210")
    assert "paint" in str(exc_info.value)
    assert str(MAX_QUANTITY) in str(exc_info.value)


def test_maximum_quantity_with_a_large_price_is_priced():
    class CostlyPricing(PricingDatabase):
        PRICES = {"turbine": Decimal("987654321987654321.99")}

    estimator = CostEstimator(pricing=CostlyPricing)
    estimate = estimator.estimate([{"name": "turbine", "quantity": MAX_QUANTITY}], "90210")

    turbine = estimate.materials[0]
    assert turbine.total_cost == Decimal("987654321987654321990000000000.00")
    assert estimate.subtotal == Decimal("987654321987654321990000000560.00")
    assert estimate.platform_fee == Decimal("98765432198765432199000000056.00")
    assert estimate.total_project_cost == Decimal("1086419754186419754189000000616.00")


def test_non_text_unit_rejected():
    with pytest.raises(InvalidInput) as exc_info:
        compute_estimate([{"name": "paint", "quantity": 1, "unit": 5}], "90210")
    assert "paint" in str(exc_info.value)


def test_items_must_be_a_list():
    with pytest.raises(InvalidInput):
        compute_estimate({"name": "paint", "quantity": 1}, "90210")
    with pytest.raises(InvalidInput):
        compute_estimate(5, "90210")
    with pytest.raises(InvalidInput):
        compute_estimate(["paint"], "90210")


def test_unnamed_item_rejected():
    with pytest.raises(InvalidInput):
        compute_estimate([{"name": "", "quantity": 1}], "90210")


def test_unexpected_pricing_error_is_wrapped():
    failure = KeyError("price table unavailable")

    class ExplodingPricing(PricingDatabase):
        @classmethod
        def get_price(cls, name):
            raise failure

    estimator = CostEstimator(pricing=ExplodingPricing)
    with pytest.raises(InternalError) as exc_info:
        estimator.estimate([{"name": "paint", "quantity": 1}], "90210")
    assert exc_info.value.__cause__ is failure


def test_region_code_required():
    with pytest.raises(InvalidInput):
        compute_estimate([{"name": "paint", "quantity": 1}], "")


def test_totals_invariants_hold_for_awkward_quantities():
    items = [
        {"name": "floor lamp", "quantity": 0.333},
        {"name": "modern armchair", "quantity": 3},
        {"name": "potted plant", "quantity": 1.1},
        {"name": "grout", "quantity": 0.07},
        {"name": "paint", "quantity": 2.5, "unit": "gallon"},
    ]
    estimate = compute_estimate(items, "60601")

    assert estimate.total_material_cost == sum(m.total_cost for m in estimate.materials)
    assert estimate.subtotal == estimate.total_material_cost + estimate.total_labor_cost
    assert estimate.platform_fee == round2(estimate.subtotal * Decimal("0.10"))
    assert estimate.total_project_cost == round2(
        estimate.total_material_cost + estimate.total_labor_cost + estimate.platform_fee
    )
    for material in estimate.materials:
        assert material.total_cost == round2(material.quantity * material.unit_cost)
        assert material.total_cost.as_tuple().exponent == -2


def test_idempotent():
    items = [{"name": "paint", "quantity": 2}, {"name": "exotic marble", "quantity": 3}]
    first = compute_estimate(items, "90210")
    second = compute_estimate(items, "90210")

    assert first == second
    assert {k: v for k, v in first.to_dict().items() if k != "createdAt"} == \
        {k: v for k, v in second.to_dict().items() if k != "createdAt"}


def test_custom_fee_and_labor():
    estimator = CostEstimator(fee_rate="0.125", labor_hours=4, labor_rate="85.50")
    estimate = estimator.estimate([{"name": "paint", "quantity": 1}], "73301")

    assert estimate.total_labor_cost == Decimal("342.00")
    assert estimate.subtotal == Decimal("397.00")
    assert estimate.platform_fee == Decimal("49.63")  # 49.625 rounds half up
    assert estimate.total_project_cost == Decimal("446.63")
    assert "12.5% platform fee" in estimate.notes


def test_negative_configuration_rejected():
    with pytest.raises(ValueError):
        CostEstimator(fee_rate=-0.1)
    with pytest.raises(ValueError):
        CostEstimator(labor_rate=float("nan"))


def test_to_dict_shape():
    data = compute_estimate([{"name": "paint", "quantity": 2, "unit": "gallon"}], "90210").to_dict()

    assert data["materials"] == [{
        "item": "paint",
        "quantity": 2.0,
        "unitCost": 55.0,
        "totalCost": 110.0,
        "priceSource": "table",
        "unit": "gallon",
    }]
    assert data["totalProjectCost"] == 737.0
    assert data["platformFeePercent"] == 10.0
    assert data["regionCode"] == data["zipCode"] == "90210"


if __name__ == "__main__":
    estimate = compute_estimate([{"name": "paint", "quantity": 2}], "90210")
    print("=" * 60)
    print("COST ESTIMATE")
    print("=" * 60)
    for m in estimate.materials:
        print(f"  {m.item}: {m.quantity} x ${m.unit_cost} = ${m.total_cost}")
    for entry in estimate.labor:
        print(f"  {entry.item}: {entry.quantity}h x ${entry.unit_cost} = ${entry.total_cost}")
    print(f"  Subtotal: ${estimate.subtotal}")
    print(f"  Platform fee ({estimate.platform_fee_percent}%): ${estimate.platform_fee}")
    print(f"  TOTAL: ${estimate.total_project_cost}")
