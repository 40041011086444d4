"""
Renovision - Cost Estimation Engine

Prices a list of line items, adds a labor block and the platform fee,
and returns a structured Estimate.
"""

from decimal import Decimal, localcontext
from typing import Any, Dict, Iterable, List, Optional, Union

from .errors import InvalidInput, InternalError
from .models import Estimate, LaborEntry, LineItem, PricedMaterial, Number, round2, to_decimal
from .pricing import PricingDatabase

PLATFORM_FEE_RATE = Decimal("0.10")
DEFAULT_LABOR_HOURS = Decimal("8")
DEFAULT_LABOR_RATE = Decimal("70")
LABOR_DESCRIPTION = "General Labor & Installation"

# Largest quantity accepted for a single line item
MAX_QUANTITY = Decimal("1000000000")

# Digits of precision for money arithmetic (the decimal default is 28)
ARITHMETIC_PRECISION = 50

DISCLAIMER = (
    "This estimate includes materials, labor, and a {fee_percent}% platform fee. "
    "Prices may vary based on local suppliers and contractor rates. "
    "Always get a binding quote from a professional."
)


def _format_percent(percent: Decimal) -> str:
    # 10.00 -> "10", 12.50 -> "12.5"
    return format(percent.normalize(), "f")


class CostEstimator:
    """
    Calculate a project estimate from line items.
    """

    def __init__(
        self,
        fee_rate: Number = PLATFORM_FEE_RATE,
        labor_hours: Number = DEFAULT_LABOR_HOURS,
        labor_rate: Number = DEFAULT_LABOR_RATE,
        pricing=PricingDatabase,
        price_lookup=None
    ):
        """
        Initialize the cost estimator.

        Args:
            fee_rate: Platform fee rate (0.10 = 10%)
            labor_hours: Hours in the synthetic labor block
            labor_rate: Hourly labor rate
            pricing: Static price table (anything with get_price(name) and DEFAULT_UNIT_PRICE)
            price_lookup: Optional delegated lookup with get_price(name, region_code)
        """
        self.fee_rate = to_decimal(fee_rate)
        self.labor_hours = to_decimal(labor_hours)
        self.labor_rate = to_decimal(labor_rate)
        self.pricing = pricing
        self.price_lookup = price_lookup

        if not self.fee_rate.is_finite() or self.fee_rate < 0:
            raise ValueError(f"fee_rate must be a non-negative number, got {fee_rate}")
        if not self.labor_hours.is_finite() or self.labor_hours < 0:
            raise ValueError(f"labor_hours must be a non-negative number, got {labor_hours}")
        if not self.labor_rate.is_finite() or self.labor_rate < 0:
            raise ValueError(f"labor_rate must be a non-negative number, got {labor_rate}")

    @property
    def fee_percent(self) -> Decimal:
        return round2(self.fee_rate * 100)

    def resolve_unit_cost(self, name: str, region_code: str):
        """
        Resolve the unit cost for an item name.

        Returns:
            Tuple of (unit_cost, source) where source is "table", "lookup" or "default"
        """
        price = self.pricing.get_price(name)
        if price is not None:
            return round2(price), "table"

        if self.price_lookup is not None:
            price = self.price_lookup.get_price(name, region_code)
            if price is not None:
                return round2(price), "lookup"

        return round2(self.pricing.DEFAULT_UNIT_PRICE), "default"

    def _validate_items(self, items: Iterable[Union[LineItem, Dict[str, Any]]]) -> List[LineItem]:
        if items is None or isinstance(items, (str, bytes, dict)):
            raise InvalidInput("'items' must be a list of line items")

        try:
            line_items = [
                item if isinstance(item, LineItem) else LineItem.from_dict(item)
                for item in items
            ]
        except TypeError:
            raise InvalidInput("'items' must be a list of line items")
        if not line_items:
            raise InvalidInput("'items' must contain at least one line item")

        for item in line_items:
            if not isinstance(item.name, str) or not item.name.strip():
                raise InvalidInput(f"Every item needs a non-empty name, got {item.name!r}")
            quantity = item.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, (int, float, Decimal)):
                raise InvalidInput(f"Item '{item.name}' has a non-numeric quantity: {quantity!r}")
            quantity = to_decimal(quantity)
            if not quantity.is_finite() or quantity <= 0:
                raise InvalidInput(
                    f"Item '{item.name}' has invalid quantity {item.quantity}; "
                    "quantity must be a positive finite number"
                )
            if quantity > MAX_QUANTITY:
                raise InvalidInput(
                    f"Item '{item.name}' has quantity {item.quantity}; "
                    f"quantity must not exceed {MAX_QUANTITY}"
                )
            if item.unit is not None and not isinstance(item.unit, str):
                raise InvalidInput(f"Item '{item.name}' has a non-text unit: {item.unit!r}")

        return line_items

    def price_item(self, item: LineItem, region_code: str) -> PricedMaterial:
        """Price a single validated line item."""
        quantity = to_decimal(item.quantity)
        unit_cost, source = self.resolve_unit_cost(item.name, region_code)
        return PricedMaterial(
            item=item.name,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=round2(quantity * unit_cost),
            unit=item.unit,
            price_source=source
        )

    def labor_block(self) -> LaborEntry:
        return LaborEntry(
            item=LABOR_DESCRIPTION,
            quantity=self.labor_hours,
            unit_cost=round2(self.labor_rate),
            total_cost=round2(self.labor_hours * self.labor_rate)
        )

    def estimate(
        self,
        items: Iterable[Union[LineItem, Dict[str, Any]]],
        region_code: str
    ) -> Estimate:
        """
        Calculate the complete estimate for a list of items.

        Args:
            items: LineItems or {name, quantity, unit?} dicts (non-empty)
            region_code: Opaque region identifier such as a ZIP code

        Returns:
            Estimate with materials, labor, fee and totals

        Raises:
            InvalidInput: empty items, unnamed item, or bad or oversized quantity
            InternalError: anything unexpected while pricing
        """
        if not isinstance(region_code, str) or not region_code:
            raise InvalidInput("'region_code' must be a non-empty string")

        line_items = self._validate_items(items)

        try:
            with localcontext() as ctx:
                ctx.prec = ARITHMETIC_PRECISION
                materials = [self.price_item(item, region_code) for item in line_items]
                total_material_cost = sum((m.total_cost for m in materials), Decimal("0.00"))

                labor = [self.labor_block()]
                total_labor_cost = sum((entry.total_cost for entry in labor), Decimal("0.00"))

                subtotal = total_material_cost + total_labor_cost
                platform_fee = round2(subtotal * self.fee_rate)
                total_project_cost = round2(subtotal + platform_fee)
        except (InvalidInput, InternalError):
            raise
        except Exception as e:
            raise InternalError(f"Failed to compute estimate: {e}") from e

        return Estimate(
            materials=materials,
            labor=labor,
            total_material_cost=total_material_cost,
            total_labor_cost=total_labor_cost,
            subtotal=subtotal,
            platform_fee_percent=self.fee_percent,
            platform_fee=platform_fee,
            total_project_cost=total_project_cost,
            region_code=region_code,
            notes=DISCLAIMER.format(fee_percent=_format_percent(self.fee_percent))
        )


_default_estimator = CostEstimator()


def compute_estimate(
    items: Iterable[Union[LineItem, Dict[str, Any]]],
    region_code: str,
    estimator: Optional[CostEstimator] = None
) -> Estimate:
    """Compute an estimate with the default 10% fee and 8h @ $70/h labor block."""
    return (estimator or _default_estimator).estimate(items, region_code)
