"""
Renovision - Estimate data model

Line items come in, priced materials and labor come out. All currency
values are Decimals rounded to cents so repeated additions never drift.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidInput

CENTS = Decimal("0.01")

Number = Union[int, float, Decimal]


def round2(value: Number) -> Decimal:
    """Round a currency value to 2 decimal places (half up)."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 479.99 as 479.99 instead of its binary expansion
    return Decimal(str(value))


@dataclass
class LineItem:
    """A named item and how many of it the project needs."""
    name: str
    quantity: Number
    unit: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """Build a LineItem from the wire shape {name, quantity, unit?}."""
        if not isinstance(data, dict):
            raise InvalidInput(f"Each item must be an object with 'name' and 'quantity', got {data!r}")
        return cls(
            name=data.get("name"),
            quantity=data.get("quantity"),
            unit=data.get("unit"),
        )


@dataclass
class PricedMaterial:
    """A line item with its resolved unit cost."""
    item: str
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal
    unit: Optional[str] = None
    price_source: str = "table"  # "table", "lookup" or "default"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "item": self.item,
            "quantity": float(self.quantity),
            "unitCost": float(self.unit_cost),
            "totalCost": float(self.total_cost),
            "priceSource": self.price_source,
        }
        if self.unit:
            data["unit"] = self.unit
        return data


@dataclass
class LaborEntry:
    """A block of labor hours at an hourly rate."""
    item: str
    quantity: Decimal  # hours
    unit_cost: Decimal  # rate per hour
    total_cost: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "quantity": float(self.quantity),
            "unitCost": float(self.unit_cost),
            "totalCost": float(self.total_cost),
        }


@dataclass
class Estimate:
    """Complete cost estimate for one request."""
    materials: List[PricedMaterial]
    labor: List[LaborEntry]
    total_material_cost: Decimal
    total_labor_cost: Decimal
    subtotal: Decimal
    platform_fee_percent: Decimal
    platform_fee: Decimal
    total_project_cost: Decimal
    region_code: str
    notes: str
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(), compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON shape returned over HTTP."""
        return {
            "materials": [m.to_dict() for m in self.materials],
            "labor": [entry.to_dict() for entry in self.labor],
            "totalMaterialCost": float(self.total_material_cost),
            "totalLaborCost": float(self.total_labor_cost),
            "subtotal": float(self.subtotal),
            "platformFeePercent": float(self.platform_fee_percent),
            "platformFee": float(self.platform_fee),
            "totalProjectCost": float(self.total_project_cost),
            "regionCode": self.region_code,
            "zipCode": self.region_code,
            "notes": self.notes,
            "createdAt": self.created_at,
        }
