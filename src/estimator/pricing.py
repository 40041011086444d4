"""
Renovision - Unit Price Resolution

Unit prices come from a small static table. Names the table does not know
can be handed to an OpenAI chat model; anything still unpriced falls back
to a flat default.
"""

import os
import json
from collections import OrderedDict
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

from openai import OpenAI

from .models import round2


class PricingDatabase:
    """
    Static unit prices for common items.

    Keys are lowercase item names. Prices are per single unit
    (per gallon for paint, per each for furniture).
    """

    PRICES: Dict[str, Decimal] = {
        "modern armchair": Decimal("479.99"),
        "floor lamp": Decimal("125.50"),
        "potted plant": Decimal("85.00"),
        "paint": Decimal("55.00"),  # per gallon
    }

    DEFAULT_UNIT_PRICE = Decimal("150.00")

    @staticmethod
    def normalize(name: str) -> str:
        return " ".join(name.lower().split())

    @classmethod
    def get_price(cls, name: str) -> Optional[Decimal]:
        """Get the unit price for an item name, or None if not in the table."""
        return cls.PRICES.get(cls.normalize(name))

    @classmethod
    def get_all_prices(cls) -> Dict[str, Decimal]:
        return dict(cls.PRICES)


class OpenAIPriceLookup:
    """
    Ask an OpenAI model for a unit price when the static table has none.

    Answers are cached per (item name, region code) so the same request
    always prices the same way within a process. The cache keeps the
    most recently used cache_size entries. Failed calls are not cached.
    """

    PRICE_PROMPT = """You are a renovation cost estimator pricing materials for a homeowner in the US.

Give the typical retail price for ONE unit of the following item, as sold by a
home improvement store near the given ZIP / postal code.

Item: {name}
Region code: {region_code}

Return a JSON object with this exact structure:
{{
    "unit_price": 0.00,
    "unit": "each, gallon, sq ft, box, etc."
}}

Return ONLY the JSON object, no additional text."""

    DEFAULT_CACHE_SIZE = 1024

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client=None,
        cache_size: int = DEFAULT_CACHE_SIZE
    ):
        """
        Initialize the lookup.

        Args:
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY.
            model: Model to use. Defaults to OPENAI_PRICING_MODEL or gpt-4o-mini.
            client: Pre-built OpenAI client (mostly for tests).
            cache_size: Maximum number of cached answers.
        """
        if cache_size < 1:
            raise ValueError(f"cache_size must be at least 1, got {cache_size}")
        self.model = model or os.getenv("OPENAI_PRICING_MODEL", "gpt-4o-mini")
        self.cache_size = cache_size
        self._cache: "OrderedDict[Tuple[str, str], Optional[Decimal]]" = OrderedDict()

        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")
        self.client = OpenAI(api_key=self.api_key)

    def _call_openai(self, name: str, region_code: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": self.PRICE_PROMPT.format(name=name, region_code=region_code),
                }
            ],
            max_tokens=200,
            temperature=0
        )
        return response.choices[0].message.content

    @staticmethod
    def _parse_price(raw_response: str) -> Optional[Decimal]:
        """Pull unit_price out of the model's answer, or None if unusable."""
        json_str = raw_response or ""
        if "```json" in json_str:
            json_str = json_str.split("```json")[1].split("```")[0]
        elif "```" in json_str:
            json_str = json_str.split("```")[1].split("```")[0]

        data = json.loads(json_str.strip())
        try:
            price = Decimal(str(data.get("unit_price")))
        except (InvalidOperation, TypeError):
            return None
        if not price.is_finite() or price <= 0:
            return None
        return round2(price)

    def get_price(self, name: str, region_code: str) -> Optional[Decimal]:
        """
        Get a unit price for an item from the model.

        Returns:
            The unit price, or None if the model could not price it.
        """
        key = (PricingDatabase.normalize(name), region_code)
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        try:
            price = self._parse_price(self._call_openai(name, region_code))
        except Exception as e:
            # not cached, the next request asks again
            print(f"Warning: price lookup failed for '{name}': {e}")
            return None

        self._cache[key] = price
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return price
