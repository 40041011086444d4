"""
Supabase Estimate Store for Renovision

Saves computed cost estimates to Supabase so the app can show them later.
Persistence is best effort: a failed write never fails the estimate.
"""

import os
from datetime import datetime
from typing import Optional, Dict, Any, List
from supabase import create_client, Client

from estimator import Estimate

# Supabase configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

ESTIMATES_TABLE = "cost_estimates"

# Initialize Supabase client (will be None if not configured)
supabase: Optional[Client] = None

def get_supabase_client() -> Optional[Client]:
    """Get or create Supabase client."""
    global supabase
    if supabase is None and SUPABASE_URL and SUPABASE_SERVICE_KEY:
        supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return supabase


class SupabaseEstimateStore:
    """Estimate store backed by a Supabase table."""

    def __init__(self, client: Optional[Client] = None):
        self.client = client or get_supabase_client()
        if not self.client:
            print("Warning: Supabase client not initialized. Estimates will not be saved.")

    @staticmethod
    def _to_row(estimate: Estimate) -> Dict[str, Any]:
        """Flatten an estimate into a table row."""
        data = estimate.to_dict()
        return {
            "region_code": estimate.region_code,
            "materials": data["materials"],
            "labor": data["labor"],
            "total_material_cost": data["totalMaterialCost"],
            "total_labor_cost": data["totalLaborCost"],
            "subtotal": data["subtotal"],
            "platform_fee_percent": data["platformFeePercent"],
            "platform_fee": data["platformFee"],
            "total_project_cost": data["totalProjectCost"],
            "notes": estimate.notes,
            "created_at": estimate.created_at or datetime.now().isoformat(),
        }

    def save_estimate(self, estimate: Estimate) -> Optional[Dict[str, Any]]:
        """Insert an estimate. Returns the stored row, or None."""
        if not self.client:
            return None
        try:
            result = self.client.table(ESTIMATES_TABLE).insert(self._to_row(estimate)).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            print(f"Error saving estimate: {e}")
            return None

    def get_estimate(self, estimate_id: str) -> Optional[Dict[str, Any]]:
        """Get a stored estimate by ID."""
        if not self.client:
            return None
        try:
            result = self.client.table(ESTIMATES_TABLE).select("*").eq("id", estimate_id).single().execute()
            return result.data
        except Exception as e:
            print(f"Error getting estimate: {e}")
            return None

    def list_estimates_for_region(self, region_code: str, limit: int = 20) -> List[Dict[str, Any]]:
        """List the most recent estimates for a region code."""
        if not self.client:
            return []
        try:
            result = (
                self.client.table(ESTIMATES_TABLE)
                .select("*")
                .eq("region_code", region_code)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return result.data or []
        except Exception as e:
            print(f"Error listing estimates: {e}")
            return []


# Global store instance
estimate_store = SupabaseEstimateStore()
