"""
Renovision - FastAPI Backend API

This API prices renovation line items into a cost estimate with materials,
labor and the platform fee, and can render the estimate as a PDF.
"""

import os
import sys
from typing import Any, Optional, List, Dict
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables
load_dotenv()

from estimator import (
    CostEstimator,
    Estimate,
    InvalidInput,
    OpenAIPriceLookup,
    PricingDatabase,
    PLATFORM_FEE_RATE,
    DEFAULT_LABOR_HOURS,
    DEFAULT_LABOR_RATE,
)
from api.pdf_generator import PDFReportGenerator
from api.supabase_store import estimate_store

VERSION = "1.0.0"

INVALID_BODY_MESSAGE = "Invalid request body. Expected 'items' (array) and 'zipCode' (string)."

# Initialize FastAPI app
app = FastAPI(
    title="Renovision Cost Estimate API",
    description="Renovation material and labor cost estimation",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Origin", "Accept"],
)


def build_price_lookup() -> Optional[OpenAIPriceLookup]:
    """Create the delegated price lookup if PRICING_PROVIDER asks for one."""
    provider = os.getenv("PRICING_PROVIDER", "static").lower()
    if provider != "openai":
        return None
    try:
        return OpenAIPriceLookup()
    except ValueError as e:
        print(f"Warning: {e} Falling back to static pricing.")
        return None


def build_estimator() -> CostEstimator:
    """Create the estimator from environment configuration."""
    return CostEstimator(
        fee_rate=os.getenv("PLATFORM_FEE_RATE", str(PLATFORM_FEE_RATE)),
        labor_hours=os.getenv("LABOR_HOURS", str(DEFAULT_LABOR_HOURS)),
        labor_rate=os.getenv("LABOR_RATE", str(DEFAULT_LABOR_RATE)),
        price_lookup=build_price_lookup()
    )


# Initialize services
estimator = build_estimator()
pdf_generator = PDFReportGenerator()


# ============================================================================
# Pydantic Models
# ============================================================================

class CostEstimateRequest(BaseModel):
    # Raw {name, quantity, unit?} objects, validated by the estimator
    items: List[Dict[str, Any]]
    zipCode: str = Field(..., min_length=1)


class MaterialLine(BaseModel):
    item: str
    quantity: float
    unitCost: float
    totalCost: float
    unit: Optional[str] = None
    priceSource: str


class LaborLine(BaseModel):
    item: str
    quantity: float
    unitCost: float
    totalCost: float


class EstimateResponse(BaseModel):
    materials: List[MaterialLine]
    labor: List[LaborLine]
    totalMaterialCost: float
    totalLaborCost: float
    subtotal: float
    platformFeePercent: float
    platformFee: float
    totalProjectCost: float
    regionCode: str
    zipCode: str
    notes: str
    createdAt: str


class PricingResponse(BaseModel):
    prices: Dict[str, float]
    defaultUnitPrice: float
    laborHours: float
    laborRate: float
    platformFeePercent: float
    pricingProvider: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=400,
        content={"detail": INVALID_BODY_MESSAGE, "errors": jsonable_errors(exc)}
    )


def jsonable_errors(exc: RequestValidationError) -> List[Dict]:
    return [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


def run_estimate(request: CostEstimateRequest) -> Estimate:
    """Compute an estimate, mapping failures to HTTP errors."""
    try:
        return estimator.estimate(request.items, request.zipCode)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        print(f"Error in cost estimate: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", response_model=HealthResponse)
async def root():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=VERSION
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=VERSION
    )


@app.post("/cost-estimate", response_model=EstimateResponse, response_model_exclude_none=True)
def get_cost_estimate(request: CostEstimateRequest):
    """
    Price line items for a ZIP code.

    Returns: Materials, labor, platform fee and project total
    """
    estimate = run_estimate(request)

    # Best effort, never fails the response
    estimate_store.save_estimate(estimate)

    return EstimateResponse(**estimate.to_dict())


@app.post("/cost-estimate/pdf")
def get_cost_estimate_pdf(
    request: CostEstimateRequest,
    project_name: str = Query("Renovation Estimate")
):
    """
    Price line items and return the estimate as a downloadable PDF.
    """
    estimate = run_estimate(request)

    try:
        pdf_buffer = pdf_generator.generate_report(estimate, project_name=project_name)
    except Exception as e:
        print(f"Error generating PDF: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in project_name) or "estimate"
    download_filename = f"{safe_name}_{datetime.now().strftime('%Y%m%d')}.pdf"

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{download_filename}"'
        }
    )


@app.get("/api/v1/pricing", response_model=PricingResponse)
async def get_pricing():
    """
    Get the static unit price table and the labor and fee settings.
    """
    return PricingResponse(
        prices={name: float(price) for name, price in PricingDatabase.get_all_prices().items()},
        defaultUnitPrice=float(PricingDatabase.DEFAULT_UNIT_PRICE),
        laborHours=float(estimator.labor_hours),
        laborRate=float(estimator.labor_rate),
        platformFeePercent=float(estimator.fee_percent),
        pricingProvider="openai" if estimator.price_lookup is not None else "static"
    )


@app.get("/api/v1/estimates")
def list_estimates(region_code: str = Query(..., min_length=1), limit: int = Query(20, ge=1, le=100)):
    """
    List recently saved estimates for a ZIP / region code.
    """
    return estimate_store.list_estimates_for_region(region_code, limit=limit)


@app.get("/api/v1/estimates/{estimate_id}")
def get_saved_estimate(estimate_id: str):
    """
    Get a saved estimate by ID.
    """
    row = estimate_store.get_estimate(estimate_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Estimate not found")
    return row


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
