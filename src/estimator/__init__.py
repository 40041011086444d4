from .errors import InvalidInput, InternalError
from .models import LineItem, PricedMaterial, LaborEntry, Estimate, round2
from .pricing import PricingDatabase, OpenAIPriceLookup
from .cost_estimator import CostEstimator, compute_estimate, PLATFORM_FEE_RATE, DEFAULT_LABOR_HOURS, DEFAULT_LABOR_RATE, MAX_QUANTITY
