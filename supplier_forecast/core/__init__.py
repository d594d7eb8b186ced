from .forecast_engine import (
    FilterMode, AbcCurve, ProductionReason, ForecastParameters,
    SalesRecord, CatalogProduct, ForecastItem, ForecastResult, AbcThresholds,
    calculate_avg_daily_sales, calculate_days_of_coverage,
    calculate_abc_thresholds, classify_abc, calculate_priority_score,
    determine_production_need, deduplicate_by_sku, compute_forecast,
    NO_VELOCITY_COVERAGE_DAYS
)
from .link_matching import SupplierLinkSet, matches_any_pattern

__all__ = [
    'FilterMode',
    'AbcCurve',
    'ProductionReason',
    'ForecastParameters',
    'SalesRecord',
    'CatalogProduct',
    'ForecastItem',
    'ForecastResult',
    'AbcThresholds',
    'calculate_avg_daily_sales',
    'calculate_days_of_coverage',
    'calculate_abc_thresholds',
    'classify_abc',
    'calculate_priority_score',
    'determine_production_need',
    'deduplicate_by_sku',
    'compute_forecast',
    'NO_VELOCITY_COVERAGE_DAYS',
    'SupplierLinkSet',
    'matches_any_pattern'
]
