# supplier_forecast/core/forecast_engine.py
"""Production forecast for a supplier's linked SKUs.

Pure computation: every input is read beforehand by the services layer, so
the functions here never touch the database and never raise for business
edge cases such as zero velocity or missing stock. Those degrade to
"item excluded" or an empty result.
"""
import enum
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional

from ..exceptions import ConfigError
from .link_matching import SupplierLinkSet

# Coverage reported for items with no sales velocity. Large enough never to
# pass the low-coverage test; clipped to zero points by the urgency formula.
NO_VELOCITY_COVERAGE_DAYS = 999.0

CURVE_BASE_SCORES = {
    'A': 300,
    'B': 200,
    'C': 100,
}

OUT_OF_STOCK_BONUS = 1000
MAX_COVERAGE_POINTS = 500
POINTS_PER_COVERAGE_DAY = 50
VELOCITY_POINTS_PER_UNIT = 10
MAX_VELOCITY_POINTS = 200


class FilterMode(enum.Enum):
    """Which forecast items to return, by production tag."""
    ALL = 'all'
    WITH_TAG = 'with_tag'
    WITHOUT_TAG = 'without_tag'

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, value: Optional[str]) -> 'FilterMode':
        """Parse a filter value; missing or unknown values mean ALL."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or '').strip().lower())
        except ValueError:
            return cls.ALL

    def accepts(self, is_in_production: bool) -> bool:
        if self is FilterMode.WITH_TAG:
            return is_in_production
        if self is FilterMode.WITHOUT_TAG:
            return not is_in_production
        return True


class AbcCurve(enum.Enum):
    A = 'A'
    B = 'B'
    C = 'C'

    def __str__(self):
        return self.value


class ProductionReason(enum.Enum):
    """Why an item needs production. Values are part of the API contract."""
    OUT_OF_STOCK = 'sem_estoque'
    LOW_STOCK = 'estoque_baixo'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ForecastParameters:
    """Tunable thresholds of the forecast.

    Attributes:
        min_units: Monthly units below which demand is ignored
        sales_window_days: Days covered by one month of sales facts
        coverage_target_days: Days of stock a production run should restore
        low_coverage_days: Coverage below which in-stock items need production
        a_cutoff_pct: Cumulative revenue percentage closing the A band
        b_cutoff_pct: Cumulative revenue percentage closing the B band
    """
    min_units: float = 10
    sales_window_days: int = 30
    coverage_target_days: int = 30
    low_coverage_days: float = 7.0
    a_cutoff_pct: float = 80.0
    b_cutoff_pct: float = 95.0

    @classmethod
    def from_config(cls, rules: Mapping) -> 'ForecastParameters':
        """Build parameters from the FORECAST config section.

        Raises:
            ConfigError if the sales window is not positive or the A cutoff
            exceeds the B cutoff
        """
        defaults = cls()
        parameters = cls(
            min_units=rules.get('min_units', defaults.min_units),
            sales_window_days=rules.get('sales_window_days', defaults.sales_window_days),
            coverage_target_days=rules.get('coverage_target_days', defaults.coverage_target_days),
            low_coverage_days=rules.get('low_coverage_days', defaults.low_coverage_days),
            a_cutoff_pct=rules.get('a_cutoff_pct', defaults.a_cutoff_pct),
            b_cutoff_pct=rules.get('b_cutoff_pct', defaults.b_cutoff_pct),
        )

        if parameters.sales_window_days <= 0:
            raise ConfigError(
                "FORECAST.sales_window_days must be positive",
                code='invalid_forecast_rules'
            )
        if parameters.a_cutoff_pct > parameters.b_cutoff_pct:
            raise ConfigError(
                "FORECAST.a_cutoff_pct must not exceed b_cutoff_pct",
                code='invalid_forecast_rules'
            )

        return parameters


@dataclass(frozen=True)
class SalesRecord:
    """Units and revenue of one SKU in the latest complete month."""
    sku: str
    name: Optional[str]
    units: float
    revenue: float


@dataclass(frozen=True)
class CatalogProduct:
    """Tenant product as seen by the forecast."""
    id: int
    sku: str
    name: str
    stock: float = 0
    image_url: Optional[str] = None


class AbcThresholds(NamedTuple):
    a_threshold: float
    b_threshold: float


@dataclass
class ForecastItem:
    sku: str
    product_name: str
    product_image: Optional[str]
    current_stock: float
    avg_daily_sales: float
    last_30_days_sales: float
    quantity_needed: int
    abc_curve: AbcCurve
    reason: ProductionReason
    priority_score: int
    is_in_production: bool = False

    def to_dict(self) -> Dict:
        """Serialize with the keys the supplier portal expects."""
        return {
            'sku': self.sku,
            'productName': self.product_name,
            'productImage': self.product_image,
            'currentStock': _as_number(self.current_stock),
            'avgDailySales': self.avg_daily_sales,
            'last30DaysSales': _as_number(self.last_30_days_sales),
            'quantityNeeded': self.quantity_needed,
            'abcCurve': self.abc_curve.value,
            'reason': self.reason.value,
            'priorityScore': self.priority_score,
            'isInProduction': self.is_in_production,
        }


@dataclass
class ForecastResult:
    items: List[ForecastItem] = field(default_factory=list)
    total: int = 0
    in_production: int = 0
    latest_data_month: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def empty(cls, message: str, latest_data_month: Optional[str] = None) -> 'ForecastResult':
        return cls(latest_data_month=latest_data_month, message=message)

    def to_dict(self) -> Dict:
        result = {
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'in_production': self.in_production,
            'latest_data_month': self.latest_data_month,
        }
        if self.message:
            result['message'] = self.message
        return result


def _as_number(value):
    """Render integral floats as ints."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _to_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def calculate_avg_daily_sales(units: float, sales_window_days: int = 30) -> float:
    """Average units sold per day over the sales window."""
    if sales_window_days <= 0:
        return 0.0
    return units / sales_window_days


def calculate_days_of_coverage(current_stock: float, avg_daily_sales: float) -> float:
    """Days the current stock lasts at the average daily sales rate.

    Zero velocity yields NO_VELOCITY_COVERAGE_DAYS instead of dividing by zero.
    """
    if avg_daily_sales > 0:
        return current_stock / avg_daily_sales
    return NO_VELOCITY_COVERAGE_DAYS


def calculate_abc_thresholds(
    revenues: Iterable[float],
    a_cutoff_pct: float = 80.0,
    b_cutoff_pct: float = 95.0
) -> AbcThresholds:
    """Revenue thresholds of the A and B bands.

    Revenues are walked in descending order with a running cumulative
    percentage. Each threshold takes the revenue of the first position whose
    cumulative percentage is within its cutoff and is never revised. When the
    largest revenue alone exceeds the A cutoff the A threshold stays at 0 and
    every item classifies as A.

    Args:
        revenues: Revenues of every candidate item of the request
        a_cutoff_pct: Cumulative percentage closing the A band
        b_cutoff_pct: Cumulative percentage closing the B band

    Returns:
        AbcThresholds(a_threshold, b_threshold)
    """
    ordered = sorted((_to_float(r) for r in revenues), reverse=True)
    total_revenue = sum(ordered)

    a_threshold = 0.0
    b_threshold = 0.0

    if total_revenue == 0:
        return AbcThresholds(a_threshold, b_threshold)

    cumulative = 0.0
    for revenue in ordered:
        cumulative += revenue
        percentage = (cumulative / total_revenue) * 100

        if percentage <= a_cutoff_pct and a_threshold == 0:
            a_threshold = revenue
        if percentage <= b_cutoff_pct and b_threshold == 0:
            b_threshold = revenue

    return AbcThresholds(a_threshold, b_threshold)


def classify_abc(revenue: float, thresholds: AbcThresholds) -> AbcCurve:
    """Classify a revenue against precomputed band thresholds."""
    if revenue >= thresholds.a_threshold:
        return AbcCurve.A
    if revenue >= thresholds.b_threshold:
        return AbcCurve.B
    return AbcCurve.C


def calculate_priority_score(
    abc_curve: AbcCurve,
    current_stock: float,
    avg_daily_sales: float,
    days_of_coverage: float
) -> int:
    """Composite urgency score, higher is more urgent.

    Args:
        abc_curve: Revenue class of the item
        current_stock: Units on hand
        avg_daily_sales: Average units sold per day
        days_of_coverage: Days the stock lasts

    Returns:
        Integer score (curve base + stock urgency + sales velocity)
    """
    score = CURVE_BASE_SCORES[abc_curve.value]

    if current_stock == 0:
        score += OUT_OF_STOCK_BONUS
    else:
        score += max(0, MAX_COVERAGE_POINTS - (days_of_coverage * POINTS_PER_COVERAGE_DAY))

    score += min(avg_daily_sales * VELOCITY_POINTS_PER_UNIT, MAX_VELOCITY_POINTS)

    # Half-up rounding
    return int(math.floor(score + 0.5))


def determine_production_need(
    units: float,
    current_stock: float,
    days_of_coverage: float,
    parameters: ForecastParameters
):
    """Decide whether an item needs production.

    Args:
        units: Units sold in the sales window
        current_stock: Units on hand
        days_of_coverage: Days the stock lasts
        parameters: Forecast parameters

    Returns:
        (ProductionReason, quantity_needed) or None when stock is sufficient
    """
    # avg_daily_sales * coverage_target_days, kept exact for integral units
    target_stock = math.ceil(
        units * parameters.coverage_target_days / parameters.sales_window_days
    ) if parameters.sales_window_days > 0 else 0

    if current_stock == 0:
        return ProductionReason.OUT_OF_STOCK, target_stock

    if days_of_coverage < parameters.low_coverage_days:
        return ProductionReason.LOW_STOCK, max(0, math.ceil(target_stock - current_stock))

    return None


def deduplicate_by_sku(items: Iterable[ForecastItem]) -> List[ForecastItem]:
    """Keep the first occurrence of every SKU."""
    seen = set()
    unique = []
    for item in items:
        if item.sku in seen:
            continue
        seen.add(item.sku)
        unique.append(item)
    return unique


def compute_forecast(
    sales: Iterable[SalesRecord],
    catalog: Mapping[str, CatalogProduct],
    link_set: SupplierLinkSet,
    production_tags: Optional[Mapping[str, bool]] = None,
    filter_mode: FilterMode = FilterMode.ALL,
    parameters: Optional[ForecastParameters] = None,
    latest_data_month: Optional[str] = None
) -> ForecastResult:
    """Rank a supplier's SKUs that need production.

    Args:
        sales: Aggregated sales of the latest complete month
        catalog: Tenant products keyed by SKU (deleted products excluded)
        link_set: Supplier's individual and pattern links
        production_tags: SKU -> is-in-production lookup for the supplier
        filter_mode: Which tagged items to return
        parameters: Forecast thresholds
        latest_data_month: Label of the month the sales belong to

    Returns:
        ForecastResult with items sorted by descending priority. ``total``
        and ``in_production`` count the deduplicated set before filter_mode
        is applied.
    """
    parameters = parameters or ForecastParameters()
    production_tags = production_tags or {}

    # Sales of linked catalog products with enough demand
    candidates = []
    for sale in sales:
        product = catalog.get(sale.sku)
        if product is None:
            continue
        if not link_set.matches(sale.sku, product.id):
            continue

        units = _to_float(sale.units)
        if units < parameters.min_units:
            continue

        candidates.append((sale, product, units, _to_float(sale.revenue)))

    thresholds = calculate_abc_thresholds(
        (revenue for _, _, _, revenue in candidates),
        parameters.a_cutoff_pct,
        parameters.b_cutoff_pct
    )

    items = []
    for sale, product, units, revenue in candidates:
        current_stock = _to_float(product.stock)
        avg_daily_sales = calculate_avg_daily_sales(units, parameters.sales_window_days)
        days_of_coverage = calculate_days_of_coverage(current_stock, avg_daily_sales)

        need = determine_production_need(units, current_stock, days_of_coverage, parameters)
        if need is None:
            continue
        reason, quantity_needed = need

        abc_curve = classify_abc(revenue, thresholds)
        priority_score = calculate_priority_score(
            abc_curve, current_stock, avg_daily_sales, days_of_coverage
        )

        items.append(ForecastItem(
            sku=str(sale.sku),
            product_name=str(product.name),
            product_image=product.image_url or None,
            current_stock=current_stock,
            avg_daily_sales=avg_daily_sales,
            last_30_days_sales=units,
            quantity_needed=quantity_needed,
            abc_curve=abc_curve,
            reason=reason,
            priority_score=priority_score,
            is_in_production=bool(production_tags.get(sale.sku, False)),
        ))

    # sorted() is stable, so equal scores keep their input order
    ranked = sorted(items, key=lambda item: item.priority_score, reverse=True)
    ranked = deduplicate_by_sku(ranked)

    return ForecastResult(
        items=[item for item in ranked if filter_mode.accepts(item.is_in_production)],
        total=len(ranked),
        in_production=sum(1 for item in ranked if item.is_in_production),
        latest_data_month=latest_data_month,
    )
