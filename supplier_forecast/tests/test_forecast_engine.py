"""
Tests for the production forecast engine.
"""
import unittest

from supplier_forecast.core.forecast_engine import (
    AbcCurve,
    AbcThresholds,
    CatalogProduct,
    FilterMode,
    ForecastParameters,
    ProductionReason,
    SalesRecord,
    NO_VELOCITY_COVERAGE_DAYS,
    calculate_abc_thresholds,
    calculate_days_of_coverage,
    calculate_priority_score,
    classify_abc,
    compute_forecast,
    determine_production_need,
)
from supplier_forecast.core.link_matching import SupplierLinkSet
from supplier_forecast.exceptions import ConfigError


def make_catalog(*products):
    return {product.sku: product for product in products}


class TestAbcClassification(unittest.TestCase):
    """Test cases for ABC revenue classification."""

    def test_thresholds_take_first_position_within_cutoff(self):
        """Both thresholds are fixed at the first position inside their cutoff."""
        thresholds = calculate_abc_thresholds([100, 500, 40, 300, 60])

        self.assertEqual(thresholds, AbcThresholds(500, 500))
        self.assertEqual(classify_abc(500, thresholds), AbcCurve.A)
        self.assertEqual(classify_abc(300, thresholds), AbcCurve.C)

    def test_dominant_item_makes_everything_a(self):
        """A top item above 80% leaves the A threshold at zero."""
        thresholds = calculate_abc_thresholds([900, 50, 30, 20])

        self.assertEqual(thresholds.a_threshold, 0)
        self.assertEqual(thresholds.b_threshold, 900)
        for revenue in (900, 50, 30, 20):
            self.assertEqual(classify_abc(revenue, thresholds), AbcCurve.A)

    def test_zero_total_revenue(self):
        """No revenue gives zero thresholds instead of dividing by zero."""
        self.assertEqual(calculate_abc_thresholds([0, 0]), AbcThresholds(0.0, 0.0))
        self.assertEqual(calculate_abc_thresholds([]), AbcThresholds(0.0, 0.0))

    def test_classify_with_separate_bands(self):
        """Classification honours distinct A and B thresholds."""
        thresholds = AbcThresholds(500, 100)

        self.assertEqual(classify_abc(600, thresholds), AbcCurve.A)
        self.assertEqual(classify_abc(200, thresholds), AbcCurve.B)
        self.assertEqual(classify_abc(100, thresholds), AbcCurve.B)
        self.assertEqual(classify_abc(99, thresholds), AbcCurve.C)


class TestPriorityScore(unittest.TestCase):
    """Test cases for the priority score."""

    def test_out_of_stock_score(self):
        score = calculate_priority_score(AbcCurve.C, 0, 30.0, 0)
        # 100 base + 1000 out of stock + velocity capped at 200
        self.assertEqual(score, 1300)

    def test_low_coverage_score(self):
        score = calculate_priority_score(AbcCurve.B, 10, 2.0, 5.0)
        # 200 base + (500 - 250) + 20
        self.assertEqual(score, 470)

    def test_coverage_points_never_negative(self):
        score = calculate_priority_score(AbcCurve.A, 100, 1.0, 100.0)
        self.assertEqual(score, 310)

    def test_rounds_half_up(self):
        score = calculate_priority_score(AbcCurve.A, 20, 1.25, 16.0)
        # 300 + 0 + 12.5
        self.assertEqual(score, 313)

    def test_sentinel_coverage_scores_zero_urgency(self):
        score = calculate_priority_score(AbcCurve.A, 5, 0.0, NO_VELOCITY_COVERAGE_DAYS)
        self.assertEqual(score, 300)


class TestProductionNeed(unittest.TestCase):
    """Test cases for coverage and need determination."""

    def setUp(self):
        self.parameters = ForecastParameters()

    def test_zero_velocity_coverage(self):
        self.assertEqual(calculate_days_of_coverage(10, 0), NO_VELOCITY_COVERAGE_DAYS)
        self.assertEqual(calculate_days_of_coverage(0, 2.0), 0)

    def test_out_of_stock(self):
        reason, quantity = determine_production_need(300, 0, 0, self.parameters)
        self.assertEqual(reason, ProductionReason.OUT_OF_STOCK)
        self.assertEqual(quantity, 300)

    def test_low_stock(self):
        coverage = calculate_days_of_coverage(5, 50 / 30)
        reason, quantity = determine_production_need(50, 5, coverage, self.parameters)
        self.assertEqual(reason, ProductionReason.LOW_STOCK)
        self.assertEqual(quantity, 45)

    def test_low_stock_quantity_never_negative(self):
        params = ForecastParameters(coverage_target_days=5, low_coverage_days=30)
        reason, quantity = determine_production_need(30, 10, 10.0, params)
        self.assertEqual(reason, ProductionReason.LOW_STOCK)
        self.assertEqual(quantity, 0)

    def test_sufficient_stock(self):
        self.assertIsNone(determine_production_need(15, 100, 200.0, self.parameters))

    def test_sentinel_never_needs_production(self):
        self.assertIsNone(
            determine_production_need(0, 5, NO_VELOCITY_COVERAGE_DAYS, self.parameters)
        )


class TestComputeForecast(unittest.TestCase):
    """Test cases for the full forecast computation."""

    def test_single_out_of_stock_item(self):
        """Only the out-of-stock SKU needs production; the other has 200 days."""
        sales = [
            SalesRecord('A1', 'Item A1', 300, 1000),
            SalesRecord('A2', 'Item A2', 15, 50),
        ]
        catalog = make_catalog(
            CatalogProduct(1, 'A1', 'Item A1', 0, 'http://img/a1.png'),
            CatalogProduct(2, 'A2', 'Item A2', 100),
        )
        link_set = SupplierLinkSet.from_links([1, 2], [])

        result = compute_forecast(sales, catalog, link_set, latest_data_month='2024-05')

        self.assertEqual(result.total, 1)
        self.assertEqual(result.in_production, 0)
        self.assertEqual(result.latest_data_month, '2024-05')

        item = result.items[0]
        self.assertEqual(item.sku, 'A1')
        self.assertEqual(item.reason, ProductionReason.OUT_OF_STOCK)
        self.assertEqual(item.quantity_needed, 300)
        self.assertEqual(item.abc_curve, AbcCurve.A)
        self.assertEqual(item.priority_score, 1400)
        self.assertFalse(item.is_in_production)

        payload = item.to_dict()
        self.assertEqual(payload['productImage'], 'http://img/a1.png')
        self.assertEqual(payload['last30DaysSales'], 300)
        self.assertEqual(payload['reason'], 'sem_estoque')
        self.assertEqual(payload['abcCurve'], 'A')

    def test_low_stock_item(self):
        sales = [SalesRecord('B1', 'Item B1', 50, 200)]
        catalog = make_catalog(CatalogProduct(1, 'B1', 'Item B1', 5))
        link_set = SupplierLinkSet.from_links([], ['B'])

        result = compute_forecast(sales, catalog, link_set)

        item = result.items[0]
        self.assertEqual(item.reason, ProductionReason.LOW_STOCK)
        self.assertEqual(item.quantity_needed, 45)
        self.assertAlmostEqual(item.avg_daily_sales, 50 / 30)
        self.assertEqual(item.priority_score, 667)

    def test_low_signal_items_are_dropped(self):
        sales = [SalesRecord('S1', 'Item', 9, 500)]
        catalog = make_catalog(CatalogProduct(1, 'S1', 'Item', 0))

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([1], []))

        self.assertEqual(result.items, [])
        self.assertEqual(result.total, 0)

    def test_out_of_stock_quantity_equals_units(self):
        catalog = {}
        sales = []
        for index, units in enumerate([10, 17, 49, 98, 301, 1234]):
            sku = f"SKU{index}"
            catalog[sku] = CatalogProduct(index, sku, sku, 0)
            sales.append(SalesRecord(sku, sku, units, units * 3.5))

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([], ['SKU']))

        self.assertEqual(result.total, 6)
        for item in result.items:
            self.assertEqual(item.reason, ProductionReason.OUT_OF_STOCK)
            self.assertEqual(item.quantity_needed, item.last_30_days_sales)

    def test_only_linked_catalog_skus_qualify(self):
        sales = [
            SalesRecord('AB-1', 'Linked by pattern', 20, 10),
            SalesRecord('ab-2', 'Different case', 20, 10),
            SalesRecord('XY-1', 'Linked by id', 20, 10),
            SalesRecord('XY-2', 'Not linked', 20, 10),
            SalesRecord('ZZ-9', 'Not in catalog', 20, 10),
        ]
        catalog = make_catalog(
            CatalogProduct(1, 'AB-1', 'AB-1', 0),
            CatalogProduct(2, 'ab-2', 'ab-2', 0),
            CatalogProduct(3, 'XY-1', 'XY-1', 0),
            CatalogProduct(4, 'XY-2', 'XY-2', 0),
        )
        link_set = SupplierLinkSet.from_links([3], ['AB'])

        result = compute_forecast(sales, catalog, link_set)

        self.assertEqual(sorted(item.sku for item in result.items), ['AB-1', 'XY-1'])

    def test_no_links_yields_empty_result(self):
        sales = [SalesRecord('A1', 'A1', 100, 100)]
        catalog = make_catalog(CatalogProduct(1, 'A1', 'A1', 0))

        result = compute_forecast(sales, catalog, SupplierLinkSet())

        self.assertEqual(result.items, [])
        self.assertEqual(result.total, 0)

    def test_zero_velocity_does_not_raise(self):
        params = ForecastParameters(min_units=0)
        sales = [SalesRecord('Z1', 'Z1', 0, 0)]
        catalog = make_catalog(CatalogProduct(1, 'Z1', 'Z1', 5))

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([1], []), parameters=params)

        self.assertEqual(result.items, [])

    def test_missing_values_count_as_zero(self):
        sales = [SalesRecord('M1', 'M1', 20, None)]
        catalog = make_catalog(CatalogProduct(1, 'M1', 'M1', None))

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([1], []))

        self.assertEqual(result.items[0].reason, ProductionReason.OUT_OF_STOCK)
        self.assertEqual(result.items[0].current_stock, 0)

    def test_sorted_by_descending_priority(self):
        sales = [
            SalesRecord('P1', 'P1', 20, 10),
            SalesRecord('P2', 'P2', 600, 500),
            SalesRecord('P3', 'P3', 90, 80),
            SalesRecord('P4', 'P4', 45, 30),
        ]
        catalog = make_catalog(
            CatalogProduct(1, 'P1', 'P1', 2),
            CatalogProduct(2, 'P2', 'P2', 0),
            CatalogProduct(3, 'P3', 'P3', 10),
            CatalogProduct(4, 'P4', 'P4', 0),
        )

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([], ['P']))

        scores = [item.priority_score for item in result.items]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(result.items[0].sku, 'P2')

    def test_duplicate_sku_keeps_highest_priority(self):
        """Two facts for one SKU: only the higher scoring one survives."""
        sales = [
            SalesRecord('D1', 'Old name', 20, 10),
            SalesRecord('D1', 'New name', 60, 100),
        ]
        catalog = make_catalog(CatalogProduct(1, 'D1', 'Item D1', 0))

        result = compute_forecast(sales, catalog, SupplierLinkSet.from_links([1], []))

        self.assertEqual(result.total, 1)
        item = result.items[0]
        self.assertEqual(item.last_30_days_sales, 60)
        self.assertEqual(item.quantity_needed, 60)
        # 300 (A) + 1000 (no stock) + 20 (2 units/day)
        self.assertEqual(item.priority_score, 1320)

    def test_filter_modes_keep_totals(self):
        sales = [
            SalesRecord('T1', 'T1', 30, 100),
            SalesRecord('T2', 'T2', 40, 100),
            SalesRecord('T3', 'T3', 50, 100),
        ]
        catalog = make_catalog(
            CatalogProduct(1, 'T1', 'T1', 0),
            CatalogProduct(2, 'T2', 'T2', 0),
            CatalogProduct(3, 'T3', 'T3', 1),
        )
        link_set = SupplierLinkSet.from_links([], ['T'])
        tags = {'T1': True, 'T3': False}

        results = {
            mode: compute_forecast(sales, catalog, link_set, tags, mode)
            for mode in FilterMode
        }

        self.assertEqual(len(results[FilterMode.ALL].items), 3)
        self.assertEqual([i.sku for i in results[FilterMode.WITH_TAG].items], ['T1'])
        self.assertTrue(all(not i.is_in_production for i in results[FilterMode.WITHOUT_TAG].items))
        self.assertEqual(len(results[FilterMode.WITHOUT_TAG].items), 2)

        for result in results.values():
            self.assertEqual(result.total, 3)
            self.assertEqual(result.in_production, 1)

    def test_result_serialization(self):
        result = compute_forecast([], {}, SupplierLinkSet(), latest_data_month='2024-05')
        payload = result.to_dict()

        self.assertEqual(payload, {
            'items': [],
            'total': 0,
            'in_production': 0,
            'latest_data_month': '2024-05',
        })


class TestForecastParameters(unittest.TestCase):

    def test_from_config(self):
        params = ForecastParameters.from_config({'min_units': 5, 'low_coverage_days': 10.0})

        self.assertEqual(params.min_units, 5)
        self.assertEqual(params.low_coverage_days, 10.0)
        self.assertEqual(params.sales_window_days, 30)

    def test_invalid_rules(self):
        with self.assertRaises(ConfigError):
            ForecastParameters.from_config({'sales_window_days': 0})
        with self.assertRaises(ConfigError):
            ForecastParameters.from_config({'a_cutoff_pct': 96.0, 'b_cutoff_pct': 95.0})


class TestFilterMode(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(FilterMode.from_string('with_tag'), FilterMode.WITH_TAG)
        self.assertEqual(FilterMode.from_string(' WITHOUT_TAG '), FilterMode.WITHOUT_TAG)
        self.assertEqual(FilterMode.from_string(FilterMode.WITH_TAG), FilterMode.WITH_TAG)

    def test_unknown_defaults_to_all(self):
        self.assertEqual(FilterMode.from_string(None), FilterMode.ALL)
        self.assertEqual(FilterMode.from_string(''), FilterMode.ALL)
        self.assertEqual(FilterMode.from_string('tagged'), FilterMode.ALL)


if __name__ == '__main__':
    unittest.main()
