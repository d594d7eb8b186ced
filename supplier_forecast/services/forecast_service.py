# supplier_forecast/services/forecast_service.py
import logging
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from supplier_forecast.config import config
from supplier_forecast.core.forecast_engine import (
    FilterMode, ForecastParameters, ForecastResult, compute_forecast
)
from supplier_forecast.exceptions import ForecastError
from supplier_forecast.services.catalog_service import CatalogService
from supplier_forecast.services.production_tag_service import ProductionTagService
from supplier_forecast.services.sales_service import SalesService
from supplier_forecast.services.supplier_link_service import SupplierLinkService

logger = logging.getLogger(__name__)

NO_SALES_MONTH_MESSAGE = "No sales spreadsheet found. Import sales data first."
NO_SALES_DATA_MESSAGE = "No sales data found for the most recent month."
NO_LINKS_MESSAGE = "No products are linked to this supplier."


class ForecastService:
    """Builds the production forecast of a supplier."""

    def __init__(self, session: Session, parameters: Optional[ForecastParameters] = None):
        """Initialize the forecast service.

        Args:
            session: Database session
            parameters: Forecast thresholds, defaults to the FORECAST config section
        """
        self.session = session
        self.parameters = parameters or ForecastParameters.from_config(config.forecast_rules)

        self.sales_service = SalesService(session)
        self.catalog_service = CatalogService(session)
        self.link_service = SupplierLinkService(session)
        self.tag_service = ProductionTagService(session)

    def get_forecast(
        self,
        supplier_id: int,
        filter_mode: Union[FilterMode, str, None] = FilterMode.ALL
    ) -> ForecastResult:
        """Compute the ranked list of SKUs the supplier should produce.

        Args:
            supplier_id: Supplier ID
            filter_mode: FilterMode or its string value

        Returns:
            ForecastResult. Missing sales data or links give an empty
            result with a message, not an error.

        Raises:
            NotFoundError if the supplier does not exist
            ForecastError if the data could not be read
        """
        filter_mode = FilterMode.from_string(filter_mode)

        try:
            supplier = self.link_service.get_supplier(supplier_id)

            latest_month = self.sales_service.get_latest_complete_month()
            if not latest_month:
                logger.info(f"Supplier {supplier_id}: no complete sales month available")
                return ForecastResult.empty(NO_SALES_MONTH_MESSAGE)

            sales = self.sales_service.get_month_sales(latest_month)
            if not sales:
                logger.info(f"Supplier {supplier_id}: no sales rows for {latest_month}")
                return ForecastResult.empty(NO_SALES_DATA_MESSAGE, latest_month)

            link_set = self.link_service.get_link_set(supplier_id)
            if link_set.is_empty:
                logger.info(f"Supplier {supplier_id}: no linked products")
                return ForecastResult.empty(NO_LINKS_MESSAGE, latest_month)

            catalog = self.catalog_service.get_catalog(supplier.company_id)
            production_tags = self.tag_service.get_tag_lookup(supplier_id)

        except SQLAlchemyError as e:
            logger.error(f"Error reading forecast data for supplier {supplier_id}: {e}")
            raise ForecastError("Failed to read forecast data", code='data_access_failed')

        result = compute_forecast(
            sales=sales,
            catalog=catalog,
            link_set=link_set,
            production_tags=production_tags,
            filter_mode=filter_mode,
            parameters=self.parameters,
            latest_data_month=latest_month
        )

        logger.info(
            f"Supplier {supplier_id} forecast for {latest_month}: "
            f"{result.total} item(s), {result.in_production} in production, "
            f"{len(result.items)} returned (filter={filter_mode})"
        )
        return result
