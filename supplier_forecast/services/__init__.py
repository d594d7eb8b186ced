from .sales_service import SalesService
from .catalog_service import CatalogService
from .supplier_link_service import SupplierLinkService
from .production_tag_service import ProductionTagService
from .forecast_service import ForecastService

__all__ = [
    'SalesService',
    'CatalogService',
    'SupplierLinkService',
    'ProductionTagService',
    'ForecastService'
]
