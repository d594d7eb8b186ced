# supplier_forecast/services/sales_service.py
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from supplier_forecast.core.forecast_engine import SalesRecord
from supplier_forecast.models import SalesFact, SalesMonth

logger = logging.getLogger(__name__)


class SalesService:
    """Read access to the monthly sales facts produced by ingestion."""

    def __init__(self, session: Session):
        """Initialize the sales service.

        Args:
            session: Database session
        """
        self.session = session

    def get_latest_complete_month(self) -> Optional[str]:
        """Get the most recent month whose ingestion is complete.

        Returns:
            Month label (YYYY-MM) or None if no month is complete
        """
        row = self.session.query(SalesMonth.month_year).filter(
            SalesMonth.is_complete.is_(True)
        ).order_by(SalesMonth.month_year.desc()).first()

        return row[0] if row else None

    def get_month_sales(self, month_year: str) -> List[SalesRecord]:
        """Get units and revenue per SKU for a month, summed over sub-sources.

        Rows are grouped by SKU and name, so a SKU sold under two names
        yields two records.

        Args:
            month_year: Month label (YYYY-MM)

        Returns:
            List of SalesRecord
        """
        rows = self.session.query(
            SalesFact.sku,
            SalesFact.name,
            func.sum(SalesFact.units).label('units'),
            func.sum(SalesFact.revenue).label('revenue')
        ).filter(
            SalesFact.month_year == month_year
        ).group_by(
            SalesFact.sku, SalesFact.name
        ).order_by(
            SalesFact.sku, SalesFact.name
        ).all()

        logger.debug(f"Loaded {len(rows)} aggregated sales rows for {month_year}")

        return [
            SalesRecord(
                sku=row.sku,
                name=row.name,
                units=float(row.units or 0),
                revenue=float(row.revenue or 0)
            )
            for row in rows
        ]
