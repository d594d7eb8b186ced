# supplier_forecast/services/catalog_service.py
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from supplier_forecast.core.forecast_engine import CatalogProduct
from supplier_forecast.models import Product


def _not_deleted():
    return or_(Product.is_deleted.is_(False), Product.is_deleted.is_(None))


class CatalogService:
    """Tenant-scoped read access to products."""

    def __init__(self, session: Session):
        """Initialize the catalog service.

        Args:
            session: Database session
        """
        self.session = session

    def get_products(self, company_id: int) -> List[Product]:
        """Get all non-deleted products of a company.

        Args:
            company_id: Company (tenant) ID

        Returns:
            List of product objects ordered by id
        """
        return self.session.query(Product).filter(
            Product.company_id == company_id,
            _not_deleted()
        ).order_by(Product.id).all()

    def get_catalog(self, company_id: int) -> Dict[str, CatalogProduct]:
        """Get the company's products keyed by SKU.

        If a SKU appears twice, the most recently created product wins.

        Args:
            company_id: Company (tenant) ID

        Returns:
            Dictionary of SKU to CatalogProduct
        """
        return {
            product.sku: CatalogProduct(
                id=product.id,
                sku=product.sku,
                name=product.name,
                stock=product.stock or 0,
                image_url=product.image_url
            )
            for product in self.get_products(company_id)
        }

    def get_product_by_sku(self, company_id: int, sku: str) -> Optional[Product]:
        """Get a non-deleted product by SKU.

        Args:
            company_id: Company (tenant) ID
            sku: SKU code

        Returns:
            Product object or None if not found
        """
        return self.session.query(Product).filter(
            Product.company_id == company_id,
            Product.sku == sku,
            _not_deleted()
        ).order_by(Product.id.desc()).first()

    def get_product(self, company_id: int, product_id: int) -> Optional[Product]:
        """Get a non-deleted product by id within a company."""
        return self.session.query(Product).filter(
            Product.company_id == company_id,
            Product.id == product_id,
            _not_deleted()
        ).first()

    def count_products_with_prefix(self, company_id: int, sku_prefix: str) -> int:
        """Count non-deleted products whose SKU starts with a prefix."""
        return self.session.query(Product).filter(
            Product.company_id == company_id,
            Product.sku.startswith(sku_prefix, autoescape=True),
            _not_deleted()
        ).count()
