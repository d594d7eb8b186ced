# supplier_forecast/services/supplier_link_service.py
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from supplier_forecast.core.link_matching import SupplierLinkSet
from supplier_forecast.exceptions import NotFoundError, ValidationError
from supplier_forecast.models import Supplier, SupplierProductLink, LinkType
from supplier_forecast.services.catalog_service import CatalogService
from supplier_forecast.utils.validation import validate_sku_pattern

logger = logging.getLogger(__name__)


class SupplierLinkService:
    """Service for supplier-to-product links."""

    def __init__(self, session: Session):
        """Initialize the supplier link service.

        Args:
            session: Database session
        """
        self.session = session
        self.catalog = CatalogService(session)

    def get_supplier(self, supplier_id: int) -> Supplier:
        """Get a supplier by ID.

        Args:
            supplier_id: Supplier ID

        Returns:
            Supplier object

        Raises:
            NotFoundError if the supplier does not exist
        """
        supplier = self.session.query(Supplier).filter(Supplier.id == supplier_id).first()
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found", code='supplier_not_found')
        return supplier

    def get_links(self, supplier_id: int) -> List[SupplierProductLink]:
        """Get all links of a supplier ordered by creation."""
        return self.session.query(SupplierProductLink).filter(
            SupplierProductLink.supplier_id == supplier_id
        ).order_by(SupplierProductLink.id).all()

    def get_link_set(self, supplier_id: int) -> SupplierLinkSet:
        """Get the supplier's linked product ids and SKU patterns.

        Args:
            supplier_id: Supplier ID

        Returns:
            SupplierLinkSet used to decide sales fact membership
        """
        links = self.get_links(supplier_id)

        return SupplierLinkSet.from_links(
            product_ids=[l.product_id for l in links if l.link_type == LinkType.INDIVIDUAL],
            sku_patterns=[l.sku_pattern for l in links if l.link_type == LinkType.PATTERN]
        )

    def get_link_summary(self, supplier_id: int) -> Dict:
        """Describe the supplier's links.

        Args:
            supplier_id: Supplier ID

        Returns:
            Dictionary with linked products, SKU patterns and the number of
            catalog products covered
        """
        supplier = self.get_supplier(supplier_id)
        links = self.get_links(supplier_id)

        products = []
        sku_patterns = []
        pattern_match_count = 0

        for link in links:
            if link.link_type == LinkType.INDIVIDUAL:
                product = self.catalog.get_product(supplier.company_id, link.product_id)
                if not product:
                    continue
                products.append({
                    'link_id': link.id,
                    'id': product.id,
                    'sku': product.sku,
                    'name': product.name,
                    'stock': product.stock
                })
            else:
                sku_patterns.append({
                    'id': link.id,
                    'pattern': link.sku_pattern,
                    'created_at': link.created_at.isoformat() if link.created_at else None
                })
                pattern_match_count += self.catalog.count_products_with_prefix(
                    supplier.company_id, link.sku_pattern
                )

        return {
            'products': products,
            'sku_patterns': sku_patterns,
            'total_linked': len(products) + pattern_match_count
        }

    def add_individual_link(self, supplier_id: int, product_id: int) -> SupplierProductLink:
        """Link one product to a supplier.

        Raises:
            NotFoundError if the supplier or product does not exist
            ValidationError if the product is already linked
        """
        supplier = self.get_supplier(supplier_id)

        product = self.catalog.get_product(supplier.company_id, product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found", code='product_not_found')

        existing = self.session.query(SupplierProductLink).filter(
            SupplierProductLink.supplier_id == supplier_id,
            SupplierProductLink.link_type == LinkType.INDIVIDUAL,
            SupplierProductLink.product_id == product_id
        ).first()
        if existing:
            raise ValidationError("This product is already linked", code='duplicate_link')

        link = SupplierProductLink(
            supplier_id=supplier_id,
            link_type=LinkType.INDIVIDUAL,
            product_id=product_id
        )
        self.session.add(link)
        self.session.flush()

        logger.info(f"Linked product {product.sku} to supplier {supplier_id}")
        return link

    def add_pattern_link(self, supplier_id: int, sku_pattern: str) -> SupplierProductLink:
        """Link every SKU starting with a prefix to a supplier.

        Raises:
            NotFoundError if the supplier does not exist
            ValidationError if the pattern is blank or already linked
        """
        self.get_supplier(supplier_id)
        sku_pattern = validate_sku_pattern(sku_pattern)

        existing = self.session.query(SupplierProductLink).filter(
            SupplierProductLink.supplier_id == supplier_id,
            SupplierProductLink.link_type == LinkType.PATTERN,
            SupplierProductLink.sku_pattern == sku_pattern
        ).first()
        if existing:
            raise ValidationError("This SKU pattern is already linked", code='duplicate_link')

        link = SupplierProductLink(
            supplier_id=supplier_id,
            link_type=LinkType.PATTERN,
            sku_pattern=sku_pattern
        )
        self.session.add(link)
        self.session.flush()

        logger.info(f"Linked SKU pattern '{sku_pattern}' to supplier {supplier_id}")
        return link

    def remove_link(self, supplier_id: int, link_id: int) -> None:
        """Remove a link of a supplier.

        Raises:
            NotFoundError if no such link belongs to the supplier
        """
        removed = self.session.query(SupplierProductLink).filter(
            SupplierProductLink.id == link_id,
            SupplierProductLink.supplier_id == supplier_id
        ).delete(synchronize_session=False)

        if removed == 0:
            raise NotFoundError(f"Link {link_id} not found", code='link_not_found')

        logger.info(f"Removed link {link_id} from supplier {supplier_id}")
