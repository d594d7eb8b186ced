# supplier_forecast/services/production_tag_service.py
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from supplier_forecast.models import ProductionTag, Supplier
from supplier_forecast.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class ProductionTagService:
    """Service for the per-supplier "in production" flags."""

    def __init__(self, session: Session):
        """Initialize the production tag service.

        Args:
            session: Database session
        """
        self.session = session
        self.catalog = CatalogService(session)

    def get_tags(self, supplier_id: int, skus: Optional[Iterable[str]] = None) -> List[ProductionTag]:
        """Get the supplier's production tags.

        Args:
            supplier_id: Supplier ID
            skus: Optional SKUs to restrict to

        Returns:
            List of production tag objects
        """
        query = self.session.query(ProductionTag).filter(
            ProductionTag.supplier_id == supplier_id
        )

        if skus is not None:
            query = query.filter(ProductionTag.sku.in_(list(skus)))

        return query.all()

    def get_tag_lookup(self, supplier_id: int) -> Mapping[str, bool]:
        """Read all tags of a supplier once into a read-only SKU lookup.

        Args:
            supplier_id: Supplier ID

        Returns:
            Read-only mapping of SKU to is-in-production flag
        """
        return MappingProxyType({
            tag.sku: bool(tag.is_in_production)
            for tag in self.get_tags(supplier_id)
        })

    def mark_in_production(self, supplier: Supplier, skus: Iterable[str],
                           marked_at: Optional[datetime] = None) -> int:
        """Tag SKUs as in production for a supplier.

        Existing tags are switched on and their timestamp refreshed. New tags
        need a catalog product in the supplier's company; SKUs without one
        are skipped.

        Args:
            supplier: Supplier object
            skus: SKUs to tag
            marked_at: Timestamp to record, defaults to now

        Returns:
            Number of SKUs tagged
        """
        skus = list(dict.fromkeys(skus))
        marked_at = marked_at or datetime.now()

        existing = {tag.sku: tag for tag in self.get_tags(supplier.id, skus)}
        tagged = 0

        for sku in skus:
            tag = existing.get(sku)

            if tag is None:
                product = self.catalog.get_product_by_sku(supplier.company_id, sku)
                if not product:
                    logger.debug(f"Skipping unknown SKU {sku} for supplier {supplier.id}")
                    continue

                tag = self._insert_tag(supplier.id, sku, product.name)

            tag.is_in_production = True
            tag.marked_production_at = marked_at
            tag.updated_at = marked_at
            tagged += 1

        self.session.flush()

        logger.info(f"Supplier {supplier.id}: {tagged} of {len(skus)} SKU(s) marked as in production")
        return tagged

    def _insert_tag(self, supplier_id: int, sku: str, product_name: str) -> ProductionTag:
        """Insert a new tag, or return the row another request inserted first.

        The insert runs in a savepoint so a unique-key conflict on
        (supplier_id, sku) only discards this row, not the caller's
        transaction.
        """
        tag = ProductionTag(
            supplier_id=supplier_id,
            sku=sku,
            product_name=product_name
        )

        try:
            with self.session.begin_nested():
                self.session.add(tag)
        except IntegrityError:
            logger.info(f"Tag for SKU {sku} of supplier {supplier_id} already exists, updating it")
            return self.session.query(ProductionTag).filter(
                ProductionTag.supplier_id == supplier_id,
                ProductionTag.sku == sku
            ).one()

        return tag

    def unmark_production(self, supplier_id: int, skus: Iterable[str]) -> int:
        """Clear the production tag of SKUs for a supplier.

        SKUs without a tag are ignored.

        Args:
            supplier_id: Supplier ID
            skus: SKUs to untag

        Returns:
            Number of existing tags updated
        """
        skus = list(dict.fromkeys(skus))
        now = datetime.now()

        tags = self.get_tags(supplier_id, skus)
        for tag in tags:
            tag.is_in_production = False
            tag.updated_at = now

        self.session.flush()

        logger.info(f"Supplier {supplier_id}: {len(tags)} of {len(skus)} SKU(s) unmarked")
        return len(tags)
