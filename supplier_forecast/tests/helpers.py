"""
Shared fixtures for tests that need a real database.
"""
import unittest

from supplier_forecast.db import db
from supplier_forecast.models import (
    Company, Supplier, Product, SalesMonth, SalesFact,
    SupplierProductLink, LinkType, SupplierStatus
)

TEST_DATABASE_URL = 'sqlite://'


class DatabaseTestCase(unittest.TestCase):
    """Test case backed by a fresh in-memory SQLite database."""

    def setUp(self):
        """Create the schema and open a session."""
        db.configure(TEST_DATABASE_URL)
        db.create_all()
        self.session = db.get_session()

    def tearDown(self):
        """Close the session and drop the schema."""
        self.session.close()
        db.drop_all()

    def add_company(self, name='Acme'):
        company = Company(name=name)
        self.session.add(company)
        self.session.flush()
        return company

    def add_supplier(self, company, name='Supplier', portal_id=None,
                     password_hash=None, status=SupplierStatus.ACTIVE):
        supplier = Supplier(
            company_id=company.id,
            name=name,
            portal_id=portal_id,
            portal_password_hash=password_hash,
            status=status
        )
        self.session.add(supplier)
        self.session.flush()
        return supplier

    def add_product(self, company, sku, stock=0, name=None, is_deleted=False, image_url=None):
        product = Product(
            company_id=company.id,
            sku=sku,
            name=name or f"Product {sku}",
            stock=stock,
            is_deleted=is_deleted,
            image_url=image_url
        )
        self.session.add(product)
        self.session.flush()
        return product

    def add_month(self, month_year, is_complete=True):
        month = SalesMonth(month_year=month_year, is_complete=is_complete)
        self.session.add(month)
        self.session.flush()
        return month

    def add_sale(self, month_year, sku, units, revenue, source='marketplace', name=None):
        fact = SalesFact(
            month_year=month_year,
            source=source,
            sku=sku,
            name=name or f"Product {sku}",
            units=units,
            revenue=revenue
        )
        self.session.add(fact)
        self.session.flush()
        return fact

    def link_product(self, supplier, product):
        link = SupplierProductLink(
            supplier_id=supplier.id,
            link_type=LinkType.INDIVIDUAL,
            product_id=product.id
        )
        self.session.add(link)
        self.session.flush()
        return link

    def link_pattern(self, supplier, sku_pattern):
        link = SupplierProductLink(
            supplier_id=supplier.id,
            link_type=LinkType.PATTERN,
            sku_pattern=sku_pattern
        )
        self.session.add(link)
        self.session.flush()
        return link
