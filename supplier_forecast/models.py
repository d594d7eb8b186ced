# supplier_forecast/models.py
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Boolean, ForeignKey, Enum, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()

class SupplierStatus(enum.Enum):
    """Enum for supplier portal status.

    Values:
        ACTIVE ('active'): Supplier may log into the portal
        INACTIVE ('inactive'): Portal access is blocked
    """
    ACTIVE = 'active'
    INACTIVE = 'inactive'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

class LinkType(enum.Enum):
    """Enum for supplier-to-product link kinds.

    Values:
        INDIVIDUAL ('individual'): Link to one product by id
        PATTERN ('pattern'): Link to every SKU starting with a prefix
    """
    INDIVIDUAL = 'individual'
    PATTERN = 'pattern'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

class Company(Base):
    __tablename__ = 'company'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=func.now())

    suppliers = relationship("Supplier", back_populates="company")
    products = relationship("Product", back_populates="company")

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"

class Supplier(Base):
    __tablename__ = 'supplier'

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('company.id'), nullable=False, index=True)
    name = Column(String(150), nullable=False)

    # Portal credentials
    portal_id = Column(String(50), unique=True)
    portal_password_hash = Column(String(255))
    status = Column(Enum(SupplierStatus), default=SupplierStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="suppliers")
    links = relationship("SupplierProductLink", back_populates="supplier")
    production_tags = relationship("ProductionTag", back_populates="supplier")

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"

class Product(Base):
    __tablename__ = 'product'

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey('company.id'), nullable=False)
    sku = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    stock = Column(Integer, default=0)
    image_url = Column(String(500))

    # Soft delete flag
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="products")

    __table_args__ = (
        Index('idx_product_company_sku', 'company_id', 'sku'),
    )

    def __repr__(self):
        return f"<Product(sku='{self.sku}', stock={self.stock})>"

class SalesMonth(Base):
    """Ingestion bookkeeping for one calendar month of sales spreadsheets."""
    __tablename__ = 'sales_months'

    id = Column(Integer, primary_key=True)
    month_year = Column(String(7), nullable=False, unique=True)  # YYYY-MM
    is_complete = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<SalesMonth(month_year='{self.month_year}', is_complete={self.is_complete})>"

class SalesFact(Base):
    """Units and revenue for one SKU from one sales sub-source in a month."""
    __tablename__ = 'sales_facts'

    id = Column(Integer, primary_key=True)
    month_year = Column(String(7), nullable=False)
    source = Column(String(50))  # Marketplace or channel the row came from
    sku = Column(String(100), nullable=False)
    name = Column(String(255))
    units = Column(Float, default=0.0)
    revenue = Column(Float, default=0.0)

    __table_args__ = (
        Index('idx_sales_facts_month_sku', 'month_year', 'sku'),
    )

    def __repr__(self):
        return f"<SalesFact(month_year='{self.month_year}', sku='{self.sku}', units={self.units})>"

class SupplierProductLink(Base):
    __tablename__ = 'supplier_products'

    id = Column(Integer, primary_key=True)
    supplier_id = Column(Integer, ForeignKey('supplier.id'), nullable=False, index=True)
    link_type = Column(Enum(LinkType), nullable=False)

    # Exactly one of these is set, depending on link_type
    product_id = Column(Integer, ForeignKey('product.id'))
    sku_pattern = Column(String(100))

    created_at = Column(DateTime, default=func.now())

    supplier = relationship("Supplier", back_populates="links")
    product = relationship("Product")

    def __repr__(self):
        target = self.product_id if self.link_type == LinkType.INDIVIDUAL else self.sku_pattern
        return f"<SupplierProductLink(supplier_id={self.supplier_id}, type='{self.link_type}', target='{target}')>"

class ProductionTag(Base):
    __tablename__ = 'supplier_production_queue'

    id = Column(Integer, primary_key=True)
    supplier_id = Column(Integer, ForeignKey('supplier.id'), nullable=False)
    sku = Column(String(100), nullable=False)
    product_name = Column(String(255))

    is_in_production = Column(Boolean, default=False, nullable=False)
    marked_production_at = Column(DateTime)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier", back_populates="production_tags")

    __table_args__ = (
        UniqueConstraint('supplier_id', 'sku', name='uq_production_tag_supplier_sku'),
    )

    def __repr__(self):
        return f"<ProductionTag(supplier_id={self.supplier_id}, sku='{self.sku}', is_in_production={self.is_in_production})>"
