"""Catalog SQLAlchemy models.

Products are distinct descriptions; each supplier offer for a product is a
SupplierPrice row. The matching engine never queries these tables directly:
CatalogRepository loads them into CatalogEntry rows once per catalog snapshot.
"""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, Text, UniqueConstraint, DateTime, func
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Product(Base):
    """Product model: one row per distinct product description"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    prices = relationship("SupplierPrice", back_populates="product", cascade="all, delete-orphan")


class Supplier(Base):
    """Supplier model"""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    prices = relationship("SupplierPrice", back_populates="supplier", cascade="all, delete-orphan")


class SupplierPrice(Base):
    """SupplierPrice model: a supplier's price for one product.

    price is NULL when the supplier lists the product without an offer.
    """
    __tablename__ = "supplier_prices"
    __table_args__ = (
        UniqueConstraint("product_id", "supplier_id", name="uq_supplier_prices_product_supplier"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False)
    price = Column(Numeric(12, 2), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    product = relationship("Product", back_populates="prices")
    supplier = relationship("Supplier", back_populates="prices")
