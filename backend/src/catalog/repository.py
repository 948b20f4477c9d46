"""Catalog repository: load catalog rows from the product/supplier price tables"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings

from .db_models import Base, Product, Supplier, SupplierPrice
from .index import CatalogError
from .models import CatalogEntry

logger = logging.getLogger(__name__)


def create_session_factory(database_url: Optional[str] = None, create_tables: bool = False) -> sessionmaker:
    """Create a session factory for the catalog database.

    Args:
        database_url: SQLAlchemy URL (default: CATALOG_DATABASE_URL setting)
        create_tables: Create missing catalog tables (tests, local SQLite)

    Returns:
        sessionmaker bound to a new engine

    Raises:
        CatalogError: If no database URL is configured
    """
    database_url = database_url or get_settings().CATALOG_DATABASE_URL
    if not database_url:
        raise CatalogError("CATALOG_DATABASE_URL is not configured")

    engine_kwargs = {"pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    engine = create_engine(database_url, **engine_kwargs)
    if create_tables:
        Base.metadata.create_all(engine)

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class CatalogRepository:
    """Read and maintain supplier prices in the catalog database"""

    def __init__(self, db: Session):
        self.db = db

    def load_entries(self) -> List[CatalogEntry]:
        """Load every supplier price row as a CatalogEntry.

        Returns:
            Catalog rows ordered by product id, then supplier name
        """
        stmt = (
            select(Product.id, Product.description, Supplier.name, SupplierPrice.price)
            .join(SupplierPrice, SupplierPrice.product_id == Product.id)
            .join(Supplier, Supplier.id == SupplierPrice.supplier_id)
            .order_by(Product.id, Supplier.name)
        )

        entries = [
            CatalogEntry(
                product_id=product_id,
                description=description,
                supplier_name=supplier_name,
                price=Decimal(price) if price is not None else None
            )
            for product_id, description, supplier_name, price in self.db.execute(stmt)
        ]

        logger.info(f"Loaded {len(entries)} catalog rows from database")
        return entries

    def add_offer(self, description: str, supplier_name: str, price: Optional[Decimal]) -> SupplierPrice:
        """Create or update a supplier's price for a product.

        Products and suppliers are created on first use.

        Args:
            description: Product description
            supplier_name: Supplier name
            price: Offer price (None to record a listing without an offer)

        Returns:
            The stored SupplierPrice row
        """
        description = description.strip()
        supplier_name = supplier_name.strip()
        if not description or not supplier_name:
            raise CatalogError("Product description and supplier name are required")

        product = self.db.execute(
            select(Product).where(Product.description == description)
        ).scalar_one_or_none()
        if product is None:
            product = Product(description=description)
            self.db.add(product)

        supplier = self.db.execute(
            select(Supplier).where(Supplier.name == supplier_name)
        ).scalar_one_or_none()
        if supplier is None:
            supplier = Supplier(name=supplier_name)
            self.db.add(supplier)

        self.db.flush()

        offer = self.db.execute(
            select(SupplierPrice).where(
                SupplierPrice.product_id == product.id,
                SupplierPrice.supplier_id == supplier.id
            )
        ).scalar_one_or_none()

        if offer is None:
            offer = SupplierPrice(product_id=product.id, supplier_id=supplier.id, price=price)
            self.db.add(offer)
        else:
            offer.price = price

        self.db.commit()
        self.db.refresh(offer)
        return offer

    def get_stats(self) -> Dict[str, int]:
        """Count products, suppliers and price rows"""
        return {
            "products": self.db.scalar(select(func.count()).select_from(Product)),
            "suppliers": self.db.scalar(select(func.count()).select_from(Supplier)),
            "prices": self.db.scalar(select(func.count()).select_from(SupplierPrice)),
        }
