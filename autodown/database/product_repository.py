"""Repository for Product database operations.

Implements the `TargetCatalog` capability the executor and scheduling service
depend on; products are the targets taken down.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from autodown.clock import utcnow
from autodown.errors import TargetNotFoundError
from autodown.models.product import Product
from autodown.database.models import ProductDB

logger = logging.getLogger(__name__)


class ProductRepository:
    """Repository for Product database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, product: Product) -> Product:
        """Create a new product."""
        try:
            product_db = ProductDB.from_pydantic(product)
            self.db.add(product_db)
            self.db.commit()
            self.db.refresh(product_db)
            logger.debug(f"Created product {product.id}: {product.name[:50]}")
            return product_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create product {product.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, product_id: str) -> Optional[Product]:
        """Get product by ID.

        A failed read rolls the session back so the caller can keep using it
        (PostgreSQL refuses further statements in an aborted transaction).
        """
        try:
            product_db = self.db.query(ProductDB).filter(ProductDB.id == product_id).first()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to load product {product_id}: {type(e).__name__}: {str(e)}")
            raise
        return product_db.to_pydantic() if product_db else None

    # TargetCatalog

    def load_by_id(self, target_id: str) -> Optional[Product]:
        return self.get(target_id)

    def is_terminal(self, target: Product) -> bool:
        return not target.is_valid

    def mark_terminal(self, target: Product) -> Product:
        """Take the listing down (is_valid=False) and persist it."""
        try:
            product_db = self.db.query(ProductDB).filter(ProductDB.id == target.id).first()
            if product_db is None:
                raise TargetNotFoundError(target.id)
            product_db.is_valid = False
            product_db.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(product_db)
            logger.debug(f"Took down product {target.id}")
            return product_db.to_pydantic()
        except TargetNotFoundError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to take down product {target.id}: {type(e).__name__}: {str(e)}")
            raise
