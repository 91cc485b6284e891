# repositories/products.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, update

from models.product import Product
from repositories.base import PolicyRepository
from utils.errors import PolicyViolation, ProductUnavailable

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "name": Product.name,
    "quantity": Product.quantity,
}


class ProductRepository(PolicyRepository):
    model = Product

    def list(
        self,
        *,
        active_only: bool = True,
        seller_id=None,
        category_id=None,
        q: Optional[str] = None,
        sort_by: str = "created_at",
        order: str = "desc",
        page: int = 1,
        page_size: int = 12,
    ) -> Tuple[List[Product], int]:
        query = self.query()

        if active_only:
            query = query.filter(Product.is_active.is_(True))
        if seller_id is not None:
            query = query.filter(Product.seller_id == seller_id)
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if q:
            # Wildcards typed by the caller match literally
            query = query.filter(or_(
                Product.name.icontains(q, autoescape=True),
                Product.description.icontains(q, autoescape=True),
            ))

        sort_col = SORT_COLUMNS.get(sort_by, Product.created_at)
        if order == "asc":
            query = query.order_by(sort_col.asc(), Product.id.asc())
        else:
            query = query.order_by(sort_col.desc(), Product.id.asc())

        total = query.count()
        items = query.offset((page - 1) * page_size).limit(page_size).all()
        return items, total

    def list_own(self) -> List[Product]:
        if self.uid is None:
            return []
        return (
            self.query()
            .filter(Product.seller_id == self.uid)
            .order_by(Product.created_at.desc(), Product.id.asc())
            .all()
        )

    def purchase(self, product_id) -> Optional[Product]:
        """Take one unit of an active product.

        Runs with elevated privilege (buyers have no update rule on products)
        and can only decrement by one. The decrement is a single conditional
        UPDATE, so two concurrent purchases of the last unit cannot both win.
        """
        if self.uid is None:
            raise PolicyViolation(self.table, "Sign in to purchase products")

        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.is_active.is_(True), Product.quantity >= 1)
            .values(quantity=Product.quantity - 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)

        if result.rowcount != 1:
            self.db.rollback()
            product = self.get(product_id)
            if product is None or not product.is_active:
                # An inactive listing is not for sale, even to the seller who can still see it
                return None
            logger.info("Purchase of %s by %s rejected: out of stock", product_id, self.uid)
            raise ProductUnavailable(product_id)

        self.db.commit()
        product = self.db.get(Product, product_id)
        self.db.refresh(product)
        return product
