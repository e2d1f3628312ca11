"""
SQLAlchemy Implementation of the Price List Repository.
"""

import math
from typing import List, Sequence, Type

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pricelist.config import get_settings
from pricelist.core.exceptions import BusinessRuleViolationException, EntityNotFoundException, GatewayError
from pricelist.domain.models.category import Category
from pricelist.domain.models.product import Product
from pricelist.domain.models.setting import Setting
from pricelist.domain.repositories.price_list_repository import PriceListRepository
from pricelist.domain.schemas.category import CategoryOrder, CategoryRead
from pricelist.domain.schemas.product import ProductCreate, ProductRead, ProductUpdate
from pricelist.infrastructure.repositories.base_repository import SQLAlchemyRepository

settings = get_settings()
logger = structlog.get_logger(__name__)


def _to_read(product: Product, category_name, category_sort_order) -> ProductRead:
    """Build the joined read model; the legacy carton cost backs up cost_usd."""
    cost = product.cost_usd or product.carton_usd or 0
    return ProductRead(
        id=product.id,
        category_id=product.category_id,
        category_name=category_name,
        category_sort_order=category_sort_order,
        name=product.name or "",
        cost_usd=cost,
        profit_syp=product.profit_syp if product.profit_syp is not None else settings.DEFAULT_PROFIT_SYP,
        wholesale_profit_syp=(
            product.wholesale_profit_syp
            if product.wholesale_profit_syp is not None
            else settings.DEFAULT_WHOLESALE_PROFIT_SYP
        ),
        carton_usd=product.carton_usd or cost,
        wholesale_carton_usd=product.wholesale_carton_usd or 0,
        is_hidden=bool(product.is_hidden),
    )


class SQLAlchemyPriceListRepository(SQLAlchemyRepository[Product], PriceListRepository):
    """Price list gateway backed by a SQLAlchemy session."""

    def __init__(self, db: Session, model: Type[Product] = Product):
        super().__init__(db, model)
        self.categories = SQLAlchemyRepository(db, Category)

    async def list_categories(self) -> List[CategoryRead]:
        categories = self.categories.list_ordered(Category.sort_order.asc(), Category.id.asc())
        return [CategoryRead.model_validate(c) for c in categories]

    async def reorder_categories(self, orders: Sequence[CategoryOrder]) -> bool:
        try:
            for order in orders:
                self.db.query(Category).filter(Category.id == order.id).update(
                    {Category.sort_order: order.sort_order}
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise GatewayError("Could not reorder categories", {"error": str(e)}) from e
        logger.info("Categories reordered", count=len(orders))
        return True

    async def list_products(self) -> List[ProductRead]:
        rows = (
            self.db.query(Product, Category.name, Category.sort_order)
            .outerjoin(Category, Product.category_id == Category.id)
            .order_by(Category.sort_order.asc(), Product.name.asc())
            .all()
        )
        return [_to_read(product, name, sort_order) for product, name, sort_order in rows]

    async def create_product(self, product: ProductCreate) -> int:
        if not product.name.strip():
            raise BusinessRuleViolationException("Product name must not be blank")
        if self.categories.get_by_id(product.category_id) is None:
            raise BusinessRuleViolationException(
                f"Category {product.category_id} does not exist", {"category_id": product.category_id}
            )

        cost = product.cost_usd or product.carton_usd or product.wholesale_carton_usd or 0
        data = {
            "category_id": product.category_id,
            "name": product.name,
            "cost_usd": cost,
            "profit_syp": product.profit_syp if product.profit_syp is not None else settings.DEFAULT_PROFIT_SYP,
            "wholesale_profit_syp": (
                product.wholesale_profit_syp
                if product.wholesale_profit_syp is not None
                else settings.DEFAULT_WHOLESALE_PROFIT_SYP
            ),
            "carton_usd": product.carton_usd or cost,
            "wholesale_carton_usd": product.wholesale_carton_usd or 0,
            "is_hidden": False,
        }
        db_obj = self.create(data)
        logger.info("Product created", product_id=db_obj.id, category_id=db_obj.category_id)
        return db_obj.id

    async def update_product(self, product_id: int, changes: ProductUpdate) -> bool:
        db_obj = self.get_by_id(product_id)
        if db_obj is None:
            raise EntityNotFoundException(f"Product {product_id} not found", {"product_id": product_id})

        # An explicit None keeps the stored value
        data = changes.model_dump(exclude_unset=True)
        if data.get("cost_usd") is not None:
            data["carton_usd"] = data["cost_usd"]

        self.patch(db_obj, data)
        return True

    async def delete_product(self, product_id: int) -> bool:
        deleted = self.delete(product_id)
        if deleted:
            logger.info("Product deleted", product_id=product_id)
        return deleted

    async def get_global_rate(self) -> float:
        setting = self.db.get(Setting, settings.GLOBAL_RATE_KEY)
        if setting is None or setting.value in (None, ""):
            return settings.DEFAULT_GLOBAL_RATE
        try:
            rate = float(setting.value)
        except (TypeError, ValueError):
            logger.warning("Malformed stored rate, using default", value=setting.value)
            return settings.DEFAULT_GLOBAL_RATE
        return rate if math.isfinite(rate) else settings.DEFAULT_GLOBAL_RATE

    async def set_global_rate(self, rate: float) -> bool:
        self.db.merge(Setting(key=settings.GLOBAL_RATE_KEY, value=str(rate)))
        self.db.commit()
        logger.info("Global rate stored", rate=rate)
        return True
