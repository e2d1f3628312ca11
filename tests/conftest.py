from typing import List

import pytest
from sqlalchemy.orm import sessionmaker

from pricelist.domain.models.category import Category
from pricelist.domain.models.product import Product
from pricelist.domain.models.setting import Setting  # noqa: F401  registers the table
from pricelist.domain.schemas.category import CategoryRead
from pricelist.domain.schemas.product import ProductRead
from pricelist.infrastructure.database import Base, make_engine
from pricelist.infrastructure.local_store import LocalStateStore
from pricelist.infrastructure.repositories.price_list_repository import SQLAlchemyPriceListRepository


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db):
    return SQLAlchemyPriceListRepository(db)


@pytest.fixture
def stocked_db(db):
    """Two categories, three products; 'Drinks' sorts before 'Snacks'."""
    snacks = Category(name="Snacks", sort_order=1)
    drinks = Category(name="Drinks", sort_order=0)
    db.add_all([snacks, drinks])
    db.flush()
    db.add_all([
        Product(category_id=snacks.id, name="Chips", cost_usd=1.5, profit_syp=500),
        Product(category_id=drinks.id, name="Water", cost_usd=0, carton_usd=2.0, profit_syp=300),
        Product(category_id=drinks.id, name="Cola", cost_usd=3.0, carton_usd=3.0, is_hidden=True),
    ])
    db.commit()
    return db


@pytest.fixture
def local_store(tmp_path):
    return LocalStateStore(tmp_path / "state" / "local_state.json")


def make_product(id, name, category_id=1, **kwargs) -> ProductRead:
    return ProductRead(id=id, name=name, category_id=category_id, **kwargs)


class FakeGateway:
    """In-memory gateway that records calls and can be told to fail."""

    def __init__(self, products: List[ProductRead], categories: List[CategoryRead], rate: float = 11700):
        self.products = {p.id: p for p in products}
        self.categories = list(categories)
        self.rate = rate
        self.calls = []
        self.fail_updates = False
        self.reject_updates = False
        self.fail_deletes = False

    async def list_categories(self):
        self.calls.append("list_categories")
        return sorted(self.categories, key=lambda c: c.sort_order)

    async def reorder_categories(self, orders):
        self.calls.append("reorder_categories")
        positions = {o.id: o.sort_order for o in orders}
        self.categories = [
            c.model_copy(update={"sort_order": positions.get(c.id, c.sort_order)}) for c in self.categories
        ]
        return True

    async def list_products(self):
        self.calls.append("list_products")
        return list(self.products.values())

    async def create_product(self, product):
        self.calls.append("create_product")
        new_id = max(self.products, default=0) + 1
        self.products[new_id] = ProductRead(
            id=new_id, category_id=product.category_id, name=product.name, cost_usd=product.cost_usd or 0
        )
        return new_id

    async def update_product(self, product_id, changes):
        self.calls.append("update_product")
        if self.fail_updates:
            raise ConnectionError("gateway unreachable")
        if self.reject_updates:
            return False
        data = {k: v for k, v in changes.model_dump(exclude_unset=True).items() if v is not None}
        self.products[product_id] = self.products[product_id].model_copy(update=data)
        return True

    async def delete_product(self, product_id):
        self.calls.append("delete_product")
        if self.fail_deletes:
            raise ConnectionError("gateway unreachable")
        return self.products.pop(product_id, None) is not None

    async def get_global_rate(self):
        self.calls.append("get_global_rate")
        return self.rate

    async def set_global_rate(self, rate):
        self.calls.append("set_global_rate")
        self.rate = rate
        return True


@pytest.fixture
def categories():
    return [
        CategoryRead(id=1, name="General", sort_order=0),
        CategoryRead(id=2, name="Lighters", sort_order=1),
    ]


@pytest.fixture
def products():
    return [
        make_product(1, "Marlboro White", 1, cost_usd=22.56, profit_syp=500),
        make_product(2, "Davidoff Slim", 1, cost_usd=14.52, profit_syp=500),
        make_product(3, "Phoenix Lighter", 2, cost_usd=4.27, profit_syp=500, is_hidden=True),
    ]


@pytest.fixture
def gateway(products, categories):
    return FakeGateway(products, categories)
