import pytest

from pricelist.config import get_settings
from pricelist.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from pricelist.domain.models.category import Category
from pricelist.domain.models.product import Product
from pricelist.domain.models.setting import Setting
from pricelist.domain.schemas.category import CategoryOrder
from pricelist.domain.schemas.product import ProductCreate, ProductUpdate
from pricelist.infrastructure.seed import CATEGORY_NAMES, SEED_PRODUCTS, init_db, sync_legacy_costs

settings = get_settings()


@pytest.mark.asyncio
async def test_list_products_joins_categories_in_order(stocked_db, repository):
    products = await repository.list_products()
    assert [(p.category_name, p.name) for p in products] == [
        ("Drinks", "Cola"),
        ("Drinks", "Water"),
        ("Snacks", "Chips"),
    ]
    assert products[0].category_sort_order == 0


@pytest.mark.asyncio
async def test_list_products_reads_legacy_carton_cost(stocked_db, repository):
    water = next(p for p in await repository.list_products() if p.name == "Water")
    assert water.cost_usd == 2.0
    chips = next(p for p in await repository.list_products() if p.name == "Chips")
    assert chips.carton_usd == 1.5


@pytest.mark.asyncio
async def test_list_products_keeps_orphans(db, repository):
    db.add(Product(category_id=None, name="Orphan", cost_usd=1))
    db.commit()
    products = await repository.list_products()
    assert products[0].category_name is None


@pytest.mark.asyncio
async def test_list_categories_ordered(stocked_db, repository):
    categories = await repository.list_categories()
    assert [c.name for c in categories] == ["Drinks", "Snacks"]


@pytest.mark.asyncio
async def test_create_product_applies_defaults(stocked_db, repository):
    product_id = await repository.create_product(ProductCreate(category_id=1, name="New", carton_usd=4.0))
    created = stocked_db.get(Product, product_id)
    assert created.cost_usd == 4.0
    assert created.carton_usd == 4.0
    assert created.profit_syp == settings.DEFAULT_PROFIT_SYP
    assert created.wholesale_profit_syp == settings.DEFAULT_WHOLESALE_PROFIT_SYP
    assert created.is_hidden is False


@pytest.mark.asyncio
async def test_create_product_cost_falls_back_to_wholesale(stocked_db, repository):
    product_id = await repository.create_product(
        ProductCreate(category_id=1, name="Vape", wholesale_carton_usd=7.5, profit_syp=0)
    )
    created = stocked_db.get(Product, product_id)
    assert created.cost_usd == 7.5
    assert created.profit_syp == 0


@pytest.mark.asyncio
async def test_create_product_rejects_unknown_category(stocked_db, repository):
    with pytest.raises(BusinessRuleViolationException) as exc:
        await repository.create_product(ProductCreate(category_id=99, name="Nowhere"))
    assert exc.value.details == {"category_id": 99}
    assert stocked_db.query(Product).count() == 3


@pytest.mark.asyncio
async def test_create_product_rejects_blank_name(stocked_db, repository):
    with pytest.raises(BusinessRuleViolationException):
        await repository.create_product(ProductCreate(category_id=1, name="   "))


@pytest.mark.asyncio
async def test_update_product_is_a_patch(stocked_db, repository):
    chips = stocked_db.query(Product).filter_by(name="Chips").one()
    assert await repository.update_product(chips.id, ProductUpdate(profit_syp=1000)) is True
    stocked_db.refresh(chips)
    assert chips.profit_syp == 1000
    assert chips.name == "Chips"
    assert chips.cost_usd == 1.5


@pytest.mark.asyncio
async def test_update_cost_mirrors_carton(stocked_db, repository):
    water = stocked_db.query(Product).filter_by(name="Water").one()
    await repository.update_product(water.id, ProductUpdate(cost_usd=2.75))
    stocked_db.refresh(water)
    assert water.cost_usd == 2.75
    assert water.carton_usd == 2.75


@pytest.mark.asyncio
async def test_update_hidden_flag(stocked_db, repository):
    cola = stocked_db.query(Product).filter_by(name="Cola").one()
    await repository.update_product(cola.id, ProductUpdate(is_hidden=False))
    stocked_db.refresh(cola)
    assert cola.is_hidden is False


@pytest.mark.asyncio
async def test_update_unknown_product(repository):
    with pytest.raises(EntityNotFoundException):
        await repository.update_product(404, ProductUpdate(name="ghost"))


@pytest.mark.asyncio
async def test_delete_product(stocked_db, repository):
    chips = stocked_db.query(Product).filter_by(name="Chips").one()
    assert await repository.delete_product(chips.id) is True
    assert await repository.delete_product(chips.id) is False


@pytest.mark.asyncio
async def test_reorder_categories(stocked_db, repository):
    snacks = stocked_db.query(Category).filter_by(name="Snacks").one()
    drinks = stocked_db.query(Category).filter_by(name="Drinks").one()
    await repository.reorder_categories([
        CategoryOrder(id=snacks.id, sort_order=0),
        CategoryOrder(id=drinks.id, sort_order=1),
    ])
    assert [c.name for c in await repository.list_categories()] == ["Snacks", "Drinks"]


@pytest.mark.asyncio
async def test_global_rate_defaults_and_round_trips(repository):
    assert await repository.get_global_rate() == settings.DEFAULT_GLOBAL_RATE
    await repository.set_global_rate(12500)
    assert await repository.get_global_rate() == 12500
    await repository.set_global_rate(13000)
    assert await repository.get_global_rate() == 13000


@pytest.mark.asyncio
async def test_malformed_stored_rate_uses_default(db, repository):
    db.add(Setting(key=settings.GLOBAL_RATE_KEY, value="eleven thousand"))
    db.commit()
    assert await repository.get_global_rate() == settings.DEFAULT_GLOBAL_RATE


def test_init_db_seeds_once(engine, db):
    init_db(engine, db)
    init_db(engine, db)
    assert db.query(Category).count() == len(CATEGORY_NAMES)
    assert db.query(Product).count() == len(SEED_PRODUCTS)
    assert db.get(Setting, settings.GLOBAL_RATE_KEY).value == str(int(settings.DEFAULT_GLOBAL_RATE))


def test_init_db_syncs_legacy_costs(engine, db):
    init_db(engine, db)
    priced = db.query(Product).filter(Product.carton_usd > 0).all()
    assert priced
    assert all(p.cost_usd == p.carton_usd for p in priced)


def test_sync_legacy_costs_leaves_set_costs(stocked_db):
    assert sync_legacy_costs(stocked_db) == 1
    cola = stocked_db.query(Product).filter_by(name="Cola").one()
    assert cola.cost_usd == 3.0
