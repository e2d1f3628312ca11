import pytest

from pricelist.application.services.view_state import ViewStateStore
from pricelist.config import get_settings
from pricelist.core.exceptions import ExportError
from pricelist.domain.schemas.product import ProductCreate, ProductUpdate
from pricelist.domain.schemas.view import CategoryHeaderRow
from pricelist.infrastructure.local_store import FONT_SIZE_KEY, RATE_KEY

settings = get_settings()


class RecordingExporter:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.seen_busy = None
        self.store = None

    async def _export(self, kind, rows, columns, rate):
        self.calls.append((kind, rows, columns, rate))
        if self.store is not None:
            self.seen_busy = self.store.is_exporting
        if self.fail:
            raise ExportError("Could not export the price list PDF")
        return f"price-list.{kind}"

    async def export_pdf(self, rows, columns, rate):
        return await self._export("pdf", rows, columns, rate)

    async def export_png(self, rows, columns, rate):
        return await self._export("png", rows, columns, rate)


@pytest.fixture
def exporter():
    return RecordingExporter()


@pytest.fixture
def store(gateway, local_store, exporter):
    store = ViewStateStore(gateway, local_store, exporter=exporter)
    exporter.store = store
    return store


@pytest.mark.asyncio
async def test_load_adopts_server_rate_without_local_override(store, gateway, local_store):
    gateway.rate = 12000
    await store.load()
    assert store.loading is False
    assert len(store.products) == 3
    assert store.global_rate == 12000
    assert local_store.get(RATE_KEY) == 12000


@pytest.mark.asyncio
async def test_local_rate_override_wins(gateway, local_store, exporter):
    local_store.set(RATE_KEY, 13000)
    gateway.rate = 12000
    store = ViewStateStore(gateway, local_store, exporter=exporter)
    await store.load()
    assert store.global_rate == 13000


@pytest.mark.asyncio
async def test_load_failure_keeps_defaults(gateway, local_store, exporter):
    async def boom():
        raise ConnectionError("offline")

    gateway.list_products = boom
    store = ViewStateStore(gateway, local_store, exporter=exporter)
    await store.load()
    assert store.loading is False
    assert store.products == []
    assert store.global_rate == settings.DEFAULT_GLOBAL_RATE


@pytest.mark.asyncio
async def test_view_rows_hide_hidden_products(store):
    await store.load()
    rows = store.view_rows()
    assert [r.name for r in rows if isinstance(r, CategoryHeaderRow)] == ["General"]
    assert [r.product.name for r in rows if r.type == "product"] == ["Davidoff Slim", "Marlboro White"]

    store.toggle_show_hidden()
    assert len(store.view_rows()) == 5


@pytest.mark.asyncio
async def test_filters(store):
    await store.load()
    store.set_search("marl")
    assert [r.type for r in store.view_rows()] == ["category", "product"]
    store.set_search("")
    store.set_show_hidden(True)
    store.set_category_filter("Lighters")
    assert store.view_rows()[1].product.name == "Phoenix Lighter"
    store.set_category_filter("")
    assert store.filters.category == "all"


@pytest.mark.asyncio
async def test_optimistic_update_applies_before_gateway(store, gateway):
    await store.load()
    await store.update_product(1, ProductUpdate(profit_syp=1000))
    assert store.find_product(1).profit_syp == 1000
    assert gateway.products[1].profit_syp == 1000


@pytest.mark.asyncio
async def test_failed_update_reloads_server_state(store, gateway):
    await store.load()
    gateway.fail_updates = True
    await store.update_product(1, ProductUpdate(profit_syp=1000))
    assert store.find_product(1).profit_syp == 500
    assert gateway.calls[-1] == "list_products"


@pytest.mark.asyncio
async def test_rejected_update_reloads_server_state(store, gateway):
    await store.load()
    gateway.reject_updates = True
    await store.update_product(2, ProductUpdate(name="Renamed"))
    assert store.find_product(2).name == "Davidoff Slim"


@pytest.mark.asyncio
async def test_edit_commit_parses_buffer(store, gateway):
    await store.load()
    store.start_edit(1)
    assert store.edit_buffer.cost_usd == "22.56"
    assert [c.id for c in store.visible_columns()][-1] == "actions"

    store.set_edit_value("cost_usd", "4,74")
    store.set_edit_value("profit_syp", "$ 500")
    await store.commit_edit()

    assert store.editing_id is None
    assert store.edit_buffer is None
    assert gateway.products[1].cost_usd == 4.74
    assert store.final_price(store.find_product(1)) == 56000


@pytest.mark.asyncio
async def test_starting_another_edit_discards_buffer(store, gateway):
    await store.load()
    store.start_edit(1)
    store.set_edit_value("name", "Unsaved")
    store.start_edit(2)
    assert store.editing_id == 2
    assert store.edit_buffer.name == "Davidoff Slim"
    assert gateway.products[1].name == "Marlboro White"
    assert "update_product" not in gateway.calls


@pytest.mark.asyncio
async def test_cancel_edit(store):
    await store.load()
    store.start_edit(1)
    store.cancel_edit()
    assert store.editing_id is None
    assert "actions" not in [c.id for c in store.visible_columns()]


@pytest.mark.asyncio
async def test_toggle_hidden_closes_context_menu(store, gateway):
    await store.load()
    store.open_context_menu(3, 10, 20)
    assert store.context_menu.product_id == 3
    await store.toggle_hidden(3)
    assert store.context_menu is None
    assert gateway.products[3].is_hidden is False


@pytest.mark.asyncio
async def test_delete_product(store, gateway):
    await store.load()
    await store.delete_product(2)
    assert store.find_product(2) is None
    assert 2 not in gateway.products


@pytest.mark.asyncio
async def test_failed_delete_keeps_product(store, gateway):
    await store.load()
    gateway.fail_deletes = True
    await store.delete_product(2)
    assert store.find_product(2) is not None


@pytest.mark.asyncio
async def test_add_product_reloads(store):
    await store.load()
    new_id = await store.add_product(ProductCreate(category_id=2, name="Clipper", cost_usd=1.0))
    assert store.find_product(new_id).name == "Clipper"


@pytest.mark.asyncio
async def test_update_global_rate(store, gateway, local_store):
    await store.load()
    await store.update_global_rate("12500")
    assert store.global_rate == 12500
    assert gateway.rate == 12500
    assert local_store.get(RATE_KEY) == 12500


@pytest.mark.asyncio
async def test_move_category_rewrites_positions(store, gateway):
    await store.load()
    await store.move_category(2, -1)
    assert [(c.name, c.sort_order) for c in store.categories] == [("Lighters", 0), ("General", 1)]

    await store.move_category(2, -1)
    assert gateway.calls.count("reorder_categories") == 1


def test_font_size_clamped_and_persisted(store, local_store):
    store.set_font_size(40)
    assert store.font_size == settings.FONT_SIZE_MAX
    store.set_font_size(2)
    assert store.font_size == settings.FONT_SIZE_MIN
    store.set_font_size("16")
    assert local_store.get(FONT_SIZE_KEY) == 16


def test_font_size_below_one_clamps_to_minimum(store):
    store.set_font_size(0)
    assert store.font_size == settings.FONT_SIZE_MIN
    store.set_font_size("0.5")
    assert store.font_size == settings.FONT_SIZE_MIN
    store.set_font_size("big")
    assert store.font_size == settings.DEFAULT_FONT_SIZE


@pytest.mark.asyncio
async def test_edit_commit_reads_number_before_currency_suffix(store, gateway):
    await store.load()
    store.start_edit(2)
    store.set_edit_value("profit_syp", "750 ل.س.ق")
    await store.commit_edit()
    assert gateway.products[2].profit_syp == 750


def test_saved_font_size_is_clamped(gateway, local_store, exporter):
    local_store.set(FONT_SIZE_KEY, 99)
    store = ViewStateStore(gateway, local_store, exporter=exporter)
    assert store.font_size == settings.FONT_SIZE_MAX


def test_reset_all_settings(store, local_store):
    store.set_font_size(20)
    store.columns.toggle("case_usd")
    store.reset_all_settings()
    assert store.font_size == settings.DEFAULT_FONT_SIZE
    assert not store.columns.is_visible("case_usd")
    assert local_store.get(FONT_SIZE_KEY) is None


@pytest.mark.asyncio
async def test_export_uses_filtered_rows_and_clears_busy_flag(store, exporter):
    await store.load()
    store.set_search("davidoff")
    result = await store.export_pdf()
    assert result == "price-list.pdf"
    assert exporter.seen_busy is True
    assert store.is_exporting is False

    kind, rows, columns, rate = exporter.calls[0]
    assert [r.type for r in rows] == ["category", "product"]
    assert "actions" not in [c.id for c in columns]
    assert rate == store.global_rate


@pytest.mark.asyncio
async def test_export_rejected_while_busy(store, exporter):
    store.is_exporting = True
    assert await store.export_png() is None
    assert exporter.calls == []


@pytest.mark.asyncio
async def test_export_failure_adds_notice(gateway, local_store):
    exporter = RecordingExporter(fail=True)
    store = ViewStateStore(gateway, local_store, exporter=exporter)
    await store.load()
    assert await store.export_pdf() is None
    assert store.is_exporting is False
    assert len(store.notices) == 1
    assert store.notices[0].level == "error"
    assert store.notices[0].code == "ExportError"
