"""View state store: owns the loaded price list and everything the user toggles.

Edits are optimistic: the local product list is patched first, then the write
is forwarded to the gateway; if the write fails the whole list is reloaded
from the gateway. Only one row is editable at a time.
"""

import asyncio
import math
from pathlib import Path
from typing import Any, List, Optional

import structlog

from pricelist.application.services.column_registry import ColumnRegistry
from pricelist.application.services.export_tiler import ExportService
from pricelist.application.services.grouping import build_view_rows, group_products, sort_position
from pricelist.application.services.price_calculator import final_price, parse_number, to_number
from pricelist.config import Settings, get_settings
from pricelist.core.exceptions import GatewayError, to_problem
from pricelist.domain.repositories.price_list_repository import PriceListRepository
from pricelist.domain.schemas.category import CategoryOrder, CategoryRead
from pricelist.domain.schemas.product import ProductCreate, ProductFilter, ProductRead, ProductUpdate
from pricelist.domain.schemas.view import (
    ColumnDescriptor,
    ContextMenuTarget,
    EditBuffer,
    GroupedProducts,
    Notice,
    ViewRow,
)
from pricelist.infrastructure.local_store import FONT_SIZE_KEY, RATE_KEY, LocalStateStore

logger = structlog.get_logger(__name__)


def _stored_number(value: Any) -> Optional[float]:
    """A locally saved number, or None when absent or malformed."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class ViewStateStore:
    """Single owner of the product list and view configuration."""

    def __init__(
        self,
        gateway: PriceListRepository,
        local_store: LocalStateStore,
        exporter: Optional[ExportService] = None,
        settings: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.local_store = local_store
        self.settings = settings or get_settings()
        self.exporter = exporter or ExportService(self.settings)

        self.products: List[ProductRead] = []
        self.categories: List[CategoryRead] = []
        self.loading = True

        self.filters = ProductFilter()
        self.columns = ColumnRegistry(local_store)
        local_rate = self._local_rate()
        self.global_rate = local_rate if local_rate is not None else self.settings.DEFAULT_GLOBAL_RATE
        self.font_size = self._clamp_font_size(local_store.get(FONT_SIZE_KEY, self.settings.DEFAULT_FONT_SIZE))

        self.editing_id: Optional[int] = None
        self.edit_buffer: Optional[EditBuffer] = None
        self.context_menu: Optional[ContextMenuTarget] = None
        self.is_exporting = False
        self.notices: List[Notice] = []

    # Loading

    def _local_rate(self) -> Optional[float]:
        return _stored_number(self.local_store.get(RATE_KEY))

    async def load(self) -> None:
        """Fetch products, categories and the rate; a locally saved rate wins."""
        try:
            products, categories, rate = await asyncio.gather(
                self.gateway.list_products(),
                self.gateway.list_categories(),
                self.gateway.get_global_rate(),
            )
            self.products = list(products)
            self.categories = list(categories)

            local_rate = self._local_rate()
            if local_rate is not None:
                self.global_rate = local_rate
            elif rate:
                self.global_rate = to_number(rate)
                self.local_store.set(RATE_KEY, self.global_rate)
        except Exception as e:
            logger.warning("Error fetching data", error=str(e))
        finally:
            self.loading = False

    # Derived view

    def view_rows(self) -> List[ViewRow]:
        return build_view_rows(self.products, self.categories, self.filters)

    def grouped(self) -> GroupedProducts:
        return group_products(self.products, self.categories, self.filters)

    def visible_columns(self) -> List[ColumnDescriptor]:
        return self.columns.columns(editing=self.editing_id is not None)

    def final_price(self, product: ProductRead) -> int:
        return final_price(product, self.global_rate)

    def find_product(self, product_id: int) -> Optional[ProductRead]:
        return next((p for p in self.products if p.id == product_id), None)

    # Filters and display

    def set_search(self, text: str) -> None:
        self.filters = self.filters.model_copy(update={"search": text or ""})

    def set_category_filter(self, category: str) -> None:
        self.filters = self.filters.model_copy(update={"category": category or "all"})

    def set_show_hidden(self, show_hidden: bool) -> None:
        self.filters = self.filters.model_copy(update={"show_hidden": bool(show_hidden)})

    def toggle_show_hidden(self) -> None:
        self.set_show_hidden(not self.filters.show_hidden)

    def _clamp_font_size(self, value: Any) -> int:
        size = _stored_number(value)
        if size is None:
            return self.settings.DEFAULT_FONT_SIZE
        return max(self.settings.FONT_SIZE_MIN, min(self.settings.FONT_SIZE_MAX, int(size)))

    def set_font_size(self, value: Any) -> None:
        self.font_size = self._clamp_font_size(value)
        self.local_store.set(FONT_SIZE_KEY, self.font_size)

    # Context menu

    def open_context_menu(self, product_id: int, x: int = 0, y: int = 0) -> None:
        self.context_menu = ContextMenuTarget(product_id=product_id, x=x, y=y)

    def close_context_menu(self) -> None:
        self.context_menu = None

    # Editing

    def start_edit(self, product_id: int) -> None:
        """Open a row for editing; an unsaved buffer of another row is dropped."""
        product = self.find_product(product_id)
        if product is None:
            return
        self.editing_id = product_id
        self.edit_buffer = EditBuffer(
            name=product.name or "",
            cost_usd=str(product.cost_usd or product.carton_usd or 0),
            profit_syp=str(product.profit_syp),
            wholesale_carton_usd=str(product.wholesale_carton_usd),
        )
        self.context_menu = None

    def set_edit_value(self, field: str, text: str) -> None:
        if self.edit_buffer is None or field not in EditBuffer.model_fields:
            return
        self.edit_buffer = self.edit_buffer.model_copy(update={field: text})

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_buffer = None

    async def commit_edit(self) -> None:
        if self.editing_id is None or self.edit_buffer is None:
            self.cancel_edit()
            return
        product_id, buffer = self.editing_id, self.edit_buffer
        self.cancel_edit()
        await self.update_product(
            product_id,
            ProductUpdate(
                name=buffer.name,
                cost_usd=parse_number(buffer.cost_usd),
                profit_syp=parse_number(buffer.profit_syp),
                wholesale_carton_usd=parse_number(buffer.wholesale_carton_usd),
            ),
        )

    # Mutations

    async def reload_products(self) -> None:
        try:
            self.products = list(await self.gateway.list_products())
        except Exception as e:
            logger.warning("Error reloading products", error=str(e))

    async def update_product(self, product_id: int, changes: ProductUpdate) -> None:
        """Patch locally, forward the write, reload everything if it fails."""
        patch = {k: v for k, v in changes.model_dump(exclude_unset=True).items() if v is not None}
        if "cost_usd" in patch:
            patch["carton_usd"] = patch["cost_usd"]
        self.products = [p.model_copy(update=patch) if p.id == product_id else p for p in self.products]

        try:
            ok = await self.gateway.update_product(product_id, changes)
            if ok is False:
                raise GatewayError(f"Update of product {product_id} was rejected", {"product_id": product_id})
        except Exception as e:
            logger.warning("Error updating product, reloading", product_id=product_id, error=str(e))
            await self.reload_products()

    async def toggle_hidden(self, product_id: int) -> None:
        product = self.find_product(product_id)
        self.context_menu = None
        if product is None:
            return
        await self.update_product(product_id, ProductUpdate(is_hidden=not product.is_hidden))

    async def delete_product(self, product_id: int) -> None:
        self.context_menu = None
        try:
            ok = await self.gateway.delete_product(product_id)
            if ok is False:
                raise GatewayError(f"Delete of product {product_id} was rejected", {"product_id": product_id})
        except Exception as e:
            logger.warning("Error deleting product", product_id=product_id, error=str(e))
            await self.reload_products()
            return
        self.products = [p for p in self.products if p.id != product_id]
        if self.editing_id == product_id:
            self.cancel_edit()

    async def add_product(self, product: ProductCreate) -> Optional[int]:
        try:
            product_id = await self.gateway.create_product(product)
        except Exception as e:
            logger.warning("Error adding product", error=str(e))
            return None
        await self.load()
        return product_id

    async def update_global_rate(self, rate: Any) -> None:
        """Save the rate locally and remotely; prices pick it up at display time."""
        self.global_rate = to_number(rate)
        self.local_store.set(RATE_KEY, self.global_rate)
        try:
            await self.gateway.set_global_rate(self.global_rate)
        except Exception as e:
            logger.warning("Error updating global rate", error=str(e))
            return
        await self.load()

    async def reorder_categories(self, categories: List[CategoryRead]) -> None:
        """Persist the given order as sort positions 0..n-1, then reload."""
        orders = [CategoryOrder(id=c.id, sort_order=i) for i, c in enumerate(categories)]
        try:
            await self.gateway.reorder_categories(orders)
        except Exception as e:
            logger.warning("Error reordering categories", error=str(e))
            return
        self.categories = [c.model_copy(update={"sort_order": i}) for i, c in enumerate(categories)]
        await self.load()

    async def move_category(self, category_id: int, offset: int) -> None:
        ordered = sorted(self.categories, key=lambda c: sort_position(c.sort_order))
        index = next((i for i, c in enumerate(ordered) if c.id == category_id), None)
        if index is None or offset == 0 or not 0 <= index + offset < len(ordered):
            return
        ordered[index], ordered[index + offset] = ordered[index + offset], ordered[index]
        await self.reorder_categories(ordered)

    # Settings

    def reset_columns(self) -> None:
        self.columns.reset()

    def reset_all_settings(self) -> None:
        """Forget every locally saved setting and fall back to defaults."""
        self.local_store.clear()
        self.columns = ColumnRegistry(self.local_store)
        self.font_size = self.settings.DEFAULT_FONT_SIZE
        self.global_rate = self.settings.DEFAULT_GLOBAL_RATE

    # Export

    def _notify_error(self, exc: Exception) -> None:
        problem = to_problem(exc)
        self.notices.append(Notice(level="error", message=problem["message"], code=problem["code"]))

    async def _export(self, kind: str) -> Optional[Path]:
        if self.is_exporting:
            logger.info("Export already running, request ignored", kind=kind)
            return None
        self.is_exporting = True
        try:
            rows = self.view_rows()
            columns = self.columns.columns(editing=False)
            if kind == "pdf":
                return await self.exporter.export_pdf(rows, columns, self.global_rate)
            return await self.exporter.export_png(rows, columns, self.global_rate)
        except Exception as e:
            logger.error("Export error", kind=kind, exc_info=e)
            self._notify_error(e)
            return None
        finally:
            self.is_exporting = False

    async def export_pdf(self) -> Optional[Path]:
        return await self._export("pdf")

    async def export_png(self) -> Optional[Path]:
        return await self._export("png")
