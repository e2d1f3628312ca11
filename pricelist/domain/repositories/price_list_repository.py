"""
Price List Repository Interface.
The mutation gateway the engine talks to. Every call may suspend; a failed
write either raises or returns False.
"""

from typing import List, Protocol, Sequence

from pricelist.domain.schemas.category import CategoryOrder, CategoryRead
from pricelist.domain.schemas.product import ProductCreate, ProductRead, ProductUpdate


class PriceListRepository(Protocol):
    """Interface for category, product and exchange-rate operations."""

    async def list_categories(self) -> List[CategoryRead]:
        """Categories ordered by sort position."""
        ...

    async def reorder_categories(self, orders: Sequence[CategoryOrder]) -> bool:
        """Write new sort positions."""
        ...

    async def list_products(self) -> List[ProductRead]:
        """Products joined with their category name and sort position."""
        ...

    async def create_product(self, product: ProductCreate) -> int:
        """Insert a product and return its id."""
        ...

    async def update_product(self, product_id: int, changes: ProductUpdate) -> bool:
        """Patch a product; fields not set on `changes` are untouched."""
        ...

    async def delete_product(self, product_id: int) -> bool:
        """Delete a product."""
        ...

    async def get_global_rate(self) -> float:
        """Stored exchange rate."""
        ...

    async def set_global_rate(self, rate: float) -> bool:
        """Store the exchange rate."""
        ...
