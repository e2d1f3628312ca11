"""Pydantic schemas for the derived view model (rows, columns, edit state)."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from pricelist.domain.schemas.product import ProductRead


class ColumnDescriptor(BaseModel):
    id: str
    header: str
    kind: Literal["data", "computed", "actions"] = "data"
    align: Literal["left", "center", "right"] = "center"
    min_width: int = 100
    editable: bool = False

    model_config = {"frozen": True}


class CategoryHeaderRow(BaseModel):
    type: Literal["category"] = "category"
    name: str


class ProductRow(BaseModel):
    type: Literal["product"] = "product"
    product: ProductRead


ViewRow = Annotated[Union[CategoryHeaderRow, ProductRow], Field(discriminator="type")]


class GroupedProducts(BaseModel):
    categories: list[str]
    products: list[ProductRead]
    counts: list[int]


class EditBuffer(BaseModel):
    """Raw, possibly locale-formatted text typed into the row being edited."""
    name: str = ""
    cost_usd: str = "0"
    profit_syp: str = "0"
    wholesale_carton_usd: str = "0"


class ContextMenuTarget(BaseModel):
    product_id: int
    x: int = 0
    y: int = 0


class Notice(BaseModel):
    level: Literal["info", "error"] = "info"
    message: str
    code: Optional[str] = None
