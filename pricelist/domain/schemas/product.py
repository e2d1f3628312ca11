"""Pydantic schemas for Product domain."""

from typing import Optional

from pydantic import BaseModel


class ProductBase(BaseModel):
    name: Optional[str] = None
    cost_usd: Optional[float] = None
    profit_syp: Optional[float] = None
    wholesale_profit_syp: Optional[float] = None
    carton_usd: Optional[float] = None
    wholesale_carton_usd: Optional[float] = None


class ProductCreate(ProductBase):
    category_id: int
    name: str


class ProductUpdate(ProductBase):
    """Partial update: only fields that were explicitly set are written."""
    category_id: Optional[int] = None
    is_hidden: Optional[bool] = None


class ProductRead(BaseModel):
    id: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_sort_order: Optional[int] = None
    name: str = ""
    cost_usd: float = 0
    profit_syp: float = 500
    wholesale_profit_syp: float = 250
    carton_usd: float = 0
    wholesale_carton_usd: float = 0
    is_hidden: bool = False

    model_config = {"from_attributes": True}


class ProductFilter(BaseModel):
    search: str = ""
    category: str = "all"  # "all" or an exact category name
    show_hidden: bool = False
