"""Pydantic schemas for Category domain."""

from pydantic import BaseModel


class CategoryRead(BaseModel):
    id: int
    name: str
    sort_order: int = 0

    model_config = {"from_attributes": True}


class CategoryOrder(BaseModel):
    id: int
    sort_order: int
