"""
Base Repository Interface.
Row access shared by the price list tables.
"""

from typing import Any, Dict, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Row access for one mapped table."""

    def get_by_id(self, id: Any) -> Optional[T]:
        ...

    def list_ordered(self, *order_by: Any) -> List[T]:
        ...

    def create(self, data: Dict[str, Any]) -> T:
        ...

    def patch(self, db_obj: T, data: Dict[str, Any]) -> T:
        """Write the non-None values of data onto db_obj; other columns are untouched."""
        ...

    def delete(self, id: Any) -> bool:
        """True when a row was removed."""
        ...
