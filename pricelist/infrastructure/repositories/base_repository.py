"""
SQLAlchemy implementation of the Base Repository.
Every write commits on its own; a failed write is rolled back and raised as GatewayError.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pricelist.core.exceptions import GatewayError
from pricelist.domain.repositories.base import BaseRepository
from pricelist.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Row access for one SQLAlchemy model."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise GatewayError(
                f"Could not {action} {self.model.__tablename__} row",
                {"error": str(e)},
            ) from e

    def get_by_id(self, id: Any) -> Optional[ModelType]:
        return self.db.get(self.model, id)

    def list_ordered(self, *order_by: Any) -> List[ModelType]:
        return self.db.query(self.model).order_by(*order_by).all()

    def create(self, data: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**data)
        self.db.add(db_obj)
        self._commit("create")
        self.db.refresh(db_obj)
        return db_obj

    def patch(self, db_obj: ModelType, data: Dict[str, Any]) -> ModelType:
        for field, value in data.items():
            if value is not None and hasattr(db_obj, field):
                setattr(db_obj, field, value)
        self._commit("update")
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, id: Any) -> bool:
        db_obj = self.get_by_id(id)
        if db_obj is None:
            return False
        self.db.delete(db_obj)
        self._commit("delete")
        return True
