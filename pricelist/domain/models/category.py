"""Category domain model — maps to the 'categories' table."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from pricelist.infrastructure.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, unique=True)
    sort_order = Column(Integer, default=0, index=True)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category {self.id} - {self.name}>"
