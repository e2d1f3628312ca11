"""Product domain model — maps to the 'products' table."""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from pricelist.infrastructure.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    name = Column(Text, nullable=False)

    # Foreign-currency costs (USD) and local-currency margins (SYP)
    cost_usd = Column(Float, default=0)
    profit_syp = Column(Float, default=500)
    wholesale_profit_syp = Column(Float, default=250)
    carton_usd = Column(Float, default=0)  # legacy cost, mirrors cost_usd
    wholesale_carton_usd = Column(Float, default=0)
    is_hidden = Column(Boolean, default=False, nullable=False)

    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product {self.id} - {self.name}>"
