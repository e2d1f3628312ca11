"""Key/value settings, mapped to the 'settings' table."""

from sqlalchemy import Column, String, Text

from pricelist.infrastructure.database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Setting {self.key}={self.value}>"
