"""Price list engine — Configuration via pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./prices.db"

    # Pricing
    DEFAULT_GLOBAL_RATE: float = 11700
    GLOBAL_RATE_KEY: str = "global_rate"
    PRICE_ROUNDING_STEP: int = 500
    PER_UNIT_DIVISOR: int = 100
    CARTONS_PER_CASE: int = 50
    DEFAULT_PROFIT_SYP: float = 500
    DEFAULT_WHOLESALE_PROFIT_SYP: float = 250
    DEFAULT_CATEGORY_ID: int = 1
    UNCATEGORIZED_LABEL: str = "غير مصنف"
    COLLATION_LOCALE: str = ""  # LC_COLLATE for name sorting; "" uses the environment

    # View
    FONT_SIZE_MIN: int = 10
    FONT_SIZE_MAX: int = 24
    DEFAULT_FONT_SIZE: int = 14
    LOCAL_STATE_PATH: str = "./data/local_state.json"

    # Export
    EXPORT_DIR: str = "./data/exports"
    PDF_PAGE_WIDTH_MM: float = 78
    PDF_PAGE_HEIGHT_MM: float = 311
    EXPORT_WIDTH_PX: int = 800
    PNG_EXPORT_SCALE: int = 3
    PDF_EXPORT_SCALE: int = 2
    PDF_JPEG_QUALITY: int = 95
    EXPORT_FONT_PATH: Optional[str] = None  # TrueType font with Arabic glyphs
    SHOP_NAME: str = "مركز الوسيم لتجارة الدخان"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
