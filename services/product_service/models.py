import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class Category(str, enum.Enum):
    MEN = "Men"
    WOMEN = "Women"
    UNISEX = "Unisex"


class Product(Base):
    __tablename__ = "products"
    # The database refuses a negative stock even if a caller bypasses the guarded debit
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(20), nullable=False, index=True)
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
