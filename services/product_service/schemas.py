from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import Category


class ProductCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    category: Category
    image_url: str | None = None


class ProductUpdate(BaseModel):
    """Catalogue edits. Stock moves only through restock and orders."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    category: Category | None = None
    image_url: str | None = None


class StockUpdate(BaseModel):
    quantity: int = Field(gt=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    description: str | None = None
    price: Decimal
    stock: int
    category: str
    image_url: str | None = None
    is_active: bool
    created_at: datetime | None = None


SORT_FIELDS = {"price": "price", "name": "name", "stock": "stock", "createdAt": "created_at"}


@dataclass(frozen=True)
class ProductListParams:
    """Catalogue listing filters. Newest first, ten per page unless asked otherwise."""
    category: Category | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    sort: str = "createdAt"
    order: str = "desc"
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
