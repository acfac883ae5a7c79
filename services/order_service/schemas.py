from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel


class LineItemCreate(BaseModel):
    # Shape only; OrderValidator owns the business rules (non-empty, quantity >= 1, id format)
    product: str | None = None
    quantity: StrictInt | None = None


class OrderCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    line_items: list[LineItemCreate] | None = None


class StatusUpdate(BaseModel):
    status: str | None = None


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: str


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    product: ProductSummary
    quantity: int
    unit_price_at_order_time: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    line_items: list[OrderItemResponse]
    total_amount: Decimal
    status: str
    stock_committed: bool
    created_at: datetime | None = None
