import uuid
from collections.abc import Mapping
from dataclasses import dataclass

from shared.exceptions import ValidationError


@dataclass(frozen=True)
class LineRequest:
    product_id: str
    quantity: int


def _canonical_ref(value) -> str | None:
    """Lowercase hyphenated form, the way ids are stored; None when not a UUID."""
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def _field(item, name):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


class OrderValidator:
    """Shape checks on a raw cart. Nothing is read from or written to the store."""

    @staticmethod
    def validate(line_items) -> list[LineRequest]:
        if line_items is None:
            raise ValidationError("lineItems is required", field="lineItems")
        if isinstance(line_items, (str, bytes, Mapping)) or not hasattr(line_items, "__iter__"):
            raise ValidationError("lineItems must be a list", field="lineItems")

        items = list(line_items)
        if not items:
            raise ValidationError("lineItems must contain at least one item", field="lineItems")

        validated = []
        for index, item in enumerate(items):
            product = _field(item, "product")
            quantity = _field(item, "quantity")

            if product is None:
                raise ValidationError("Product ID is required for each item", field=f"lineItems[{index}].product")
            product_id = _canonical_ref(product)
            if product_id is None:
                raise ValidationError("Product ID is not a valid identifier", field=f"lineItems[{index}].product")

            # bool is an int subclass; True is not a quantity
            if quantity is None:
                raise ValidationError("Product quantity is required", field=f"lineItems[{index}].quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise ValidationError(
                    "Product quantity must be an integer greater than or equal to 1",
                    field=f"lineItems[{index}].quantity",
                )

            validated.append(LineRequest(product_id=product_id, quantity=quantity))
        return validated
