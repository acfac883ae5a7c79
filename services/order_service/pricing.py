from dataclasses import dataclass
from decimal import Decimal

from shared.exceptions import ValidationError
from .availability import AcceptedLine

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricedOrder:
    lines: list[PricedLine]
    total_amount: Decimal


class PricingCalculator:
    """Prices come from the product record at check time, never from the request."""

    @staticmethod
    def price(accepted: list[AcceptedLine]) -> PricedOrder:
        lines = [
            PricedLine(
                product_id=line.product.id,
                quantity=line.quantity,
                unit_price=Decimal(str(line.product.price)).quantize(CENT),
            )
            for line in accepted
        ]
        total = sum((line.line_total for line in lines), Decimal("0")).quantize(CENT)

        if total <= 0:
            raise ValidationError("Total amount must be greater than 0", field="totalAmount")
        return PricedOrder(lines=lines, total_amount=total)
