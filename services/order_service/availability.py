from collections import defaultdict
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import InsufficientStockError, NotFoundError, UnavailableError
from services.product_service.models import Product
from services.product_service.repository import ProductRepository
from .validation import LineRequest


@dataclass(frozen=True)
class AcceptedLine:
    product: Product
    quantity: int


class AvailabilityChecker:
    """Read-only pass over the cart.

    The result is provisional: a concurrent order may take the same units
    before this order's debits run, which the inventory adjuster handles.
    """

    @staticmethod
    async def check(db: AsyncSession, lines: list[LineRequest]) -> list[AcceptedLine]:
        products = await ProductRepository.get_products_by_ids(db, [line.product_id for line in lines])

        requested = defaultdict(int)
        accepted = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                raise NotFoundError(f"product {line.product_id} not found", product_id=line.product_id)

            if not product.is_active:
                raise UnavailableError(
                    f"Product {product.name} is not available for ordering",
                    product_id=product.id,
                )

            # Repeated lines for one product draw on the same stock
            requested[product.id] += line.quantity
            if product.stock < requested[product.id]:
                raise InsufficientStockError(
                    product_id=product.id,
                    product_name=product.name,
                    available=product.stock,
                    requested=requested[product.id],
                )

            accepted.append(AcceptedLine(product=product, quantity=line.quantity))
        return accepted
