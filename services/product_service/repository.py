from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from .models import Product
from .schemas import SORT_FIELDS, ProductListParams

class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, params: ProductListParams, active_only: bool = True):
        query = select(Product)
        if active_only:
            query = query.where(Product.is_active.is_(True))
        elif params.is_active is not None:
            query = query.where(Product.is_active.is_(params.is_active))
        if params.category is not None:
            query = query.where(Product.category == params.category.value)
        if params.min_price is not None:
            query = query.where(Product.price >= params.min_price)
        if params.max_price is not None:
            query = query.where(Product.price <= params.max_price)

        column = getattr(Product, SORT_FIELDS[params.sort])
        ordering = column.asc() if params.order == "asc" else column.desc()
        # id breaks ties so pages do not overlap
        query = query.order_by(ordering, Product.id).offset(params.offset).limit(params.limit)

        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: str):
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def get_products_by_ids(db: AsyncSession, product_ids):
        result = await db.execute(select(Product).where(Product.id.in_(set(product_ids))))
        return {product.id: product for product in result.scalars().all()}

    @staticmethod
    async def get_stock(db: AsyncSession, product_id: str) -> int | None:
        # Column select bypasses the identity map, so this is the committed value
        result = await db.execute(select(Product.stock).where(Product.id == product_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def debit_stock(db: AsyncSession, product_id: str, quantity: int) -> bool:
        """Take `quantity` units only if at least that many remain.

        The guard and the decrement are one UPDATE statement, so two sessions
        racing for the last units cannot both pass. Returns False when the
        guard rejected the debit.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount == 1

    @staticmethod
    async def credit_stock(db: AsyncSession, product_id: str, quantity: int) -> bool:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount == 1
