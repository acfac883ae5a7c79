import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import NotFoundError, ValidationError
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductListParams, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            stock=data.stock,
            category=data.category.value,
            image_url=data.image_url,
            is_active=True,
        )
        product = await ProductRepository.create_product(db, product)
        logger.info("product_created", product_id=product.id, stock=product.stock)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, params: ProductListParams, include_inactive: bool = False):
        if params.min_price is not None and params.max_price is not None and params.min_price > params.max_price:
            raise ValidationError("minPrice must not be greater than maxPrice", field="minPrice")
        return await ProductRepository.list_products(db, params, active_only=not include_inactive)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: str, include_inactive: bool = False):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product or (not product.is_active and not include_inactive):
            raise NotFoundError("Product not found", product_id=product_id)
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: str, data: ProductUpdate):
        # Price edits only affect orders placed afterwards; line items keep their snapshot
        product = await ProductService.get_product_by_id(db, product_id, include_inactive=True)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(product, field, value.value if field == "category" else value)
        return await ProductRepository.update_product(db, product)

    @staticmethod
    async def restock(db: AsyncSession, product_id: str, quantity: int):
        product = await ProductService.get_product_by_id(db, product_id, include_inactive=True)
        await ProductRepository.credit_stock(db, product_id, quantity)
        await db.refresh(product)
        logger.info("product_restocked", product_id=product_id, quantity=quantity, stock=product.stock)
        return product

    @staticmethod
    async def set_active(db: AsyncSession, product_id: str, is_active: bool):
        """Soft delete / restore. The row is never removed so past orders keep their reference."""
        product = await ProductService.get_product_by_id(db, product_id, include_inactive=True)
        product.is_active = is_active
        product = await ProductRepository.update_product(db, product)
        logger.info("product_active_changed", product_id=product_id, is_active=is_active)
        return product
