"""
Inventory ledger: product records and the sales that consume their stock.
"""
import logging

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyeria.errors import ErrorType
from joyeria.exceptions import AppException
from joyeria.models import Product, Sale, User
from joyeria.schemas.product import ProductCreate, ProductUpdate
from joyeria.schemas.sale import SaleCreate, SaleResponse
from joyeria.services.change_feed import change_feed
from joyeria.services.lifecycle import to_money
from joyeria.time_utils import utcnow

logger = logging.getLogger(__name__)


# =============================================================================
# PRODUCTS
# =============================================================================

async def list_products(
    session: AsyncSession,
    search: str | None = None,
    available_only: bool = False,
    in_stock_only: bool = False,
) -> list[Product]:
    query = select(Product)
    if available_only:
        query = query.where(Product.available.is_(True))
    if in_stock_only:
        query = query.where(Product.stock > 0)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Product.name.ilike(pattern), Product.category.ilike(pattern)))
    result = await session.execute(query.order_by(Product.name, Product.id))
    return list(result.scalars().all())


async def get_product(session: AsyncSession, product_id: int) -> Product:
    product = await session.get(Product, product_id)
    if not product:
        raise AppException(ErrorType.NOT_FOUND, "Product not found")
    return product


async def create_product(session: AsyncSession, data: ProductCreate, user: User) -> Product:
    values = data.model_dump(exclude_none=True)
    now = utcnow()
    product = Product(**values, user_id=user.id, created_at=now, updated_at=now)
    session.add(product)
    await session.commit()

    logger.info(f"Product created: {product.id} {product.name}")
    change_feed.publish("products", "INSERT", product.id)
    return product


async def update_product(session: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
    product = await get_product(session, product_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    product.updated_at = utcnow()
    await session.commit()

    change_feed.publish("products", "UPDATE", product.id)
    return product


async def delete_product(session: AsyncSession, product_id: int) -> None:
    result = await session.execute(
        select(Product)
        .options(selectinload(Product.sales), selectinload(Product.reservations))
        .where(Product.id == product_id)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise AppException(ErrorType.NOT_FOUND, "Product not found")

    # Sales outlive the product; their product_id is cleared by the ORM
    await session.delete(product)
    await session.commit()

    logger.info(f"Product deleted: {product_id}")
    change_feed.publish("products", "DELETE", product_id)


async def set_product_image(session: AsyncSession, product_id: int, image_url: str) -> Product:
    product = await get_product(session, product_id)
    product.image_url = image_url
    product.updated_at = utcnow()
    await session.commit()

    change_feed.publish("products", "UPDATE", product.id)
    return product


# =============================================================================
# SALES
# =============================================================================

def sale_to_response(sale: Sale, product_name: str | None) -> SaleResponse:
    return SaleResponse(
        id=sale.id,
        product_id=sale.product_id,
        product_name=product_name,
        quantity=sale.quantity,
        unit_price=sale.unit_price,
        total_price=sale.total_price,
        profit=sale.profit,
        customer=sale.customer,
        payment_method=sale.payment_method,
        sale_date=sale.sale_date,
        created_at=sale.created_at,
    )


async def record_sale(session: AsyncSession, data: SaleCreate, user: User) -> SaleResponse:
    """Persist a sale and take its quantity out of stock in one transaction.

    Profit uses the product's purchase price at this moment; there is no
    price history, so later price edits do not change recorded profits.
    """
    product = await get_product(session, data.product_id)
    if product.stock < data.quantity:
        raise AppException(ErrorType.CONFLICT, f"Insufficient stock. Available: {product.stock}")

    unit_price = to_money(data.unit_price)
    total_price = to_money(unit_price * data.quantity)
    profit = total_price - to_money(product.purchase_price) * data.quantity

    # Guarded decrement: a concurrent sale that drained the stock makes this a no-op
    result = await session.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock >= data.quantity)
        .values(stock=Product.stock - data.quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        raise AppException(ErrorType.CONFLICT, "Insufficient stock")

    sale = Sale(
        product_id=product.id,
        quantity=data.quantity,
        unit_price=unit_price,
        total_price=total_price,
        profit=profit,
        customer=data.customer or None,
        payment_method=data.payment_method or None,
        user_id=user.id,
    )
    session.add(sale)
    await session.commit()

    logger.info(f"Sale recorded: {sale.id} product={product.id} qty={data.quantity} total={total_price}")
    change_feed.publish("sales", "INSERT", sale.id)
    change_feed.publish("products", "UPDATE", product.id)
    return sale_to_response(sale, product.name)


async def list_sales(session: AsyncSession, search: str | None = None, limit: int = 100) -> list[SaleResponse]:
    query = select(Sale).options(selectinload(Sale.product))
    if search:
        pattern = f"%{search}%"
        query = query.outerjoin(Product, Sale.product_id == Product.id).where(
            or_(Sale.customer.ilike(pattern), Product.name.ilike(pattern))
        )
    query = query.order_by(Sale.sale_date.desc(), Sale.id.desc()).limit(limit)
    result = await session.execute(query)
    return [
        sale_to_response(sale, sale.product.name if sale.product else None)
        for sale in result.scalars().all()
    ]
