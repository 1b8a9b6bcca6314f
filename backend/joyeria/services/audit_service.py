"""
Audit log read model.

There is no audit table: entries are synthesized on every read by scanning
products, sales, expenses, users and login events.
"""
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyeria.models import Product, Sale, Expense, User, LoginEvent
from joyeria.schemas.audit import AuditEntry

NOT_AVAILABLE = "N/A"


def _who(user: User | None) -> dict:
    return {
        "user_name": user.name if user else NOT_AVAILABLE,
        "user_email": user.email if user else NOT_AVAILABLE,
    }


def _product_details(product: Product) -> dict:
    return {
        "name": product.name,
        "purchase_price": float(product.purchase_price),
        "sale_price": float(product.sale_price),
        "category": product.category,
        "stock": product.stock,
    }


def device_from_user_agent(user_agent: str | None) -> str:
    if not user_agent:
        return "Unknown"
    return "Mobile" if "Mobile" in user_agent else "Desktop"


def product_entries(product: Product) -> list[AuditEntry]:
    entries = [AuditEntry(
        id=f"prod-{product.id}",
        type="product",
        action="create",
        table="products",
        record_id=product.id,
        date=product.created_at,
        details=_product_details(product),
        **_who(product.user),
    )]
    if product.updated_at and product.updated_at != product.created_at:
        entries.append(AuditEntry(
            id=f"prod-upd-{product.id}-{product.updated_at.isoformat()}",
            type="product",
            action="update",
            table="products",
            record_id=product.id,
            date=product.updated_at,
            details=_product_details(product),
            **_who(product.user),
        ))
    return entries


def sale_entry(sale: Sale) -> AuditEntry:
    return AuditEntry(
        id=f"sale-{sale.id}",
        type="sale",
        action="create",
        table="sales",
        record_id=sale.id,
        date=sale.created_at,
        details={
            "product": sale.product.name if sale.product else "Deleted product",
            "quantity": sale.quantity,
            "total_price": float(sale.total_price),
            "profit": float(sale.profit),
            "customer": sale.customer,
            "payment_method": sale.payment_method,
        },
        **_who(sale.user),
    )


def expense_entry(expense: Expense) -> AuditEntry:
    return AuditEntry(
        id=f"expense-{expense.id}",
        type="expense",
        action="create",
        table="expenses",
        record_id=expense.id,
        date=expense.created_at,
        details={
            "concept": expense.concept,
            "amount": float(expense.amount),
            "category": expense.category,
            "description": expense.description,
        },
        **_who(expense.user),
    )


def user_entry(user: User) -> AuditEntry:
    return AuditEntry(
        id=f"user-{user.id}",
        type="user",
        action="create",
        table="users",
        record_id=user.id,
        date=user.created_at,
        details={"name": user.name, "email": user.email, "role": user.role},
        **_who(user),
    )


def login_entry(login: LoginEvent) -> AuditEntry:
    return AuditEntry(
        id=f"login-{login.id}",
        type="login",
        action="login",
        table="login_events",
        record_id=login.id,
        user_name=login.name or NOT_AVAILABLE,
        user_email=login.email or NOT_AVAILABLE,
        date=login.logged_at,
        details={
            "email": login.email,
            "name": login.name or NOT_AVAILABLE,
            "ip_address": login.ip_address or "Unavailable",
            "user_agent": login.user_agent or "Unavailable",
            "success": login.success,
            "device": device_from_user_agent(login.user_agent),
        },
    )


def _matches(entry: AuditEntry, search: str) -> bool:
    needle = search.lower()
    haystack = [entry.user_name, entry.user_email, entry.table, str(entry.record_id)]
    haystack.extend(str(value) for value in entry.details.values() if value is not None)
    return any(needle in item.lower() for item in haystack)


async def list_entries(
    session: AsyncSession,
    entry_type: str | None = None,
    action: str | None = None,
    search: str | None = None,
) -> list[AuditEntry]:
    products = (await session.execute(
        select(Product).options(selectinload(Product.user))
    )).scalars().all()
    sales = (await session.execute(
        select(Sale).options(selectinload(Sale.user), selectinload(Sale.product))
    )).scalars().all()
    expenses = (await session.execute(
        select(Expense).options(selectinload(Expense.user))
    )).scalars().all()
    users = (await session.execute(select(User))).scalars().all()
    logins = (await session.execute(select(LoginEvent))).scalars().all()

    entries: list[AuditEntry] = []
    for product in products:
        entries.extend(product_entries(product))
    entries.extend(sale_entry(s) for s in sales)
    entries.extend(expense_entry(e) for e in expenses)
    entries.extend(user_entry(u) for u in users)
    entries.extend(login_entry(login) for login in logins)

    if entry_type:
        entries = [e for e in entries if e.type == entry_type]
    if action:
        entries = [e for e in entries if e.action == action]
    if search:
        entries = [e for e in entries if _matches(e, search)]

    entries.sort(key=lambda e: (e.date or datetime.min, e.id), reverse=True)
    return entries
