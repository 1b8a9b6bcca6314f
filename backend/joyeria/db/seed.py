import asyncio
import random
from datetime import timedelta
from decimal import Decimal
from sqlalchemy import select
from joyeria.db.database import db
from joyeria.models import Product, Sale, Expense, User
from joyeria.services.auth_service import hash_password
from joyeria.time_utils import today, utcnow


ADMIN_EMAIL = "admin@aivi.mx"
ADMIN_PASSWORD = "aivi-admin-2024"

# Sample products: (name, category, purchase price, sale price, stock, supplier)
PRODUCTS_DATA = [
    ("Anillo de plata 925", "Anillos", Decimal("180.00"), Decimal("450.00"), 12, "Platería Taxco"),
    ("Anillo de oro 14k", "Anillos", Decimal("1800.00"), Decimal("3900.00"), 3, "Oro Fino MX"),
    ("Collar de plata con dije", "Collares", Decimal("220.00"), Decimal("590.00"), 8, "Platería Taxco"),
    ("Cadena de oro 18k", "Cadenas", Decimal("2600.00"), Decimal("5200.00"), 2, "Oro Fino MX"),
    ("Aretes de plata con zirconia", "Aretes", Decimal("90.00"), Decimal("260.00"), 20, "Joyas del Centro"),
    ("Pulsera tejida de plata", "Pulseras", Decimal("150.00"), Decimal("380.00"), 10, "Joyas del Centro"),
    ("Reloj clásico acero", "Relojes", Decimal("700.00"), Decimal("1500.00"), 4, "Distribuidora Tiempo"),
    ("Dije corazón de plata", "Dijes", Decimal("60.00"), Decimal("180.00"), 25, "Platería Taxco"),
    ("Piercing de titanio", "Piercings", Decimal("40.00"), Decimal("120.00"), 30, "Joyas del Centro"),
]

# Monthly expenses: (concept, category, amount)
EXPENSES_DATA = [
    ("Renta del local", "Servicios", Decimal("6500.00")),
    ("Luz", "Servicios", Decimal("850.00")),
    ("Bolsas y estuches", "Suministros", Decimal("420.00")),
    ("Anuncios en redes", "Publicidad", Decimal("600.00")),
]

PAYMENT_METHODS = ["Efectivo", "Tarjeta", "Transferencia"]
CUSTOMERS = ["María López", "Ana García", "Lucía Hernández", "Sofía Martínez", None]


async def seed_database():
    await db.connect()
    await db.create_all()

    async with db.session() as session:
        # Check if data exists
        result = await session.execute(select(Product).limit(1))
        if result.scalar():
            print("Database already seeded")
            await db.disconnect()
            return

        admin = User(
            email=ADMIN_EMAIL,
            name="Administrador",
            role="administrador",
            password_hash=hash_password(ADMIN_PASSWORD),
        )
        session.add(admin)
        await session.flush()

        now = utcnow()
        products = []
        for name, category, purchase, sale, stock, supplier in PRODUCTS_DATA:
            product = Product(
                name=name,
                category=category,
                purchase_price=purchase,
                sale_price=sale,
                stock=stock,
                supplier=supplier,
                created_at=now,
                updated_at=now,
                user_id=admin.id,
            )
            products.append(product)
            session.add(product)

        await session.flush()  # Get IDs

        # Generate ~90 days of sales and monthly expenses
        end_date = today()
        current = end_date - timedelta(days=90)

        while current <= end_date:
            for _ in range(random.randint(0, 3)):
                product = random.choice(products)
                if product.stock == 0:
                    continue
                quantity = 1
                product.stock -= quantity
                total = product.sale_price * quantity
                session.add(Sale(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.sale_price,
                    total_price=total,
                    profit=total - product.purchase_price * quantity,
                    customer=random.choice(CUSTOMERS),
                    payment_method=random.choice(PAYMENT_METHODS),
                    sale_date=current,
                    user_id=admin.id,
                ))

            if current.day == 1:
                for concept, category, amount in EXPENSES_DATA:
                    session.add(Expense(
                        concept=concept,
                        category=category,
                        amount=amount,
                        expense_date=current,
                        user_id=admin.id,
                    ))

            current += timedelta(days=1)

        await session.commit()
        print("Database seeded successfully!")

    await db.disconnect()


if __name__ == "__main__":
    asyncio.run(seed_database())
