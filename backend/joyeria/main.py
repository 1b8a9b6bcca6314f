import asyncio
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress
from sqlalchemy.exc import SQLAlchemyError

from joyeria.config import Config
from joyeria.db.database import db
from joyeria.routers import (
    audit,
    auth,
    changes,
    expenses,
    extract,
    health,
    maintenance,
    payment_plans,
    products,
    reservations,
    sales,
    stats,
    storage,
)
from joyeria.exceptions import (
    AppException,
    app_exception_handler,
    database_exception_handler,
    generic_exception_handler,
)
from joyeria.services.maintenance_service import run_periodic_sweep

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db.connect()
    await db.create_all()

    sweep = None
    if Config.EXPIRY_SWEEP_INTERVAL_SECONDS > 0:
        sweep = asyncio.create_task(
            run_periodic_sweep(db.session_factory, Config.EXPIRY_SWEEP_INTERVAL_SECONDS)
        )
    yield
    if sweep:
        sweep.cancel()
        with suppress(asyncio.CancelledError):
            await sweep
    await db.disconnect()


app = FastAPI(
    title="AIVI Silver House API",
    version="1.0.0",
    description="Point of sale for a jewelry shop: inventory, sales, installment plans and layaways",
    lifespan=lifespan
)

# Register exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(sales.router)
app.include_router(payment_plans.router)
app.include_router(reservations.router)
app.include_router(expenses.router)
app.include_router(stats.router)
app.include_router(audit.router)
app.include_router(extract.router)
app.include_router(storage.router)
app.include_router(changes.router)
app.include_router(maintenance.router)
