from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import DeclarativeBase

from joyeria.config import Config
from joyeria.errors import ErrorType
from joyeria.exceptions import AppException


# SQLAlchemy Base for ORM models
class Base(DeclarativeBase):
    pass


def get_async_url(url: str, db_type: str) -> str:
    """Convert database URL to async SQLAlchemy format."""
    db_type = db_type.lower()
    if db_type == "postgresql":
        return url.replace("postgresql://", "postgresql+asyncpg://")
    elif db_type == "mysql":
        return url.replace("mysql://", "mysql+aiomysql://")
    elif db_type == "sqlite":
        return url.replace("sqlite://", "sqlite+aiosqlite://")
    return url


class Database:
    """Owns the async engine and the session factory bound to it."""

    def __init__(self):
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self.db_type = Config.DATABASE_TYPE

    async def connect(self, engine: AsyncEngine | None = None):
        """Create database engine (or adopt the given one)."""
        self.engine = engine or create_async_engine(
            get_async_url(Config.DATABASE_URL, self.db_type),
            echo=False
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def disconnect(self):
        """Close database engine."""
        if self.engine:
            await self.engine.dispose()
        self.engine = None
        self.session_factory = None

    async def create_all(self):
        """Create every table that does not exist yet."""
        if not self.engine:
            await self.connect()

        # Import models so they register on Base.metadata
        import joyeria.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        if not self.session_factory:
            raise AppException(ErrorType.BACKEND_ERROR, "Database is not connected")
        return self.session_factory()


db = Database()


async def get_session():
    async with db.session() as session:
        yield session
