from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from config import DATABASE_URL

# SQLite connections are cheap to open; not pooling them keeps a connection
# from being shared across event loops.
engine_options = {"poolclass": NullPool} if DATABASE_URL.startswith("sqlite") else {}

engine = create_async_engine(DATABASE_URL, echo=False, **engine_options)
SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


def enable_sqlite_foreign_keys(async_engine):
    """SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection."""
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


async def get_db():
    async with SessionLocal() as db:
        yield db


async def create_tables(async_engine=engine):
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
