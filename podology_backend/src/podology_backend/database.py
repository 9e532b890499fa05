# podology_backend/database.py
from podology_backend.settings import settings
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from typing import AsyncGenerator

# Table models must be imported before create_all sees the metadata
from podology_backend.models import appointment_models, blocked_date_models, booking_month_models  # noqa: F401

# Replace 'postgresql' with 'postgresql+asyncpg' to use the asyncpg driver
connection_string = str(settings.DIRECT_URL.replace('postgresql://', 'postgresql+asyncpg://', 1))

async_engine = create_async_engine(
    connection_string,
    echo=settings.DB_ECHO,
    future=True,
    # Supabase pooler (transaction mode): disable prepared statement cache
    connect_args={"statement_cache_size": 0},
    pool_pre_ping=True,
    pool_recycle=3600,
)

AsyncSessionLocal = sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)

async def create_db_tables():
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

# Dependency to get an async session for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
