"""Async engine / session factory and the declarative base."""
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def create_session_factory(database_url: str, echo: bool = False) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(database_url, echo=echo, future=True)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def get_db(request: Request):
    """Yield a session from the factory the app was started with."""
    async with request.app.state.sessionmaker() as db:
        yield db
