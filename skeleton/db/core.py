import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Protocol, Sequence

from sqlalchemy import Row, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from skeleton.core.exceptions import UnsupportedDatabaseError

logger = logging.getLogger(__name__)

SQLITE = "sqlite"
POSTGRES = "postgres"
SQLITE_PREFIX = "sqlite://"
POSTGRES_PREFIX = "postgres://"

Params = Mapping[str, Any] | None


class Executor(Protocol):
    """Runs SQL against either the pool or an open transaction."""

    async def query(self, sql: str, params: Params = None) -> Sequence[Row]: ...

    async def execute(self, sql: str, params: Params = None) -> int: ...

    async def query_row(self, sql: str, params: Params = None) -> Row | None: ...


class PoolExecutor:
    """Borrows a pooled connection per call and commits before returning it."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def query(self, sql: str, params: Params = None) -> Sequence[Row]:
        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params or {})
            return result.fetchall()

    async def execute(self, sql: str, params: Params = None) -> int:
        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params or {})
            return result.rowcount

    async def query_row(self, sql: str, params: Params = None) -> Row | None:
        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params or {})
            return result.first()


class TxExecutor:
    """Runs every call on one connection inside an open transaction."""

    def __init__(self, conn: AsyncConnection):
        self.conn = conn

    async def query(self, sql: str, params: Params = None) -> Sequence[Row]:
        result = await self.conn.execute(text(sql), params or {})
        return result.fetchall()

    async def execute(self, sql: str, params: Params = None) -> int:
        result = await self.conn.execute(text(sql), params or {})
        return result.rowcount

    async def query_row(self, sql: str, params: Params = None) -> Row | None:
        result = await self.conn.execute(text(sql), params or {})
        return result.first()


def strip_dsn(dsn: str) -> tuple[str, str]:
    """
    Pick the driver from the DSN scheme and return it with the rest of the DSN.
    For sqlite a leading `file:` after the scheme is dropped as well.
    """
    if dsn.startswith(SQLITE_PREFIX):
        return SQLITE, dsn.removeprefix(SQLITE_PREFIX).removeprefix("file:")
    if dsn.startswith(POSTGRES_PREFIX):
        return POSTGRES, dsn.removeprefix(POSTGRES_PREFIX)
    raise UnsupportedDatabaseError(dsn)


def is_memory(remainder: str) -> bool:
    path, _, _ = remainder.partition("?")
    return path in ("", ":memory:")


def sqlite_url(remainder: str) -> URL:
    path, _, query = remainder.partition("?")
    if is_memory(remainder):
        return make_url("sqlite+aiosqlite://")
    if query:
        # query parameters only reach sqlite in URI mode
        return make_url(f"sqlite+aiosqlite:///file:{path}?{query}&uri=true")
    return make_url(f"sqlite+aiosqlite:///{path}")


def postgres_url(remainder: str) -> URL:
    url = make_url(f"postgresql+asyncpg://{remainder}")
    if "sslmode" in url.query:
        # asyncpg spells libpq's sslmode as ssl
        query = dict(url.query)
        query["ssl"] = query.pop("sslmode")
        url = url.set(query=query)
    return url


class Database:
    def __init__(self, engine: AsyncEngine, driver: str):
        self.engine = engine
        self.driver = driver

    @classmethod
    def open(cls, dsn: str, echo: bool = False) -> "Database":
        """Create the engine for dsn. No connection is made until first use."""
        driver, remainder = strip_dsn(dsn)

        if driver == SQLITE:
            url = sqlite_url(remainder)
            if is_memory(remainder):
                # one shared connection, otherwise every checkout sees an empty database
                engine = create_async_engine(url, echo=echo, poolclass=StaticPool)
            else:
                engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        else:
            engine = create_async_engine(
                postgres_url(remainder),
                echo=echo,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_recycle=3600,
                pool_pre_ping=True,
            )

        logger.info(f"opened {driver} database pool")
        return cls(engine=engine, driver=driver)

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info(f"closed {self.driver} database pool")

    def conn(self) -> PoolExecutor:
        return PoolExecutor(self.engine)

    @asynccontextmanager
    async def begin_tx(self, isolation_level: str | None = None, read_only: bool = False) -> AsyncIterator[TxExecutor]:
        """
        Open a transaction on a dedicated connection.
        Commits when the block exits normally, rolls back when it raises.
        """
        async with self.engine.connect() as conn:
            options: dict[str, Any] = {}
            if isolation_level:
                options["isolation_level"] = isolation_level
            if read_only:
                if self.driver == POSTGRES:
                    options["postgresql_readonly"] = True
                else:
                    logger.debug("read_only transactions are not enforced on sqlite")
            if options:
                conn = await conn.execution_options(**options)
            async with conn.begin():
                yield TxExecutor(conn)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


def split_script(script: str) -> list[str]:
    """
    Split an SQL script into single statements on `;`.
    Full-line `--` comments are dropped. Semicolons inside string literals are not supported.
    """
    lines = [line for line in script.splitlines() if not line.strip().startswith("--")]
    statements = "\n".join(lines).split(";")
    return [stmt.strip() for stmt in statements if stmt.strip()]
