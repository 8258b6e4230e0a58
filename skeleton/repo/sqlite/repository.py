from skeleton.db.core import Database, Executor
from skeleton.repo.base import Repository, load_query, run_script

INIT_SCHEMA = load_query(__package__, "init.sql")


class SqliteRepository(Repository):
    def __init__(self, db: Database, executor: Executor | None = None):
        super().__init__(db, executor or db.conn())

    async def ping(self) -> None:
        await self.db.ping()

    async def init(self) -> None:
        await run_script(self.executor, INIT_SCHEMA)
