from abc import ABC, abstractmethod
from importlib import resources

from skeleton.db.core import Database, Executor, split_script


class Repository(ABC):
    """Liveness check and schema setup for one database driver."""

    def __init__(self, db: Database, executor: Executor):
        self.db = db
        self.executor = executor

    @abstractmethod
    async def ping(self) -> None:
        ...

    @abstractmethod
    async def init(self) -> None:
        ...

    def with_tx(self, tx: Executor):
        """Same repository, bound to an open transaction instead of the pool."""
        return type(self)(self.db, executor=tx)


def load_query(package: str, name: str) -> str:
    return resources.files(package).joinpath("queries", name).read_text(encoding="utf-8")


async def run_script(executor: Executor, script: str) -> None:
    for statement in split_script(script):
        await executor.execute(statement)
