import logging
import sys

from skeleton.db.core import POSTGRES, SQLITE, Database
from skeleton.repo.base import Repository
from skeleton.repo.postgres import PostgresRepository
from skeleton.repo.sqlite import SqliteRepository

logger = logging.getLogger(__name__)

REPOSITORIES: dict[str, type[Repository]] = {
    SQLITE: SqliteRepository,
    POSTGRES: PostgresRepository,
}


def new_repo(db: Database) -> Repository:
    """Build the repository for the database driver. An unknown driver ends the process."""
    repo_cls = REPOSITORIES.get(db.driver)
    if repo_cls is None:
        logger.critical(f"unsupported database driver: {db.driver}")
        sys.exit(1)
    return repo_cls(db)


async def init_repo(repo: Repository) -> None:
    logger.info("Initializing database schema...")
    try:
        await repo.init()
    except Exception as e:
        logger.critical(f"failed to initialize database schema: {e}", exc_info=True)
        raise
    logger.info("database schema ready")


__all__ = ["Repository", "SqliteRepository", "PostgresRepository", "new_repo", "init_repo"]
