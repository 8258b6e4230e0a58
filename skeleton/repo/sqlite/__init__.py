from skeleton.repo.sqlite.repository import SqliteRepository

__all__ = ["SqliteRepository"]
