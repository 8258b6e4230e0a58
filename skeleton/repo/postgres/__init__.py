from skeleton.repo.postgres.repository import PostgresRepository

__all__ = ["PostgresRepository"]
