"""Postgres pool creation and schema migrations for the user repository."""

from pathlib import Path

import asyncpg
import structlog

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


async def create_pool(dsn: str, min_size: int = 2, max_size: int = 10) -> asyncpg.Pool:
    """Open the pool handed to PostgresUserRepository.

    The pool is owned by the caller (the app lifespan), which closes it on
    shutdown. Nothing in the package keeps a module-level handle.

    Raises:
        ValueError: If dsn is empty
    """
    if not dsn:
        raise ValueError("A Postgres URL is required to create the pool")

    try:
        pool = await asyncpg.create_pool(
            dsn,
            min_size=min_size,
            max_size=max_size,
            command_timeout=60,
        )
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info("database_pool_created", min_size=min_size, max_size=max_size)
    return pool


async def run_migrations(pool: asyncpg.Pool, migrations_dir: Path = MIGRATIONS_DIR) -> int:
    """Apply every ``*.sql`` file in name order inside one transaction.

    Migrations use IF NOT EXISTS, so re-running them on startup is safe.
    A failing file rolls back the whole batch.

    Returns:
        Number of files applied
    """
    migration_files = sorted(migrations_dir.glob("*.sql"))
    if not migration_files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return 0

    async with pool.acquire() as conn:
        async with conn.transaction():
            for migration_file in migration_files:
                try:
                    await conn.execute(migration_file.read_text())
                except asyncpg.PostgresError as e:
                    logger.error("migration_failed", file=migration_file.name, error=str(e))
                    raise
                logger.info("migration_applied", file=migration_file.name)

    return len(migration_files)
