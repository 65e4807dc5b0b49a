"""
Database connection pool for the content and interaction collaborators.
"""

import asyncpg
from typing import Optional
import logging

from eventscout.config import DatabaseConfig

logger = logging.getLogger(__name__)

# Global connection pool
pg_pool: Optional[asyncpg.Pool] = None


async def init_db(config: DatabaseConfig) -> asyncpg.Pool:
    """Initialize the PostgreSQL connection pool"""
    global pg_pool

    if pg_pool is not None:
        return pg_pool

    try:
        pg_pool = await asyncpg.create_pool(
            config.database_url,
            min_size=config.min_pool_size,
            max_size=config.max_pool_size
        )
        logger.info("PostgreSQL connection pool created")
    except Exception as e:
        logger.error(f"Failed to connect to PostgreSQL: {e}")
        raise

    return pg_pool


async def close_db():
    """Close database connections"""
    global pg_pool

    if pg_pool:
        await pg_pool.close()
        pg_pool = None
        logger.info("PostgreSQL connection pool closed")

