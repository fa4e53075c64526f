"""
Health probe functions for dependency checks.

Each probe function:
- Returns bool (True = healthy, False = unhealthy)
- Handles exceptions gracefully
- Includes appropriate timeouts
"""

import asyncio
from typing import Optional

from catalog.core.database import Database


async def check_database(database: Optional[Database], timeout_seconds: float = 2.0) -> bool:
    """
    Check database connectivity.

    Executes a simple SELECT 1 query to verify the database is reachable
    and responding. Includes timeout to prevent hanging on unreachable DB.

    Args:
        database: Application database, or None when no URL is configured
        timeout_seconds: Maximum time to wait for response (default: 2.0)

    Returns:
        True if database is reachable and healthy, False otherwise
    """
    if database is None or database.is_disposed:
        return False
    try:
        async with asyncio.timeout(timeout_seconds):
            return await database.check_connection()
    except TimeoutError:
        return False
