"""
Catalog access for FastAPI.

Wraps the synchronous PhotoSearch calls in run_in_executor for async compatibility.
"""

import asyncio
from functools import partial, lru_cache

from config import SearchConfig
from db import DEFAULT_DB_PATH, get_pool
from search import PhotoSearch


@lru_cache(maxsize=1)
def get_photo_search():
    """Shared PhotoSearch backed by the process-wide connection pool."""
    config = SearchConfig()
    return PhotoSearch(DEFAULT_DB_PATH, config=config, pool=get_pool(DEFAULT_DB_PATH, config=config))


async def run_sync(fn, *args, **kwargs):
    """Run a synchronous function in the default executor."""
    loop = asyncio.get_running_loop()
    if kwargs:
        return await loop.run_in_executor(None, partial(fn, *args, **kwargs))
    return await loop.run_in_executor(None, partial(fn, *args))
