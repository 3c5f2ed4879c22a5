"""
Async filesystem predicates used during main-file resolution.
"""
import asyncio
import os


class AsyncFileSystem:
    """Existence and directory checks offloaded to a worker thread."""

    async def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return await asyncio.to_thread(os.path.exists, path)

    async def is_dir(self, path: str) -> bool:
        """Check if a path is a directory."""
        return await asyncio.to_thread(os.path.isdir, path)
