"""
File hashing utilities.

The remote store keeps an MD5 hex digest of every uploaded object in its
custom metadata; these helpers compute the same digest locally.
"""

import hashlib
from pathlib import Path

import aiofiles

_CHUNK_SIZE = 65536


def content_md5(data: bytes) -> str:
    """Return the MD5 hex digest of ``data``."""
    return hashlib.md5(data).hexdigest()


def calculate_file_hash(file_path: Path) -> str:
    """
    Calculate the MD5 hash of file content (synchronous).

    Raises OSError if the file cannot be read.
    """
    md5_hash = hashlib.md5()
    with open(file_path, "rb") as f:
        for byte_block in iter(lambda: f.read(_CHUNK_SIZE), b""):
            md5_hash.update(byte_block)
    return md5_hash.hexdigest()


async def read_file_async(file_path: Path) -> bytes:
    """
    Read a whole file without blocking the event loop.

    Uses aiofiles so many files can be read and hashed in parallel.
    Raises OSError if the file cannot be read.
    """
    async with aiofiles.open(file_path, "rb") as f:
        return await f.read()
