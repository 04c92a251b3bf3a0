"""File content hashing."""

import hashlib
import logging
from pathlib import Path

import xxhash

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Returned instead of a digest when the file could not be read.
HASH_ERROR = "hash_error"

_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "xxh64": xxhash.xxh64,
    "xxh128": xxhash.xxh3_128,
}

ALGORITHMS = tuple(_ALGORITHMS)


def _new_hasher(algorithm: str):
    try:
        return _ALGORITHMS[algorithm]()
    except KeyError:
        raise ValueError(f"Unknown hash algorithm: {algorithm}") from None


def compute_file_hash(
    file_path: Path,
    chunk_size: int = CHUNK_SIZE,
    algorithm: str = "sha256"
) -> str:
    """
    Compute the hex digest of a file, reading it in fixed-size chunks.

    SHA-256 is used by default; "xxh64" and "xxh128" trade collision
    resistance for speed. Read failures return HASH_ERROR.
    """
    hasher = _new_hasher(algorithm)
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    except OSError as e:
        logger.warning("Hash error for %s: %s", file_path, e)
        return HASH_ERROR
    return hasher.hexdigest()


def is_hash_error(value) -> bool:
    return value == HASH_ERROR
