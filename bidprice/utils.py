# bidprice/utils.py
"""Shared utilities: logging setup and file fingerprinting."""
import hashlib
import logging

from .settings import LOG_LEVEL


def get_logger(name=__name__):
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, LOG_LEVEL, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("bid-price")


def file_hash(data: bytes) -> str:
    """SHA-256 hex digest of a raw upload, used for whole-file de-duplication."""
    return hashlib.sha256(data).hexdigest()
