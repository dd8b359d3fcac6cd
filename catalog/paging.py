"""Limit/offset normalisation for list operations."""
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

# Products and categories
DEFAULT_LIMIT = 40
MAX_LIMIT = 100

# Product images
DEFAULT_IMAGE_LIMIT = 20
MAX_IMAGE_LIMIT = 20


def clamp_page(
    operation: str,
    limit: int,
    offset: int,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT
) -> Tuple[int, int]:
    """Reset an out of range limit to the default and a negative offset to 0.

    Never raises; each reset is logged.
    """
    if limit < 0 or limit > max_limit:
        logger.warning(f"Invalid limit {limit} for {operation}, using {default_limit}")
        limit = default_limit
    if offset < 0:
        logger.warning(f"Invalid offset {offset} for {operation}, using 0")
        offset = 0
    return limit, offset
