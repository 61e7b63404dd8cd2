"""Small helpers shared across blocksort modules."""

from blocksort.utils.option import unwrap, unwrap_or

__all__ = ["unwrap", "unwrap_or"]
