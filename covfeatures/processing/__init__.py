"""
Parallel execution over point ranges.
"""

from .dispatch import (
    partition_ranges,
    run_partitioned,
)


__all__ = [
    "partition_ranges",
    "run_partitioned",
]
