"""First-seen-wins row deduplication.

Detection is split from mutation: the detector only returns the indices of
duplicate rows, ``distinct.result_set.apply_removals`` removes them.
"""

from distinct.dedup.result import PassResult
from distinct.dedup.detector import DuplicateDetector

__all__ = ["PassResult", "DuplicateDetector"]
