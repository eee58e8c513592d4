"""Exact FAISS neighbor search over a fixed 3D point set."""

import math
from typing import List

import faiss
import numpy as np

from ..utils.config import INDEX_DTYPE
from ..utils.utils import as_coords


class KDIndex:
    """
    Built once per point set, queried many times, never mutated.

    Coordinates are shifted by their mean before being stored as float32 so
    large georeferenced offsets do not eat the mantissa. Every query is a
    single point, so results do not depend on how callers batch their work.
    """

    def __init__(self, xyz):
        xyz = as_coords(xyz)

        self.offset = xyz.mean(axis=0) if len(xyz) else np.zeros(3)
        data = np.ascontiguousarray(xyz - self.offset, dtype=INDEX_DTYPE)

        self.index = faiss.IndexFlatL2(3)
        if len(data):
            self.index.add(data)

    def __len__(self) -> int:
        return int(self.index.ntotal)

    def _query(self, point) -> np.ndarray:
        q = np.asarray(point, dtype=np.float64).reshape(1, 3) - self.offset
        return np.ascontiguousarray(q, dtype=INDEX_DTYPE)

    def neighbors(self, point, k: int, stride: int = 1) -> List[int]:
        """Nearest ``k`` ids taking every ``stride``-th of ``k * stride`` hits."""
        stride = max(1, int(stride))
        count = min(int(k) * stride, len(self))
        if count <= 0:
            return []

        _, idx = self.index.search(self._query(point), count)
        ids = idx[0]
        ids = ids[ids >= 0]

        out_len = int(math.ceil(len(ids) / stride))
        return [int(ids[i * stride]) for i in range(out_len)]

    def radius(self, point, radius: float) -> List[int]:
        """All ids within ``radius`` of ``point`` (unordered)."""
        if len(self) == 0 or radius <= 0:
            return []
        lims, _, idx = self.index.range_search(self._query(point), float(radius) ** 2)
        return [int(i) for i in idx[lims[0]:lims[1]]]
