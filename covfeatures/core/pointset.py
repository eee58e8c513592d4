"""In-memory point container with named per-point scalar fields."""

import numpy as np
from typing import Dict, Iterable, List, Optional

from ..utils.utils import as_coords


class PointSet:
    """
    Coordinates plus a name -> (N,) array mapping of scalar fields.

    Writes to distinct point ids land in distinct array slots, so worker
    threads owning disjoint id ranges never touch the same memory.
    """

    def __init__(self, xyz, fields: Optional[Dict[str, Iterable]] = None):
        self.xyz = as_coords(xyz)
        self._fields: Dict[str, np.ndarray] = {}

        for name, values in (fields or {}).items():
            values = np.asarray(values)
            if values.shape != (len(self),):
                raise ValueError(f"Field '{name}' has shape {values.shape}, expected ({len(self)},)")
            self._fields[name] = values.copy()

    @classmethod
    def from_numpy(cls, points: np.ndarray, names: Optional[List[str]] = None) -> "PointSet":
        """Build from an (N, 3+C) array; extra columns become fields named by ``names``."""
        points = np.asarray(points)
        extra = points.shape[1] - 3
        names = list(names or [])
        if len(names) != extra:
            raise ValueError(f"Got {len(names)} names for {extra} extra columns")
        fields = {name: points[:, 3 + i] for i, name in enumerate(names)}
        return cls(points[:, :3], fields)

    def __len__(self) -> int:
        return self.xyz.shape[0]

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __getitem__(self, name: str) -> np.ndarray:
        return self._fields[name]

    @property
    def field_names(self) -> List[str]:
        return list(self._fields)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def register_field(self, name: str, dtype=np.float64) -> np.ndarray:
        """Declare a field if absent. Existing fields are reused untouched."""
        if name not in self._fields:
            dtype = np.dtype(dtype)
            fill = np.nan if dtype.kind == 'f' else 0
            self._fields[name] = np.full(len(self), fill, dtype=dtype)
        return self._fields[name]

    def point(self, point_id: int) -> np.ndarray:
        return self.xyz[point_id]

    def get_field(self, name: str, point_id: int):
        return self._fields[name][point_id]

    def set_field(self, name: str, point_id: int, value) -> None:
        self._fields[name][point_id] = value
