"""Array conversion helpers shared by the index and the linear algebra."""

import numpy as np
import torch


def ensure_torch(x, dtype=torch.float64) -> torch.Tensor:
    """CPU tensor view of ``x``; numpy input shares memory when the dtype already matches."""
    if torch.is_tensor(x):
        return x.detach().to(device='cpu', dtype=dtype)
    return torch.as_tensor(np.asarray(x), dtype=dtype)


def as_coords(a, dtype=np.float64) -> np.ndarray:
    """Contiguous (N,3) coordinate array from a numpy array, tensor or nested list."""
    if torch.is_tensor(a):
        a = a.detach().cpu().numpy()
    a = np.ascontiguousarray(a, dtype=dtype)
    if a.ndim != 2 or a.shape[1] != 3:
        raise ValueError(f"Expected (N,3) coordinates, got {a.shape}")
    return a
