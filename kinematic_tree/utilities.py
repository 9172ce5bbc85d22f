"""utilities.py - Assorted Helper Functions"""
from __future__ import annotations

import numpy as np

__all__ = ['sequence_to_index', 'as_spatial_vector', 'read_only']

def sequence_to_index(value: str) -> list[int]:
    """Converts cardinal axis string sequence to axis indices

    :raises ValueError: If `value` is not a sequence of three distinct axes
    """
    mapping = {'x': 0, 'y': 1, 'z': 2}
    try:
        index = [mapping[c] for c in value.lower()]
    except KeyError:
        raise ValueError(f"Invalid axis sequence '{value}'") from None

    if len(index) != 3:
        raise ValueError(f"Axis sequence '{value}' must name three axes")

    return index

def as_spatial_vector(value) -> np.ndarray:
    """Converts input to a 6 component double array (angular, linear)"""
    out = np.array(value, dtype=np.double).reshape(-1)
    if out.shape != (6,):
        raise ValueError('Spatial vectors must have exactly six components')
    return out

def read_only(value: np.ndarray) -> np.ndarray:
    """Marks an array read-only in place and returns it"""
    value.flags.writeable = False
    return value
