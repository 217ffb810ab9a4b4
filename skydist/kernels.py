# skydist/kernels.py
from __future__ import annotations

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray


def _vincenty(ra1, cos_dec1, sin_dec1, ra2, cos_dec2, sin_dec2):
    """Great-circle separation from precomputed declination trig (Vincenty)."""
    dra = ra2 - ra1
    cos_dra = np.cos(dra)
    sin_dra = np.sin(dra)
    y1 = cos_dec1 * sin_dra
    y2 = cos_dec2 * sin_dec1 - sin_dec2 * cos_dec1 * cos_dra
    y = np.sqrt(y1 * y1 + y2 * y2)
    x = sin_dec2 * sin_dec1 + cos_dec2 * cos_dec1 * cos_dra
    return np.arctan2(y, x)


# Scalar kernel for the compiled loops. The arithmetic is the same as the
# array form below, so both agree to the last bit.
vincenty = njit(cache=True)(_vincenty)


def angular_distance(pos1: ArrayLike, pos2: ArrayLike) -> NDArray[np.float64]:
    """
    Angular distance in radians between [dec, ra] positions.

    Both inputs have a leading axis of length 2 (dec, ra); the remaining
    axes broadcast against each other.
    """
    pos1 = np.asarray(pos1, dtype=np.float64)
    pos2 = np.asarray(pos2, dtype=np.float64)
    if pos1.shape[:1] != (2,) or pos2.shape[:1] != (2,):
        raise ValueError("positions must have a leading [dec, ra] axis of length 2")
    dec1, ra1 = pos1
    dec2, ra2 = pos2
    return _vincenty(ra1, np.cos(dec1), np.sin(dec1), ra2, np.cos(dec2), np.sin(dec2))
