"""Great-circle distance helpers."""

from typing import Sequence, Tuple

import numpy as np

from session_sentinel.common.constants import RiskConstants


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance between two points in kilometres."""
    return float(haversine_many((lat1, lon1), [(lat2, lon2)])[0])


def haversine_many(
    origin: Tuple[float, float],
    points: Sequence[Tuple[float, float]],
    radius_km: float = RiskConstants.EARTH_RADIUS_KM,
) -> np.ndarray:
    """Distances from origin to each point, in kilometres.

    Args:
        origin: (latitude, longitude) in degrees
        points: (latitude, longitude) pairs in degrees

    Returns:
        Array of distances aligned with points
    """
    if len(points) == 0:
        return np.zeros(0)

    lat1, lon1 = np.radians(origin)
    coords = np.radians(np.asarray(points, dtype=float))
    lat2, lon2 = coords[:, 0], coords[:, 1]

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    # Rounding can push a slightly above 1 for antipodal points.
    a = np.clip(a, 0.0, 1.0)
    return radius_km * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
