from __future__ import annotations

import numpy as np

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance in kilometres.

    Accepts scalars or numpy arrays (broadcast together). Scalars in give a
    plain ``float`` back.
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = np.radians(np.subtract(lat2, lat1))
    dlambda = np.radians(np.subtract(lon2, lon1))

    a = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2.0) ** 2
    # Rounding can push ``a`` a hair past 1 for antipodal points
    a = np.clip(a, 0.0, 1.0)
    distance = 2.0 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a))

    if np.ndim(distance) == 0:
        return float(distance)
    return distance
