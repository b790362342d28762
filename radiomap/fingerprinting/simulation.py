"""Synthetic Wi-Fi surveys for exercising the fingerprint matcher.

Creates an indoor RSS fingerprint library with:
    - A regular grid of reference points (default 11 x 11, 5 m spacing)
    - Access points placed on the corners and mid-walls of the area
    - Log-distance path-loss model with shadow fading
    - Receiver sensitivity cut-off, so weak APs are missing from a
      fingerprint (sparse readings)

Author: Li-Ta Hsu
Date: December 2024
"""

from typing import Dict, List, Optional, Tuple

import numpy as np

from .sources import WifiAccessPoint
from .types import Fingerprint, LocatedFingerprint, RssiReading


def log_distance_rssi(
    d: float,
    p0: float = -30.0,
    d0: float = 1.0,
    n: float = 2.5,
    sigma: float = 4.0,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """
    Compute RSS using log-distance path-loss model.

    Model: P(d) = P0 - 10*n*log10(d/d0) + X_sigma

    Args:
        d: Distance from AP to receiver (meters).
        p0: Reference power at distance d0 (dBm).
        d0: Reference distance (meters).
        n: Path-loss exponent (2.0 = free space, 2-4 = indoor).
        sigma: Shadow fading standard deviation (dBm). 0 disables fading.
        rng: Random generator for shadow fading.

    Returns:
        RSS in dBm.
    """
    if d < 0.1:
        d = 0.1  # Avoid singularity

    path_loss = -10 * n * np.log10(d / d0)

    shadow = 0.0
    if sigma > 0:
        rng = rng if rng is not None else np.random.default_rng()
        shadow = rng.normal(0.0, sigma)

    return float(p0 + path_loss + shadow)


def _default_ap_positions(width: float, height: float, ap_height: float) -> np.ndarray:
    # Corners, then mid-walls
    return np.array([
        [0, 0, ap_height],
        [width, 0, ap_height],
        [width, height, ap_height],
        [0, height, ap_height],
        [width / 2, 0, ap_height],
        [width / 2, height, ap_height],
        [0, height / 2, ap_height],
        [width, height / 2, ap_height],
    ], dtype=float)


def _measure(
    position_3d: np.ndarray,
    access_points: Dict[WifiAccessPoint, np.ndarray],
    sigma: float,
    sensitivity: float,
    rng: np.random.Generator,
) -> List[RssiReading]:
    readings = []
    for ap, ap_pos in access_points.items():
        rss = log_distance_rssi(np.linalg.norm(position_3d - ap_pos), sigma=sigma, rng=rng)
        # Receiver cannot hear APs below its sensitivity
        if rss >= sensitivity:
            readings.append(RssiReading(source=ap, rssi=min(rss, 0.0)))
    return readings


def generate_survey_library(
    area_size: Tuple[float, float] = (50.0, 50.0),
    grid_spacing: float = 5.0,
    n_access_points: int = 8,
    ap_height: float = 2.5,
    device_height: float = 1.5,
    sensitivity: float = -95.0,
    sigma: float = 4.0,
    seed: int = 42,
) -> Tuple[List[LocatedFingerprint], Dict[WifiAccessPoint, np.ndarray]]:
    """
    Generate a synthetic Wi-Fi fingerprint library on a regular grid.

    Args:
        area_size: (width, height) in meters.
        grid_spacing: Distance between reference points (meters).
        n_access_points: Number of access points (1..8).
        ap_height: Mounting height of the access points (meters).
        device_height: Height of the surveying device (meters).
        sensitivity: Weakest RSS the device reports (dBm).
        sigma: Shadow fading standard deviation (dBm).
        seed: Random seed for reproducibility.

    Returns:
        Tuple (library, access_points) where library is a list of 2D
        LocatedFingerprint entries in row-major grid order and
        access_points maps each WifiAccessPoint to its 3D position.

    Raises:
        ValueError: If n_access_points or grid_spacing is out of range.
    """
    if not 1 <= n_access_points <= 8:
        raise ValueError(f"n_access_points must be in [1, 8], got {n_access_points}")
    if grid_spacing <= 0:
        raise ValueError(f"grid_spacing must be > 0, got {grid_spacing}")

    rng = np.random.default_rng(seed)
    width, height = area_size

    ap_positions = _default_ap_positions(width, height, ap_height)[:n_access_points]
    access_points = {
        WifiAccessPoint(bssid=f"AP{i + 1}", frequency=2.4e9): pos
        for i, pos in enumerate(ap_positions)
    }

    x_coords = np.arange(0, width + grid_spacing / 2, grid_spacing)
    y_coords = np.arange(0, height + grid_spacing / 2, grid_spacing)

    library = []
    for x in x_coords:
        for y in y_coords:
            readings = _measure(
                np.array([x, y, device_height]), access_points, sigma, sensitivity, rng
            )
            library.append(LocatedFingerprint(readings=readings, position=np.array([x, y])))

    return library, access_points


def simulate_query(
    position: np.ndarray,
    access_points: Dict[WifiAccessPoint, np.ndarray],
    noise_std: float = 2.0,
    device_height: float = 1.5,
    sensitivity: float = -95.0,
    rng: Optional[np.random.Generator] = None,
) -> Fingerprint:
    """
    Simulate an online query fingerprint measured at ``position``.

    Args:
        position: True 2D position (x, y) of the device.
        access_points: Map of access point to 3D position, as returned by
                       :func:`generate_survey_library`.
        noise_std: RSS measurement noise std (dBm).
        device_height: Height of the device (meters).
        sensitivity: Weakest RSS the device reports (dBm).
        rng: Random generator.

    Returns:
        Fingerprint without position.
    """
    rng = rng if rng is not None else np.random.default_rng()
    position = np.asarray(position, dtype=float)
    position_3d = np.array([position[0], position[1], device_height])
    return Fingerprint(
        readings=_measure(position_3d, access_points, noise_std, sensitivity, rng)
    )
