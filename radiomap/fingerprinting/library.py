"""Quality checks and summaries for fingerprint libraries.

A library (radio map) is a plain sequence of LocatedFingerprint entries
owned by the caller. This module does not store or load libraries; it only
inspects one before it is handed to the matcher.

Author: Navigation Engineer
Date: 2024
"""

from typing import Sequence

import numpy as np

from .types import LocatedFingerprint


def validate_library(library: Sequence[LocatedFingerprint], strict: bool = True) -> dict:
    """
    Perform validation checks on a fingerprint library.

    Validation checks include:
    - Entry types: every entry must be a LocatedFingerprint
    - Position dimensionality: all entries must be 2D or all 3D
    - Coverage: empty fingerprints, duplicated sources within a fingerprint,
      duplicated positions, very small libraries
    - Optional strict checks: verify reasonable RSSI ranges

    Args:
        library: Sequence of located fingerprints.
        strict: If True, perform additional checks on RSSI value ranges.

    Returns:
        Dictionary with validation results and warnings:
            {
                'valid': bool,
                'errors': list of error messages,
                'warnings': list of warning messages,
                'stats': dict with library statistics
            }

    Raises:
        ValueError: If library is None.

    Examples:
        >>> result = validate_library(library)
        >>> if not result['valid']:
        ...     print("Errors:", result['errors'])
    """
    if library is None:
        raise ValueError("fingerprint library must not be None")

    errors = []
    warnings = []
    stats = {}

    entries = list(library)
    stats["n_fingerprints"] = len(entries)

    # Check 1: Entry types
    located = []
    for i, entry in enumerate(entries):
        if isinstance(entry, LocatedFingerprint):
            located.append(entry)
        else:
            errors.append(
                f"Entry {i} is a {type(entry).__name__}, not a LocatedFingerprint"
            )

    if len(entries) == 0:
        errors.append("Library is empty")
    elif len(entries) < 3:
        warnings.append(
            f"Library has only {len(entries)} fingerprint(s); "
            f"may be insufficient for k-NN matching"
        )

    # Check 2: Position dimensionality
    dims = sorted({fp.dimensions for fp in located})
    stats["dimensions"] = dims
    if len(dims) > 1:
        errors.append(f"Mixed position dimensionality in library: {dims}")

    # Check 3: Readings per fingerprint and duplicated sources
    n_readings = np.array([len(fp) for fp in located], dtype=int)
    all_sources = set()
    for fp in located:
        if len(fp) == 0:
            warnings.append(f"Fingerprint at {fp.position.tolist()} has no readings")
        identities = [r.source.identity for r in fp.readings]
        all_sources.update(identities)
        if len(set(identities)) < len(identities):
            warnings.append(
                f"Fingerprint at {fp.position.tolist()} has duplicated sources; "
                f"each duplicate is compared independently"
            )

    stats["n_sources"] = len(all_sources)
    if n_readings.size > 0:
        stats["readings_per_fingerprint_min"] = int(n_readings.min())
        stats["readings_per_fingerprint_mean"] = float(n_readings.mean())
        stats["readings_per_fingerprint_max"] = int(n_readings.max())

    # Check 4: Duplicate positions
    if len(dims) == 1:
        positions = np.array([fp.position for fp in located])
        n_duplicates = len(positions) - len(np.unique(positions, axis=0))
        if n_duplicates > 0:
            warnings.append(
                f"Found {n_duplicates} duplicate position(s); "
                f"multiple fingerprints at same coordinates"
            )

    rssi = np.array([r.rssi for fp in located for r in fp.readings], dtype=float)
    if rssi.size > 0:
        stats["rssi_min"] = float(rssi.min())
        stats["rssi_max"] = float(rssi.max())

    # Check 5: Strict value range checks (optional)
    if strict and rssi.size > 0:
        # RSSI values typically in range [-120, 0] dBm
        if np.any(rssi > 0):
            warnings.append("Some RSSI values are positive (unusual for dBm)")
        if np.any(rssi < -120):
            warnings.append("Some RSSI values below -120 dBm (very weak signal)")

    valid = len(errors) == 0

    return {
        "valid": valid,
        "errors": errors,
        "warnings": warnings,
        "stats": stats,
    }


def print_library_summary(library: Sequence[LocatedFingerprint]) -> None:
    """
    Print a human-readable summary of the library.

    Args:
        library: Sequence of located fingerprints.

    Examples:
        >>> print_library_summary(library)
        Fingerprint Library Summary
        ==================================================
        Fingerprints:     121
        Radio Sources:    8
        ...
    """
    library = list(library)
    result = validate_library(library, strict=False)
    stats = result["stats"]

    print("Fingerprint Library Summary")
    print("=" * 50)
    print(f"Fingerprints:     {stats['n_fingerprints']}")
    print(f"Radio Sources:    {stats['n_sources']}")
    print(f"Position Dim:     {stats['dimensions']}")
    print()

    if "readings_per_fingerprint_mean" in stats:
        print("Readings per Fingerprint:")
        print(f"  Min:  {stats['readings_per_fingerprint_min']}")
        print(f"  Mean: {stats['readings_per_fingerprint_mean']:.1f}")
        print(f"  Max:  {stats['readings_per_fingerprint_max']}")
        print()

    if "rssi_min" in stats:
        print(f"RSSI Range: [{stats['rssi_min']:.1f}, {stats['rssi_max']:.1f}] dBm")
        print()

    located = [fp for fp in library if isinstance(fp, LocatedFingerprint)]
    if located and len(stats["dimensions"]) == 1:
        positions = np.array([fp.position for fp in located])
        print("Position Bounds:")
        for dim in range(positions.shape[1]):
            print(
                f"  Dimension {dim}: "
                f"[{positions[:, dim].min():.2f}, {positions[:, dim].max():.2f}]"
            )
        print()

    for message in result["errors"]:
        print(f"ERROR: {message}")
    for message in result["warnings"]:
        print(f"WARNING: {message}")
