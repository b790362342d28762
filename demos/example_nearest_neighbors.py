"""
Example: Nearest-Neighbor Fingerprint Matching

Demonstrates matching noisy Wi-Fi query fingerprints against a synthetic
survey library with FingerprintMatcher, comparing the plain and the
mean-removed signal distances.

Implements:
    - NN rule:   i* = argmin_i D²(z, f_i)
    - k-NN rule: k smallest D²(z, f_i), stable on ties

Author: Navigation Engineer
Date: December 2024
"""

import argparse
import time
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from radiomap.fingerprinting import (
    NO_MEAN_SQEUCLIDEAN,
    SQEUCLIDEAN,
    Fingerprint,
    FingerprintMatcher,
    RssiReading,
    generate_survey_library,
    print_library_summary,
    simulate_query,
)


def generate_test_queries(access_points, area_size, n_queries=100, noise_std=2.0,
                          device_offset=0.0, seed=7):
    """
    Generate test query fingerprints at random positions.

    Args:
        access_points: Map of WifiAccessPoint to 3D position.
        area_size: (width, height) of the survey area in meters.
        n_queries: Number of test queries.
        noise_std: RSS measurement noise std (dBm).
        device_offset: Constant gain offset of the query device (dB).
        seed: Random seed.

    Returns:
        Tuple of (query_fingerprints, true_locations).
    """
    rng = np.random.default_rng(seed)
    width, height = area_size
    true_locs = np.column_stack([
        rng.uniform(0.0, width, n_queries),
        rng.uniform(0.0, height, n_queries),
    ])

    queries = []
    for loc in true_locs:
        query = simulate_query(loc, access_points, noise_std=noise_std, rng=rng)
        if device_offset != 0.0:
            query = Fingerprint(readings=[
                RssiReading(source=r.source, rssi=min(r.rssi + device_offset, 0.0))
                for r in query.readings
            ])
        queries.append(query)
    return queries, true_locs


def evaluate_matcher(method_name, matcher, queries, true_locs, k=1):
    """
    Evaluate a matcher by the error of the k-NN centroid.

    Args:
        method_name: Name of method.
        matcher: FingerprintMatcher to evaluate.
        queries: Query fingerprints.
        true_locs: True locations, shape (N, 2).
        k: Number of neighbors averaged for the position.

    Returns:
        Dictionary with errors, computation time, etc.
    """
    print(f"\n  Evaluating {method_name}...")

    errors = []
    times = []

    for query, true_loc in zip(queries, true_locs):
        t_start = time.perf_counter()
        nearest = matcher.find_k_nearest_to(query, k)
        t_end = time.perf_counter()

        est_loc = np.mean([fp.position for fp in nearest], axis=0)
        errors.append(np.linalg.norm(est_loc - true_loc))
        times.append((t_end - t_start) * 1000)  # ms

    errors = np.array(errors)
    times = np.array(times)

    results = {
        "method": method_name,
        "errors": errors,
        "times": times,
        "rmse": np.sqrt(np.mean(errors**2)),
        "median_error": np.median(errors),
        "p90": np.percentile(errors, 90),
        "mean_time_ms": np.mean(times),
    }

    print(f"    RMSE: {results['rmse']:.2f}m")
    print(f"    Median: {results['median_error']:.2f}m")
    print(f"    90th percentile: {results['p90']:.2f}m")
    print(f"    Avg time: {results['mean_time_ms']:.3f}ms")

    return results


def main():
    """Run nearest-neighbor matching examples."""
    parser = argparse.ArgumentParser(
        description="Nearest-neighbor fingerprint matching demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default 50 m x 50 m area, 5 m grid, 8 APs
  python demos/example_nearest_neighbors.py

  # Query device reads 6 dB weaker than the survey device
  python demos/example_nearest_neighbors.py --device-offset -6
        """,
    )

    area_group = parser.add_argument_group("Survey Parameters")
    area_group.add_argument(
        "--grid-spacing", type=float, default=5.0, help="Grid spacing in meters (default: 5.0)"
    )
    area_group.add_argument(
        "--n-aps", type=int, default=8, help="Number of access points (default: 8)"
    )

    query_group = parser.add_argument_group("Query Parameters")
    query_group.add_argument(
        "--n-queries", type=int, default=200, help="Number of test queries (default: 200)"
    )
    query_group.add_argument(
        "--noise-std", type=float, default=2.0, help="RSS noise std in dBm (default: 2.0)"
    )
    query_group.add_argument(
        "--device-offset", type=float, default=0.0,
        help="Constant gain offset of the query device in dB (default: 0.0)",
    )

    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--output", type=str, default="demos/nearest_neighbors.png",
        help="Figure output path (default: demos/nearest_neighbors.png)",
    )
    parser.add_argument("--no-show", action="store_true", help="Do not open a plot window")

    args = parser.parse_args()

    print("=" * 70)
    print("Nearest-Neighbor Fingerprint Matching")
    print("=" * 70)

    print("\n1. Generating survey library...")
    area_size = (50.0, 50.0)
    library, access_points = generate_survey_library(
        area_size=area_size,
        grid_spacing=args.grid_spacing,
        n_access_points=args.n_aps,
        seed=args.seed,
    )
    print_library_summary(library)

    print("\n2. Generating test queries...")
    queries, true_locs = generate_test_queries(
        access_points, area_size,
        n_queries=args.n_queries,
        noise_std=args.noise_std,
        device_offset=args.device_offset,
        seed=args.seed + 1,
    )
    print(f"   Generated {len(queries)} queries, noise {args.noise_std} dBm, "
          f"device offset {args.device_offset} dB")

    print("\n3. Evaluating matchers...")
    plain = FingerprintMatcher(library, metric=SQEUCLIDEAN)
    no_mean = FingerprintMatcher(library, metric=NO_MEAN_SQEUCLIDEAN)

    results = []
    for k in [1, 3, 5]:
        results.append(evaluate_matcher(f"plain (k={k})", plain, queries, true_locs, k=k))
        results.append(evaluate_matcher(f"no-mean (k={k})", no_mean, queries, true_locs, k=k))

    print("\n" + "=" * 70)
    print("RESULTS SUMMARY")
    print("=" * 70)
    print(f"{'Method':<20} {'RMSE (m)':<12} {'Median (m)':<12} {'90th % (m)':<12} {'Time (ms)':<12}")
    print("-" * 70)
    for r in results:
        print(f"{r['method']:<20} {r['rmse']:<12.2f} {r['median_error']:<12.2f} "
              f"{r['p90']:<12.2f} {r['mean_time_ms']:<12.3f}")

    print("\n4. Generating visualizations...")
    fig = plt.figure(figsize=(14, 5))

    # Plot 1: Library and the k=3 neighbors of one query
    ax1 = plt.subplot(1, 2, 1)
    positions = np.array([fp.position for fp in library])
    ax1.scatter(positions[:, 0], positions[:, 1],
                c='blue', marker='s', s=30, alpha=0.4, label='Library')
    nearest, sqr_dists = plain.find_k_nearest_with_distances(queries[0], 3)
    nearest_pos = np.array([fp.position for fp in nearest])
    ax1.scatter(nearest_pos[:, 0], nearest_pos[:, 1],
                c='orange', marker='o', s=80, label='3 nearest (query 0)')
    ax1.scatter(true_locs[0, 0], true_locs[0, 1],
                c='red', marker='x', s=100, label='True position')
    for pos, d2 in zip(nearest_pos, sqr_dists):
        ax1.annotate(f"{d2:.0f} dB²", pos, xytext=(5, 5), textcoords='offset points', fontsize=8)
    ax1.set_xlabel('X (m)')
    ax1.set_ylabel('Y (m)')
    ax1.set_title('Library & Nearest Fingerprints')
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)
    ax1.axis('equal')

    # Plot 2: Error CDF
    ax2 = plt.subplot(1, 2, 2)
    for r in results:
        sorted_errors = np.sort(r['errors'])
        cdf = np.arange(1, len(sorted_errors) + 1) / len(sorted_errors)
        ax2.plot(sorted_errors, cdf, label=r['method'], linewidth=2)
    ax2.set_xlabel('Positioning Error (m)')
    ax2.set_ylabel('CDF')
    ax2.set_title('Cumulative Distribution of Errors')
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    output_file = Path(args.output)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    print(f"   Saved: {output_file}")

    if not args.no_show:
        plt.show()

    print("\n" + "=" * 70)
    print("Example complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
