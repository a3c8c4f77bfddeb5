"""
Benchmark: closed-form OLS vs trust-constr MLE on the synthetic regression.

Measures fit time as the number of units N grows and checks that both
estimators agree.

Run with: python benchmarks/benchmark_mle.py
"""

import argparse
import sys
import time

import numpy as np
import pandas as pd

from mlemodels import compare, fit_mle, fit_ols, generate

# -----------------------------------------------------------------------------
# Benchmark parameters
# -----------------------------------------------------------------------------
N_VALUES = [200, 500, 1000, 2000, 5000]
T = 5
N_RUNS = 5
BASE_SEED = 0

# Solver parameters
TOL = 1e-8
MAX_ITER = 1000

# Tolerance for checking agreement between the estimators
RTOL = 1e-2


def time_fit(fit, dataset, n_runs: int) -> tuple[float, object]:
    """Minimum wall time over `n_runs` fits, in ms, and the last result."""
    times = []
    result = None
    for _ in range(n_runs):
        start = time.perf_counter()
        result = fit(dataset)
        times.append((time.perf_counter() - start) * 1000)
    return min(times), result


def run_benchmarks(n_values: list[int], n_runs: int) -> pd.DataFrame:
    rows = []
    for N in n_values:
        print(f"  N={N}...", file=sys.stderr, flush=True)
        dataset = generate(N, T, BASE_SEED + N)

        ols_ms, ols = time_fit(fit_ols, dataset, n_runs)
        mle_ms, mle = time_fit(
            lambda d: fit_mle(d, tol=TOL, max_iter=MAX_ITER), dataset, n_runs
        )

        rows.append(
            {
                "N": N,
                "n_obs": dataset.n_samples,
                "ols_ms": ols_ms,
                "mle_ms": mle_ms,
                "max_coef_diff": float(
                    np.max(np.abs(ols.coefficients - mle.coefficients))
                ),
                "agree": compare(ols, mle, RTOL),
            }
        )
    return pd.DataFrame(rows)


def print_table(df: pd.DataFrame) -> None:
    print("\n## Fit time - minimum time in ms\n")
    print("| N | obs | OLS | MLE | max coef diff | agree |")
    print("|--:|----:|----:|----:|--------------:|:-----:|")
    for _, row in df.iterrows():
        print(
            f"| {row['N']} | {row['n_obs']} | {row['ols_ms']:.2f} | "
            f"{row['mle_ms']:.1f} | {row['max_coef_diff']:.2e} | "
            f"{'yes' if row['agree'] else 'NO'} |"
        )


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark closed-form OLS vs maximum likelihood"
    )
    parser.add_argument(
        "-n",
        "--n-runs",
        type=int,
        default=N_RUNS,
        help=f"Number of benchmark runs (default: {N_RUNS})",
    )
    parser.add_argument(
        "--n-values",
        type=str,
        default=None,
        help="Comma-separated N values (default: 200,500,1000,2000,5000)",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Save results to CSV file",
    )
    args = parser.parse_args()

    n_values = (
        N_VALUES
        if args.n_values is None
        else [int(x) for x in args.n_values.split(",")]
    )

    df = run_benchmarks(n_values=n_values, n_runs=args.n_runs)
    print_table(df)

    if args.csv:
        df.to_csv(args.csv, index=False)
        print(f"\nResults saved to {args.csv}", file=sys.stderr)


if __name__ == "__main__":
    main()
