"""
Fit a synthetic regression by OLS and by maximum likelihood and compare.

Usage:
    mlemodels --N 2000 --T 5 --seed 1234
    python -m mlemodels --tol 1e-10 -v
"""

import argparse
import logging
import sys

from mlemodels._solvers import DEFAULT_MAX_ITER, DEFAULT_TOL
from mlemodels.data import N_FEATURES, generate
from mlemodels.exceptions import MLEModelsError
from mlemodels.inference import compare, comparison_table
from mlemodels.mle import fit_mle
from mlemodels.ols import fit_ols

logger = logging.getLogger(__name__)

COEF_NAMES = ["const"] + [f"x{i}" for i in range(1, N_FEATURES)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare closed-form OLS with numerical maximum likelihood"
    )
    parser.add_argument(
        "--N", type=int, default=2000, help="Number of units (default: 2000)"
    )
    parser.add_argument(
        "--T", type=int, default=5, help="Observations per unit (default: 5)"
    )
    parser.add_argument(
        "--seed", type=int, default=1234, help="Random seed (default: 1234)"
    )
    parser.add_argument(
        "--tol",
        type=float,
        default=DEFAULT_TOL,
        help=f"Solver tolerance (default: {DEFAULT_TOL:g})",
    )
    parser.add_argument(
        "--max-iter",
        type=int,
        default=DEFAULT_MAX_ITER,
        help=f"Maximum solver iterations (default: {DEFAULT_MAX_ITER})",
    )
    parser.add_argument(
        "--rtol",
        type=float,
        default=1e-2,
        help="Relative tolerance for OLS/MLE agreement (default: 0.01)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stage = "generate"
    try:
        logger.info("Generating data: N=%d, T=%d, seed=%d", args.N, args.T, args.seed)
        dataset = generate(args.N, args.T, args.seed)

        stage = "ols"
        logger.info("Fitting OLS")
        ols = fit_ols(dataset)

        stage = "mle"
        logger.info("Fitting MLE (tol=%g, max_iter=%d)", args.tol, args.max_iter)
        mle = fit_mle(dataset, tol=args.tol, max_iter=args.max_iter)
    except MLEModelsError as e:
        print(f"Stage '{stage}' failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(comparison_table({"OLS": ols, "MLE": mle}, names=COEF_NAMES))
    agree = compare(ols, mle, args.rtol)
    print(
        f"OLS and MLE {'agree' if agree else 'DISAGREE'} "
        f"within relative tolerance {args.rtol:g}"
    )
    return 0 if agree else 2


if __name__ == "__main__":
    sys.exit(main())
