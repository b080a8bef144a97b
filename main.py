#!/usr/bin/env python3
"""
Main script for running the Iris statistics walkthrough.
"""

# Pipeline overview (README-style):
# 1) Load the bundled Iris table, derive Sepal_Area, and normalize Species
#    to a categorical with setosa as the baseline level.
# 2) Fit Sepal_Length ~ Sepal_Width + Petal_Length on setosa, report
#    coefficients and confidence/prediction intervals at one new flower.
# 3) Refit on a seeded 70/30 split of setosa and score the held-out rows.
# 4) Refit on all species with Species as a categorical predictor.
# 5) Render two regression plots, then run a Welch t-test and a one-way ANOVA.

import argparse
import logging
import os
import sys
import time

import matplotlib

matplotlib.use("Agg")

from irislab.analysis import AnalysisConfig, print_reports, run_walkthrough


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for the walkthrough."""
    defaults = AnalysisConfig()
    parser = argparse.ArgumentParser(
        description="Regression, interval and hypothesis-test walkthrough on Iris."
    )
    parser.add_argument(
        "--output-dir",
        default=defaults.output_dir,
        help=f"Directory for plots, tables and the log (default: {defaults.output_dir}).",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Optional CSV replacing the bundled Iris table.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Seed of the train/test split (default: {defaults.seed}).",
    )
    parser.add_argument(
        "--train-fraction",
        type=float,
        default=defaults.train_fraction,
        help=f"Share of rows used for training (default: {defaults.train_fraction}).",
    )
    parser.add_argument(
        "--level",
        type=float,
        default=defaults.level,
        help=f"Confidence level of all intervals (default: {defaults.level}).",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip rendering the regression figures.",
    )
    parser.add_argument(
        "--no-tables",
        action="store_true",
        help="Skip writing CSV tables.",
    )
    return parser


def main(argv=None):
    """Main execution function with step-level logging."""
    args = _build_arg_parser().parse_args(argv)

    os.makedirs(args.output_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(
                os.path.join(args.output_dir, "iris_analysis.log"), mode="w"
            ),
        ],
    )

    config = AnalysisConfig(
        seed=args.seed,
        train_fraction=args.train_fraction,
        level=args.level,
        output_dir=args.output_dir,
        make_plots=not args.no_plots,
        save_tables=not args.no_tables,
        data_path=args.data,
    )

    start_time = time.time()
    logging.info("Initializing Iris walkthrough (seed=%d)", config.seed)
    try:
        artifacts = run_walkthrough(config)
    except ValueError as exc:
        logging.error("Analysis aborted: %s", exc)
        return 1

    print_reports(artifacts["reports"])

    logging.info("Total execution time: %.2f seconds", time.time() - start_time)
    logging.info("Generated output files:")
    for path in artifacts["plot_paths"]:
        logging.info("  - Figure: %s", path)
    for path in artifacts["table_paths"].values():
        logging.info("  - Table: %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
