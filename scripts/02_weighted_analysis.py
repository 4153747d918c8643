from __future__ import annotations

import argparse
import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

_mpl_cache_dir = Path(tempfile.gettempdir()) / "matplotlib"
_mpl_cache_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", str(_mpl_cache_dir))

import pandas as pd  # noqa: E402


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nonresponse.analysis.weighted_stats import (  # noqa: E402
    compare_statistics,
    weighted_linear_regression,
)
from nonresponse.config import (  # noqa: E402
    ALPHA,
    LOG_FILE,
    OUTCOME_COL,
    OUTPUTS_DIR,
    PREDICTOR_COLS,
    REPLICATION_FACTOR,
    REPORT_DIGITS,
    WEIGHT_COL,
    WEIGHTED_FILE,
)
from nonresponse.data.replicate import replicate_dataset  # noqa: E402
from nonresponse.data.validate import assert_required_columns  # noqa: E402
from nonresponse.reporting.figures import plot_coefficient_comparison  # noqa: E402
from nonresponse.reporting.tables import comparison_frame, regression_table, write_table  # noqa: E402
from nonresponse.utils.logging import get_logger, package_versions, write_json  # noqa: E402


RULE = "#" + "-" * 79
MODEL_NAMES = ("Unweighted Regression Model", "Weighted Regression Model")


def fit_pair(df: pd.DataFrame, outcome: str, predictors: list, weight_col: str) -> dict:
    y = df[outcome]
    X = df[predictors]
    return {
        MODEL_NAMES[0]: weighted_linear_regression(y, X, alpha=ALPHA),
        MODEL_NAMES[1]: weighted_linear_regression(y, X, df[weight_col], alpha=ALPHA),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Step 3: unweighted vs. weighted means, correlations and regressions.")
    parser.add_argument("--in-parquet", type=Path, default=WEIGHTED_FILE, help="Weighted dataset from step 01.")
    parser.add_argument("--outcome", default=OUTCOME_COL)
    parser.add_argument("--predictors", nargs="+", default=PREDICTOR_COLS)
    parser.add_argument("--weight-col", default=WEIGHT_COL)
    parser.add_argument(
        "--replicate-k", type=int, default=REPLICATION_FACTOR, help="Replicate the data k times and re-fit (0 = skip)."
    )
    parser.add_argument("--outdir", type=Path, default=OUTPUTS_DIR, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    if not args.in_parquet.exists():
        raise SystemExit(f"Weighted dataset not found: {args.in_parquet}. Run scripts/01_estimate_weights.py first.")
    if args.replicate_k < 0:
        raise SystemExit("--replicate-k must be zero or a positive integer.")

    tables_dir = args.outdir / "tables"
    figures_dir = args.outdir / "figures"
    logs_dir = args.outdir / "logs"
    log = get_logger("nonresponse.weighted_analysis", logs_dir / f"02_{LOG_FILE}")

    df = pd.read_parquet(args.in_parquet)
    predictors = list(args.predictors)
    try:
        assert_required_columns(df, [args.outcome, args.weight_col] + predictors)
    except ValueError as exc:
        raise SystemExit(str(exc))

    log.info("%s\n# Step 3: Unweighted and Weighted Data Analysis\n%s", RULE, RULE)
    log.info("Started %s", datetime.now(timezone.utc).isoformat())

    report = compare_statistics(df, args.outcome, predictors, args.weight_col, alpha=ALPHA)
    comparisons = comparison_frame(report)
    write_table(comparisons, tables_dir / "weighted_vs_unweighted.csv")

    # An intercept-only regression estimates the mean of y, with SE and CI.
    means = {
        "Unweighted mean": weighted_linear_regression(df[args.outcome], alpha=ALPHA),
        "Weighted mean": weighted_linear_regression(df[args.outcome], None, df[args.weight_col], alpha=ALPHA),
    }
    mean_table = regression_table(means, digits=REPORT_DIGITS)
    log.info("\n# Unweighted and weighted means of `%s'\n%s", args.outcome, mean_table.to_string(index=False))
    write_table(mean_table, tables_dir / "means.csv")

    for c in report.comparisons:
        if c.statistic.startswith("correlation:"):
            if c.error:
                log.info("# Correlation %s: %s", c.statistic.split(":", 1)[1], c.error)
                continue
            log.info(
                "# Correlation between `%s' and `%s': unweighted %.3f | weighted %.3f",
                args.outcome,
                c.statistic.split(":", 1)[1],
                c.unweighted,
                c.weighted,
            )

    models = fit_pair(df, args.outcome, predictors, args.weight_col)
    reg_table = regression_table(models, digits=REPORT_DIGITS, ci=True)
    log.info("\n%s\n# Report model summaries in a single table\n%s\n%s", RULE, RULE, reg_table.to_string(index=False))
    write_table(reg_table, tables_dir / "regression_models.csv")
    plot_coefficient_comparison(models, predictors[0], figures_dir / "coefficient_weighted_vs_unweighted.png")

    run_meta = {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "argv": sys.argv,
        "packages": package_versions(["pandas", "numpy", "statsmodels", "matplotlib", "pyarrow"]),
        "input_parquet": str(args.in_parquet),
        "rows": int(len(df)),
        "outcome": args.outcome,
        "predictors": predictors,
        "weight_col": args.weight_col,
        "statistic_errors": {c.statistic: c.error for c in report.comparisons if c.error},
        "replicate_k": args.replicate_k,
    }

    if args.replicate_k > 0:
        big = replicate_dataset(df, args.replicate_k)
        log.info(
            "\n%s\n# Replicate the data %d times and re-do regression analyses\n%s", RULE, args.replicate_k, RULE
        )
        log.info("# Total n cases (rows) and total p variables (columns): %d x %d", *big.shape)

        big_models = fit_pair(big, args.outcome, predictors, args.weight_col)
        big_ci = regression_table(big_models, digits=REPORT_DIGITS, ci=True)
        big_se = regression_table(big_models, digits=REPORT_DIGITS, ci=False, stars=True)
        log.info("%s\n\n%s", big_ci.to_string(index=False), big_se.to_string(index=False))
        write_table(big_ci, tables_dir / f"regression_models_k{args.replicate_k}.csv")
        write_table(big_se, tables_dir / f"regression_models_k{args.replicate_k}_se.csv")
        plot_coefficient_comparison(
            big_models, predictors[0], figures_dir / f"coefficient_weighted_vs_unweighted_k{args.replicate_k}.png"
        )
        run_meta["replicated_rows"] = int(len(big))

    write_json(logs_dir / "analysis_run_metadata.json", run_meta)
    log.info("\nFinished %s", datetime.now(timezone.utc).isoformat())
    log.info("Wrote analysis artifacts to %s/", args.outdir)


if __name__ == "__main__":
    main()
