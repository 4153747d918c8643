from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

import numpy as np


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nonresponse.config import (  # noqa: E402
    ALPHA,
    LOG_FILE,
    MISSING_INDICATOR_COL,
    OUTPUTS_DIR,
    PROPENSITY_CATEGORICAL,
    PROPENSITY_COVARIATES,
    RAW_FILE,
    REPORT_DIGITS,
    WEIGHT_COL,
    WEIGHT_SUM_RTOL,
    WEIGHTED_FILE,
)
from nonresponse.data.coding import coerce_missingness_indicator, describe_dataset, summarize_missingness  # noqa: E402
from nonresponse.data.ingest import load_survey  # noqa: E402
from nonresponse.data.validate import assert_required_columns  # noqa: E402
from nonresponse.errors import WeightingError  # noqa: E402
from nonresponse.evaluation.diagnostics import covariate_balance, summarize_weights  # noqa: E402
from nonresponse.models.probit import fit_response_propensity  # noqa: E402
from nonresponse.reporting.tables import propensity_table, write_table  # noqa: E402
from nonresponse.utils.logging import get_logger, package_versions, write_json  # noqa: E402
from nonresponse.weighting.derive import derive_weights  # noqa: E402


RULE = "#" + "-" * 79


def main() -> None:
    parser = argparse.ArgumentParser(description="Step 1-2: probit model of missingness and normalized response weights.")
    parser.add_argument("--input", type=Path, default=RAW_FILE, help="Survey file (.sav, .csv, .xlsx, .parquet).")
    parser.add_argument("--nrows", type=int, default=None, help="Use only the first N rows (deterministic head).")
    parser.add_argument("--indicator", default=MISSING_INDICATOR_COL, help="Missingness indicator (1 = non-respondent).")
    parser.add_argument(
        "--covariates", nargs="+", default=PROPENSITY_COVARIATES, help="Fully observed Z-variables for the probit model."
    )
    parser.add_argument("--categorical", nargs="*", default=PROPENSITY_CATEGORICAL, help="Covariates to dummy-code.")
    parser.add_argument("--weight-col", default=WEIGHT_COL, help="Name of the normalized weight column.")
    parser.add_argument("--out-parquet", type=Path, default=WEIGHTED_FILE, help="Output parquet with weights added.")
    parser.add_argument("--outdir", type=Path, default=OUTPUTS_DIR, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")
    if not args.input.exists():
        raise SystemExit(f"Input file not found: {args.input}")

    tables_dir = args.outdir / "tables"
    logs_dir = args.outdir / "logs"
    log = get_logger("nonresponse.estimate_weights", logs_dir / f"01_{LOG_FILE}")

    log.info("%s\n# Response Propensity Weighting: estimate weights\n%s", RULE, RULE)
    log.info("Started %s", datetime.now(timezone.utc).isoformat())

    df = load_survey(args.input, nrows=args.nrows)
    try:
        assert_required_columns(df, [args.indicator] + list(args.covariates))
        missing = coerce_missingness_indicator(df[args.indicator])
    except ValueError as exc:
        raise SystemExit(str(exc))

    log.info("\n# Total n cases (rows) and total p variables (columns): %d x %d", *df.shape)
    log.info("\n# Summary statistics of variables\n%s", describe_dataset(df).to_string(index=False))
    write_table(summarize_missingness(df), tables_dir / "missingness_raw.csv")

    log.info("\n%s\n# Step 1: Estimate Raw Weights\n%s", RULE, RULE)
    log.info("# Probit regression to predict p(Missing)")
    try:
        model = fit_response_propensity(
            df, args.indicator, args.covariates, categorical=args.categorical, alpha=ALPHA
        )
    except ValueError as exc:
        raise SystemExit(str(exc))
    if not model.converged:
        log.warning("Probit model did not converge; weights may be unreliable.")

    ptable = propensity_table(model, digits=REPORT_DIGITS)
    log.info("Model: %s\n%s", model.formula, ptable.to_string(index=False))
    write_table(ptable, tables_dir / "probit_missingness.csv")
    write_table(model.summary, tables_dir / "probit_missingness_coefficients.csv")

    z_terms = model.summary.loc[model.summary["term"] != "Intercept"]
    n_sig = int((z_terms["p_value"] < ALPHA).sum())
    if n_sig == 0:
        log.warning("No Z-variable predicts missingness at alpha=%s; weighting may not be needed.", ALPHA)

    log.info("\n%s\n# Step 2: Transform into Normalized Weights\n%s", RULE, RULE)
    try:
        weights = derive_weights(missing.to_numpy(), model.fitted)
    except WeightingError as exc:
        raise SystemExit(f"Weight derivation failed: {exc}")

    weighted = df.copy()
    weighted[args.weight_col] = np.array(weights.normalized_weight)

    total = float(weighted[args.weight_col].sum())
    if not np.isclose(total, weights.group_count, rtol=WEIGHT_SUM_RTOL, atol=0.0):
        raise SystemExit(f"Normalized weights sum to {total}, expected {weights.group_count}.")

    log.info(
        "Respondents: %d | raw weight sum: %.4f | normalized weight sum: %.4f",
        weights.group_count,
        weights.weight_sum,
        total,
    )

    summary = summarize_weights(weights.normalized_weight, missing.to_numpy())
    log.info(
        "Kish DEFF: %.3f | effective N: %.1f (from n=%d) | weight range: [%.3f, %.3f]",
        summary.deff,
        summary.effective_n,
        summary.n_respondents,
        summary.weight_min,
        summary.weight_max,
    )

    balance = covariate_balance(df, missing.to_numpy(), weights.normalized_weight, args.covariates)
    log.info("\n# Covariate balance (Z-variables)\n%s", balance.round(REPORT_DIGITS).to_string(index=False))
    write_table(balance, tables_dir / "covariate_balance.csv")

    log.info("\n# Check data: first 10 and last 5 cases\n%s", weighted.head(10).round(3).to_string())
    log.info("%s", weighted.tail(5).round(3).to_string())

    args.out_parquet.parent.mkdir(parents=True, exist_ok=True)
    weighted.to_parquet(args.out_parquet, index=False)

    write_json(
        logs_dir / "weights_run_metadata.json",
        {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            "argv": sys.argv,
            "packages": package_versions(["pandas", "numpy", "statsmodels", "pyarrow"]),
            "input": str(args.input),
            "nrows": args.nrows,
            "rows": int(len(df)),
            "formula": model.formula,
            "converged": model.converged,
            "n_respondents": weights.group_count,
            "n_nonrespondents": int(len(df) - weights.group_count),
            "raw_weight_sum": weights.weight_sum,
            "normalized_weight_sum": total,
            "deff": summary.deff,
            "effective_n": summary.effective_n,
            "output_parquet": str(args.out_parquet),
        },
    )

    log.info("\nWrote %s", args.out_parquet)


if __name__ == "__main__":
    main()
