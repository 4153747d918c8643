import json
import subprocess
import sys
from pathlib import Path

import pandas as pd


def test_estimate_weights_and_analysis_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    weighted_parquet = tmp_path / "weighted.parquet"
    outdir = tmp_path / "outputs"

    subprocess.run(
        [
            sys.executable,
            str(repo_root / "scripts" / "01_estimate_weights.py"),
            "--out-parquet",
            str(weighted_parquet),
            "--outdir",
            str(outdir),
        ],
        cwd=repo_root,
        check=True,
    )

    df = pd.read_parquet(weighted_parquet)
    assert len(df) == 20
    assert abs(df["norm_weight"].sum() - 10.0) < 1e-9
    assert (df.loc[df["M_missing"] == 1, "norm_weight"] == 0.0).all()
    assert (df.loc[df["M_missing"] == 0, "norm_weight"] > 0.0).all()

    meta = json.loads((outdir / "logs" / "weights_run_metadata.json").read_text(encoding="utf-8"))
    assert meta["n_respondents"] == 10
    assert meta["n_nonrespondents"] == 10

    subprocess.run(
        [
            sys.executable,
            str(repo_root / "scripts" / "02_weighted_analysis.py"),
            "--in-parquet",
            str(weighted_parquet),
            "--outdir",
            str(outdir),
            "--replicate-k",
            "100",
        ],
        cwd=repo_root,
        check=True,
    )

    required_paths = [
        "tables/missingness_raw.csv",
        "tables/probit_missingness.csv",
        "tables/probit_missingness_coefficients.csv",
        "tables/covariate_balance.csv",
        "tables/weighted_vs_unweighted.csv",
        "tables/means.csv",
        "tables/regression_models.csv",
        "tables/regression_models_k100.csv",
        "tables/regression_models_k100_se.csv",
        "figures/coefficient_weighted_vs_unweighted.png",
        "figures/coefficient_weighted_vs_unweighted_k100.png",
        "logs/01_unit_nonresponse.log",
        "logs/02_unit_nonresponse.log",
        "logs/analysis_run_metadata.json",
    ]
    for rel in required_paths:
        assert (outdir / rel).exists(), f"Missing expected artifact: {rel}"

    models = pd.read_csv(outdir / "tables" / "regression_models_k100.csv")
    assert models.loc[models["term"] == "Num. obs.", "Unweighted Regression Model"].item() == "1000"
    assert models.loc[models["term"] == "Num. obs.", "Weighted Regression Model"].item() == "1000"
