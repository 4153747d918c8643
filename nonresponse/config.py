from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
PROCESSED_DIR = DATA_DIR / "processed"

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
FIGURES_DIR = OUTPUTS_DIR / "figures"
TABLES_DIR = OUTPUTS_DIR / "tables"
LOGS_DIR = OUTPUTS_DIR / "logs"

# Class example: 20 sampled customers, 10 respondents and 10 non-respondents.
RAW_FILE = RAW_DIR / "unit_nonresponse_example.csv"
WEIGHTED_FILE = PROCESSED_DIR / "unit_nonresponse_weighted.parquet"
LOG_FILE = "unit_nonresponse.log"

# Missingness indicator: 1 = non-respondent, 0 = respondent.
MISSING_INDICATOR_COL = "M_missing"

# Z-variables: known for respondents and non-respondents (e.g. from the sampling frame).
PROPENSITY_COVARIATES = ["Z_gender", "Z_account"]
PROPENSITY_CATEGORICAL = []

# Substantive analysis variables, observed for respondents only.
OUTCOME_COL = "Y_loyalty"
PREDICTOR_COLS = ["X_psq"]

WEIGHT_COL = "norm_weight"

# Replicate the data frame k times (20 -> 2000 cases) and re-run the regressions.
REPLICATION_FACTOR = 100

ALPHA = 0.05
REPORT_DIGITS = 3

# Tolerance for sum(normalized weights) == number of respondents.
WEIGHT_SUM_RTOL = 1e-9
