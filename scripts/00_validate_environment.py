import platform
import sys

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from nonresponse.config import RAW_FILE, WEIGHTED_FILE, LOGS_DIR  # noqa: E402
from nonresponse.utils.logging import package_versions, write_json  # noqa: E402


def main() -> None:
    info = {
        "python_version": sys.version,
        "platform": platform.platform(),
        "raw_file_exists": RAW_FILE.exists(),
        "weighted_file_exists": WEIGHTED_FILE.exists(),
        "packages": package_versions(["numpy", "pandas", "statsmodels", "matplotlib", "pyarrow", "pyreadstat"]),
    }
    write_json(LOGS_DIR / "environment_check.json", info)
    print("Wrote outputs/logs/environment_check.json")


if __name__ == "__main__":
    main()
