from pathlib import Path
from typing import Mapping

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from nonresponse.analysis.weighted_stats import RegressionResult  # noqa: E402


def save_figure(fig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=300, bbox_inches="tight")


def plot_coefficient_comparison(models: Mapping[str, RegressionResult], term: str, path: Path) -> None:
    """Point estimate and 95% CI of one coefficient across models (e.g. unweighted vs. weighted)."""

    names = list(models)
    est = [float(models[n].params[term]) for n in names]
    lo = [float(models[n].conf_low[term]) for n in names]
    hi = [float(models[n].conf_high[term]) for n in names]

    fig, ax = plt.subplots(figsize=(7, 0.9 * len(names) + 1.5))
    y = list(range(len(names)))
    ax.errorbar(
        est,
        y,
        xerr=[[e - l for e, l in zip(est, lo)], [h - e for e, h in zip(est, hi)]],
        fmt="o",
        capsize=4,
    )
    ax.axvline(0.0, color="grey", linewidth=0.8, linestyle="--")
    ax.set_yticks(y)
    ax.set_yticklabels(names)
    ax.set_xlabel(f"Coefficient of {term} (95% CI)")
    ax.set_title(f"{term}: Unweighted vs Weighted")
    fig.tight_layout()
    save_figure(fig, path)
    plt.close(fig)
