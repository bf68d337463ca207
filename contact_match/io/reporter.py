"""Report generation for contact map matching results.

Provides CSV, JSON, and text summary reports for batch matching
results.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from contact_match import __version__


class MatchReporter:
    """Generate reports from contact map matching results."""

    def __init__(self, results: Optional[pd.DataFrame] = None):
        """Initialize the reporter.

        Args:
            results: Optional DataFrame of matching results.
        """
        self.results = results

    def set_results(self, results: pd.DataFrame) -> None:
        """Set the results DataFrame."""
        self.results = results

    def _require_results(self) -> pd.DataFrame:
        if self.results is None:
            raise ValueError("No results available")
        return self.results

    def to_csv(self, path: str | Path, **kwargs) -> None:
        """Save results to CSV file.

        Args:
            path: Output file path.
            **kwargs: Additional arguments to pandas to_csv.
        """
        self._require_results().to_csv(path, index=False, **kwargs)

    def to_json(
        self,
        path: str | Path,
        include_metadata: bool = True,
        **kwargs,
    ) -> None:
        """Save results to JSON file.

        Args:
            path: Output file path.
            include_metadata: Include generation metadata.
            **kwargs: Additional arguments to json.dump.
        """
        results = self._require_results()

        output = {
            "comparisons": json.loads(results.to_json(orient="records")),
        }

        if include_metadata:
            output["metadata"] = {
                "generated_at": datetime.now().isoformat(),
                "n_comparisons": len(results),
                "tool": "contact_match",
                "version": __version__,
            }

        with open(path, "w") as f:
            json.dump(output, f, indent=2, **kwargs)

    def filter_results(
        self,
        min_score: Optional[float] = None,
        feasible_only: bool = False,
    ) -> pd.DataFrame:
        """Filter results by score and feasibility.

        Args:
            min_score: Minimum similarity score to keep.
            feasible_only: Drop infeasible matchings.

        Returns:
            Filtered DataFrame.
        """
        filtered = self._require_results()

        if feasible_only:
            filtered = filtered[filtered["feasible"]]

        if min_score is not None:
            filtered = filtered[filtered["score"] >= min_score]

        return filtered

    def top_matches(self, n: int = 10) -> pd.DataFrame:
        """Highest-scoring comparisons.

        Args:
            n: Number of rows to return.

        Returns:
            DataFrame sorted by descending score.
        """
        results = self._require_results()
        return results.sort_values("score", ascending=False).head(n)

    def summary_report(self) -> str:
        """Generate text summary report.

        Returns:
            Formatted text report.
        """
        results = self._require_results()
        feasible = results[results["feasible"]]

        lines = [
            "=" * 60,
            "CONTACT MAP OVERLAP REPORT",
            "=" * 60,
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"Number of comparisons: {len(results)}",
            f"Infeasible matchings:  {len(results) - len(feasible)}",
        ]

        if len(feasible) > 0:
            lines.extend([
                "",
                "-" * 60,
                "SIMILARITY",
                "-" * 60,
                f"Score:           {feasible['score'].mean():.3f} ± {feasible['score'].std():.3f}",
                f"                 (range: {feasible['score'].min():.2f} - {feasible['score'].max():.2f})",
                f"Common contacts: {feasible['common_contacts'].mean():.1f} ± {feasible['common_contacts'].std():.1f}",
                f"Matched nodes:   {feasible['n_matched'].mean():.1f}",
            ])

        lines.extend([
            "",
            "-" * 60,
            "RUNTIME",
            "-" * 60,
            f"Iterations:      {results['iterations'].mean():.1f} per comparison",
            f"Total time:      {results['elapsed_time'].sum():.2f} s",
            "",
            "=" * 60,
        ])

        return "\n".join(lines)
