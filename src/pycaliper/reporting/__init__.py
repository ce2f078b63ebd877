"""Console rendering and remote publishing of finished runs."""

from .console import build_results_table, display_results
from .publish import DISABLED, post_results, results_url

__all__ = ["DISABLED", "build_results_table", "display_results", "post_results", "results_url"]
