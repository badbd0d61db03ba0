"""Analysis result schema and parsing."""

from .processor import parse_analysis
from .types import AnalysisResult

__all__ = ["AnalysisResult", "parse_analysis"]
