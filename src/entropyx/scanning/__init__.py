"""Metrics ingestion: language detection, line counting, external complexity analysis."""

from .languages import LANGUAGES, LanguageConfig, detect_language
from .lizard import FileComplexity, LizardAnalyzer
from .pipeline import ScanPipeline, maintainability_index
from .sloc import count_sloc

__all__ = [
    "LANGUAGES",
    "LanguageConfig",
    "detect_language",
    "FileComplexity",
    "LizardAnalyzer",
    "ScanPipeline",
    "maintainability_index",
    "count_sloc",
]
