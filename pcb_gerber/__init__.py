"""
pcb_gerber package init.

Analyzes an uploaded Gerber/Excellon package (single file or ZIP) and
returns one board specification for pre-filling a PCB quote.
"""

from .results import BoardAnalysisResult, Dimensions, FileAnalysis
from .ingest import RoleTag
from .engine import GerberPackageAnalyzer, analyze_gerber_package

__all__ = [
    "BoardAnalysisResult",
    "Dimensions",
    "FileAnalysis",
    "GerberPackageAnalyzer",
    "RoleTag",
    "analyze_gerber_package",
]
