# pcb_gerber/engine/__init__.py

from .merge import merge_analyses, summarize_drills
from .run import (
    GerberPackageAnalyzer,
    analyze_file,
    analyze_file_list,
    analyze_gerber_package,
)

__all__ = [
    "GerberPackageAnalyzer",
    "analyze_file",
    "analyze_file_list",
    "analyze_gerber_package",
    "merge_analyses",
    "summarize_drills",
]
