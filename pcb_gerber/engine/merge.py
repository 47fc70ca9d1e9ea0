# pcb_gerber/engine/merge.py

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..ingest.layer_roles import RoleTag
from ..results import BoardAnalysisResult, Dimensions, FileAnalysis


def merge_analyses(results: Sequence[FileAnalysis]) -> BoardAnalysisResult:
    """
    Reduce per-file analyses into one board-level result.

    - dimensions: the first outline file with dimensions wins as-is;
      without one, width and height are each maximized over all files.
    - layer_roles: every copper role, duplicates kept (len() = layer count).
    - min_trace_width / min_hole_size: minimum of the values present.
    - errors / warnings: concatenated in file order.

    Drill and via figures are left to summarize_drills().
    """
    if not results:
        raise ValueError("merge_analyses() needs at least one file analysis")

    warnings = [w for r in results for w in r.warnings]

    return BoardAnalysisResult(
        dimensions=_merge_dimensions(results, warnings),
        layer_roles=[r.role for r in results if r.role is not None and r.role.is_copper],
        file_types=_distinct_labels(results),
        has_gold_fingers=any(r.has_gold_fingers for r in results),
        min_trace_width=_min_present(r.min_trace_width for r in results),
        min_hole_size=_min_present(r.min_hole_size for r in results),
        errors=[e for r in results for e in r.errors],
        warnings=warnings,
    )


def summarize_drills(results: Sequence[FileAnalysis]) -> Tuple[bool, Optional[int]]:
    """
    Return (has_vias, drill_count).

    drill_count is the number of files classified Drill plus the drill hits
    found in drill content (Drill-role files and any file whose content
    parsed as Excellon). It is None when neither is present.
    """
    drill_files = 0
    hits = 0
    contributed = False
    for r in results:
        if r.role is RoleTag.DRILL:
            drill_files += 1
            contributed = True
        if r.role is RoleTag.DRILL or r.content_format == "excellon":
            hits += r.drill_hits
            contributed = True

    if not contributed:
        return False, None
    total = drill_files + hits
    return total > 0, total


def _merge_dimensions(results: Sequence[FileAnalysis], warnings: List[str]) -> Optional[Dimensions]:
    outlines = [r for r in results if r.is_board_outline and r.dimensions is not None]
    if outlines:
        if len(outlines) > 1:
            warnings.append(
                f"Multiple board outline files detected. Using dimensions from '{outlines[0].name}'."
            )
        return outlines[0].dimensions

    dims = [r.dimensions for r in results if r.dimensions is not None]
    if not dims:
        return None
    return Dimensions(
        width=max(d.width for d in dims),
        height=max(d.height for d in dims),
    )


def _min_present(values) -> Optional[float]:
    present = [v for v in values if v is not None]
    return min(present) if present else None


def _distinct_labels(results: Sequence[FileAnalysis]) -> List[str]:
    seen: List[str] = []
    for r in results:
        if r.role is not None and r.role.value not in seen:
            seen.append(r.role.value)
    return seen
