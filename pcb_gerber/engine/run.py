# pcb_gerber/engine/run.py

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import List, Optional, Sequence

from ..config import AnalysisSettings
from ..exceptions import AnalysisSuperseded
from ..geometry import parse_gerber_content
from ..ingest import RawFile, RoleTag, classify_file, extract_package, is_gold_finger_name
from ..logging import get_logger
from ..results import BoardAnalysisResult, FileAnalysis
from .merge import merge_analyses, summarize_drills

logger = get_logger("engine.run")


def analyze_file(raw: RawFile, settings: Optional[AnalysisSettings] = None) -> FileAnalysis:
    """
    Classify and parse one file.

    Never raises: an unexpected failure is returned as a FileAnalysis
    carrying a single error, so sibling files are unaffected.
    """
    settings = settings or AnalysisSettings()
    try:
        return _analyze_file(raw, settings)
    except Exception as e:  # noqa: BLE001
        logger.warning("Analysis of %s failed: %s", raw.name, e, exc_info=True)
        return FileAnalysis(
            name=raw.name,
            role=RoleTag.UNKNOWN,
            has_gold_fingers=is_gold_finger_name(raw.name),
            errors=[f"Failed to analyze {raw.name}: {e}"],
            warnings=list(raw.warnings),
        )


def _analyze_file(raw: RawFile, settings: AnalysisSettings) -> FileAnalysis:
    role = classify_file(raw.name)
    analysis = parse_gerber_content(raw.content, name=raw.name, role=role, settings=settings)

    warnings = list(raw.warnings)
    if role is RoleTag.UNKNOWN:
        if analysis.content_format == "excellon":
            role = RoleTag.DRILL
        elif analysis.content_format == "gerber":
            role = RoleTag.GENERIC_GERBER
        note = f" Treated as {role.value} based on its content." if role is not RoleTag.UNKNOWN else ""
        warnings.append(f"Could not identify the layer type of '{raw.name}' from its file name.{note}")
    warnings.extend(analysis.warnings)

    logger.debug(
        "%s: role=%s format=%s dimensions=%s",
        raw.name, role.value, analysis.content_format, analysis.dimensions,
    )
    return analysis.model_copy(update={
        "role": role,
        "has_gold_fingers": is_gold_finger_name(raw.name),
        "warnings": warnings,
    })


def analyze_file_list(files: Sequence[RawFile], settings: Optional[AnalysisSettings] = None) -> List[FileAnalysis]:
    """
    Analyze files concurrently and return results in input order.

    Blocks until every file is done; completion order does not matter.
    """
    settings = settings or AnalysisSettings()
    if not files:
        return []

    workers = min(settings.max_workers, len(files))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(analyze_file, f, settings) for f in files]
        return [fut.result() for fut in futures]


def analyze_gerber_package(
    blob: bytes,
    filename: str,
    settings: Optional[AnalysisSettings] = None,
) -> BoardAnalysisResult:
    """
    High level entry point:

    - Extracts the upload (ZIP or single file) into text files.
    - Classifies and parses each file concurrently.
    - Merges the per-file results into one board specification.

    Raises PackageError subclasses only for fatal package problems (empty,
    unreadable or unsupported archive). Everything else ends up in the
    result's errors/warnings.
    """
    settings = settings or AnalysisSettings()
    files = extract_package(blob, filename, settings)
    analyses = analyze_file_list(files, settings)
    return _build_result(analyses)


def _build_result(analyses: Sequence[FileAnalysis]) -> BoardAnalysisResult:
    merged = merge_analyses(analyses)
    has_vias, drill_count = summarize_drills(analyses)
    return merged.model_copy(update={"has_vias": has_vias, "drill_count": drill_count})


class GerberPackageAnalyzer:
    """
    Analysis front for one upload slot.

    Starting a new analysis supersedes any run still in flight: the older
    run raises AnalysisSuperseded instead of returning, so its results are
    never merged or shown. Runs share nothing else.
    """

    def __init__(self, settings: Optional[AnalysisSettings] = None) -> None:
        self.settings = settings or AnalysisSettings()
        self._lock = Lock()
        self._generation = 0

    def _begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def analyze(self, blob: bytes, filename: str) -> BoardAnalysisResult:
        generation = self._begin()

        files = extract_package(blob, filename, self.settings)
        analyses = analyze_file_list(files, self.settings)

        if not self.is_current(generation):
            logger.warning("Discarding superseded analysis of %s (request %d)", filename, generation)
            raise AnalysisSuperseded(filename, generation)

        return _build_result(analyses)
