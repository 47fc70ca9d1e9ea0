from __future__ import annotations

from typing import Optional

from .results import BoardAnalysisResult


def _fmt_mm(v: Optional[float]) -> str:
    return "n/a" if v is None else f"{v:.3f} mm"


def summarize_dimensions(result: BoardAnalysisResult) -> str:
    if result.dimensions is None:
        return "not detected"
    return f"{result.dimensions.width:.2f} x {result.dimensions.height:.2f} mm"


def generate_text_report(result: BoardAnalysisResult, layer_floor: int = 2) -> str:
    lines = []

    lines.append(f"Gerber analysis: {result.status.upper().replace('_', ' ')}")
    lines.append(f"Board size:      {summarize_dimensions(result)}")
    lines.append(
        f"Copper layers:   {result.estimated_layer_count(layer_floor)} "
        f"({result.layer_count} copper file(s) found)"
    )
    lines.append(f"Min trace width: {_fmt_mm(result.min_trace_width)}")
    lines.append(f"Min hole size:   {_fmt_mm(result.min_hole_size)}")
    drills = "n/a" if result.drill_count is None else str(result.drill_count)
    lines.append(f"Drill hits:      {drills} (vias: {'yes' if result.has_vias else 'no'})")
    lines.append(f"Gold fingers:    {'yes' if result.has_gold_fingers else 'no'}")
    if result.file_types:
        lines.append(f"File types:      {', '.join(result.file_types)}")
    lines.append("")

    if result.errors:
        lines.append(f"Errors ({len(result.errors)}):")
        for e in result.errors:
            lines.append(f"  - {e}")
    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        for w in result.warnings:
            lines.append(f"  - {w}")

    return "\n".join(lines)


def generate_markdown_report(result: BoardAnalysisResult, title: str = "board", layer_floor: int = 2) -> str:
    lines = []

    lines.append(f"# Gerber analysis - {title}")
    lines.append("")
    lines.append(f"- Status: **{result.status}**")
    lines.append(f"- Board size: **{summarize_dimensions(result)}**")
    lines.append(f"- Copper layers: **{result.estimated_layer_count(layer_floor)}**")
    lines.append("")

    lines.append("| Parameter | Value |")
    lines.append("|-----------|-------|")
    lines.append(f"| Min trace width | {_fmt_mm(result.min_trace_width)} |")
    lines.append(f"| Min hole size | {_fmt_mm(result.min_hole_size)} |")
    lines.append(f"| Drill hits | {'n/a' if result.drill_count is None else result.drill_count} |")
    lines.append(f"| Vias | {'yes' if result.has_vias else 'no'} |")
    lines.append(f"| Gold fingers | {'yes' if result.has_gold_fingers else 'no'} |")
    lines.append("")

    if result.file_types:
        lines.append("## Files")
        lines.append("")
        for ft in result.file_types:
            lines.append(f"- {ft}")
        lines.append("")

    for heading, items in (("Errors", result.errors), ("Warnings", result.warnings)):
        if not items:
            continue
        lines.append(f"## {heading}")
        lines.append("")
        for item in items:
            lines.append(f"- {item}")
        lines.append("")

    return "\n".join(lines)
