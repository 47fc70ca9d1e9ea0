from pathlib import Path
import sys

from pcb_gerber.report import generate_markdown_report
from pcb_gerber.results import BoardAnalysisResult

src = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("output/analysis.json")
result = BoardAnalysisResult.from_json(src.read_text(encoding="utf-8"))
md = generate_markdown_report(result, title=src.stem)
src.with_suffix(".md").write_text(md, encoding="utf-8")
