from __future__ import annotations

from pathlib import Path
import sys

from pcb_gerber.config import load_settings
from pcb_gerber.engine import analyze_gerber_package
from pcb_gerber.exceptions import PackageError
from pcb_gerber.logging import configure_logging
from pcb_gerber.report import generate_text_report


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/analyze_package.py <Gerber.zip | layer file> [settings.json] [-v]")
        raise SystemExit(1)

    args = [a for a in sys.argv[1:] if a != "-v"]
    configure_logging(verbose="-v" in sys.argv)

    package = Path(args[0])
    settings = load_settings(args[1]) if len(args) > 1 else load_settings("pcb_gerber.json")

    try:
        result = analyze_gerber_package(package.read_bytes(), package.name, settings)
    except PackageError as e:
        print(f"Analysis failed: {e}")
        raise SystemExit(2)

    print(result.to_json())
    print()
    print(generate_text_report(result, layer_floor=settings.layer_count_floor))


if __name__ == "__main__":
    main()
