"""
End-to-end tests for analyze_gerber_package() and GerberPackageAnalyzer
"""

import io
import unittest
import zipfile
from unittest.mock import patch

import pcb_gerber.engine.run as run_module
from pcb_gerber import GerberPackageAnalyzer, RoleTag, analyze_gerber_package
from pcb_gerber.config import AnalysisSettings
from pcb_gerber.engine import analyze_file, analyze_file_list
from pcb_gerber.exceptions import AnalysisSuperseded, EmptyPackageError
from pcb_gerber.ingest import RawFile
from pcb_gerber.report import generate_markdown_report, generate_text_report


OUTLINE_50x30 = b"""\
%FSLAX33Y33*%
%MOMM*%
%ADD10C,0.100*%
D10*
X0Y0D02*
X50000Y0D01*
X50000Y30000D01*
X0Y30000D01*
X0Y0D01*
M02*
"""

OUTLINE_70x20 = b"""\
%FSLAX33Y33*%
%MOMM*%
%ADD10C,0.100*%
D10*
X0Y0D02*
X70000Y20000D01*
M02*
"""

COPPER_80x80 = b"""\
%FSLAX33Y33*%
%MOMM*%
%ADD10C,0.200*%
%ADD11R,0.600X0.400*%
D10*
X-15000Y-25000D02*
X65000Y55000D01*
D11*
X10000Y10000D03*
M02*
"""

DRILL_3_HITS = b"""\
M48
METRIC,TZ
T1C0.300
T2C0.800
%
G90
G05
T1
X10.0Y10.0
X20.0Y10.0
T2
X20.0Y30.0
M30
"""

GARBAGE = b"this is not a gerber file\nrandom bytes ### !!!\n"


def _zip(entries):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()


FULL_PACKAGE = _zip([
    ("board.gtl", COPPER_80x80),
    ("board.gbl", COPPER_80x80),
    ("board.gts", COPPER_80x80),
    ("board.gko", OUTLINE_50x30),
    ("board.drl", DRILL_3_HITS),
    ("goldfinger.gbr", COPPER_80x80),
])


class TestAnalyzeGerberPackage(unittest.TestCase):

    def test_full_package(self):
        result = analyze_gerber_package(FULL_PACKAGE, "board.zip")

        self.assertAlmostEqual(result.dimensions.width, 50.0)
        self.assertAlmostEqual(result.dimensions.height, 30.0)
        self.assertEqual(result.layer_roles, [RoleTag.TOP_COPPER, RoleTag.BOTTOM_COPPER])
        self.assertEqual(
            result.file_types,
            ["Top Copper", "Bottom Copper", "Top Soldermask", "Outline", "Drill", "Gerber"],
        )
        self.assertAlmostEqual(result.min_trace_width, 0.1)
        self.assertAlmostEqual(result.min_hole_size, 0.3)
        self.assertEqual(result.drill_count, 4)
        self.assertTrue(result.has_vias)
        self.assertTrue(result.has_gold_fingers)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.status, "complete")

    def test_drill_count_is_files_plus_hits(self):
        result = analyze_gerber_package(_zip([("a.drl", DRILL_3_HITS)]), "board.zip")

        self.assertEqual(result.drill_count, 4)
        self.assertTrue(result.has_vias)

    def test_name_containing_pth_is_not_a_drill_file(self):
        blob = _zip([("board.gko", OUTLINE_50x30), ("depth_map.gbr", COPPER_80x80)])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertNotIn("Drill", result.file_types)
        self.assertFalse(result.has_vias)
        self.assertIsNone(result.drill_count)

    def test_single_layer_upload(self):
        result = analyze_gerber_package(COPPER_80x80, "board.gtl")

        self.assertAlmostEqual(result.dimensions.width, 80.0)
        self.assertAlmostEqual(result.dimensions.height, 80.0)
        self.assertEqual(result.layer_count, 1)
        self.assertEqual(result.estimated_layer_count(), 2)
        self.assertFalse(result.has_vias)
        self.assertIsNone(result.drill_count)

    def test_one_bad_file_does_not_spoil_the_rest(self):
        blob = _zip([("board.gko", OUTLINE_50x30), ("broken.gtl", GARBAGE)])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertAlmostEqual(result.dimensions.width, 50.0)
        self.assertAlmostEqual(result.dimensions.height, 30.0)
        self.assertAlmostEqual(result.min_trace_width, 0.1)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("broken.gtl", result.errors[0])
        self.assertEqual(result.layer_roles, [RoleTag.TOP_COPPER])

    def test_bad_file_with_stray_percent_adds_one_error(self):
        blob = _zip([("board.gko", OUTLINE_50x30), ("notes.gtl", b"copper is 100% done\nsee email\n")])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertAlmostEqual(result.dimensions.width, 50.0)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("notes.gtl", result.errors[0])

    def test_multiple_outlines_first_wins(self):
        blob = _zip([("a.gko", OUTLINE_50x30), ("b.gm1", OUTLINE_70x20)])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertAlmostEqual(result.dimensions.width, 50.0)
        self.assertEqual(
            result.warnings,
            ["Multiple board outline files detected. Using dimensions from 'a.gko'."],
        )

    def test_unknown_name_is_refined_by_content(self):
        blob = _zip([("board.gko", OUTLINE_50x30), ("holes.dat", DRILL_3_HITS)])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertIn("Drill", result.file_types)
        self.assertEqual(result.drill_count, 4)
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("holes.dat", result.warnings[0])
        self.assertIn("Treated as Drill", result.warnings[0])

    def test_nothing_parseable_fails_without_raising(self):
        blob = _zip([("notes.gtl", GARBAGE), ("more.gbl", GARBAGE)])
        result = analyze_gerber_package(blob, "board.zip")

        self.assertIsNone(result.dimensions)
        self.assertEqual(result.status, "failed")
        self.assertEqual(len(result.errors), 2)

    def test_empty_archive_raises(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("gerbers/", b"")
        with self.assertRaises(EmptyPackageError):
            analyze_gerber_package(buf.getvalue(), "empty.zip")

    def test_analysis_is_idempotent(self):
        first = analyze_gerber_package(FULL_PACKAGE, "board.zip")
        second = analyze_gerber_package(FULL_PACKAGE, "board.zip")
        self.assertEqual(first.model_dump(), second.model_dump())

    def test_worker_count_does_not_change_result(self):
        serial = analyze_gerber_package(FULL_PACKAGE, "board.zip", AnalysisSettings(max_workers=1))
        parallel = analyze_gerber_package(FULL_PACKAGE, "board.zip", AnalysisSettings(max_workers=6))
        self.assertEqual(serial.model_dump(), parallel.model_dump())


class TestAnalyzeFile(unittest.TestCase):

    def test_unexpected_failure_is_contained(self):
        raw = RawFile(name="board.gtl", content="G04*\n")
        with patch.object(run_module, "parse_gerber_content", side_effect=RuntimeError("boom")):
            analysis = analyze_file(raw)

        self.assertEqual(analysis.errors, ["Failed to analyze board.gtl: boom"])
        self.assertEqual(analysis.role, RoleTag.UNKNOWN)
        self.assertIsNone(analysis.dimensions)

    def test_placeholder_warnings_are_carried(self):
        raw = RawFile(name="logo.gto", content="", warnings=("Could not decode 'logo.gto'",))
        analysis = analyze_file(raw)

        self.assertEqual(analysis.role, RoleTag.TOP_SILKSCREEN)
        self.assertEqual(analysis.warnings, ["Could not decode 'logo.gto'"])
        self.assertEqual(analysis.errors, ["File 'logo.gto' is empty"])

    def test_unknown_name_and_content(self):
        analysis = analyze_file(RawFile(name="readme.md", content="Board notes\n"))
        self.assertEqual(analysis.role, RoleTag.UNKNOWN)
        self.assertEqual(
            analysis.warnings,
            ["Could not identify the layer type of 'readme.md' from its file name."],
        )

    def test_results_follow_input_order(self):
        files = [
            RawFile(name=f"layer{i}.gbr", content=(OUTLINE_50x30 if i % 2 else COPPER_80x80).decode())
            for i in range(12)
        ]
        analyses = analyze_file_list(files, AnalysisSettings(max_workers=4))
        self.assertEqual([a.name for a in analyses], [f.name for f in files])

    def test_empty_file_list(self):
        self.assertEqual(analyze_file_list([]), [])


class TestGerberPackageAnalyzer(unittest.TestCase):

    def test_newer_request_supersedes_older(self):
        analyzer = GerberPackageAnalyzer()
        first_blob = _zip([("first.gko", OUTLINE_50x30)])
        second_blob = _zip([("second.gko", OUTLINE_70x20)])

        real_analyze_file_list = run_module.analyze_file_list
        calls = []
        newer_results = []

        def interleaved(files, settings):
            calls.append(files)
            if len(calls) == 1:
                # A second upload arrives while the first is still being parsed.
                newer_results.append(analyzer.analyze(second_blob, "second.zip"))
            return real_analyze_file_list(files, settings)

        with patch.object(run_module, "analyze_file_list", side_effect=interleaved):
            with self.assertRaises(AnalysisSuperseded) as ctx:
                analyzer.analyze(first_blob, "first.zip")

        self.assertEqual(ctx.exception.filename, "first.zip")
        self.assertEqual(ctx.exception.generation, 1)
        self.assertAlmostEqual(newer_results[0].dimensions.width, 70.0)
        self.assertAlmostEqual(newer_results[0].dimensions.height, 20.0)

    def test_sequential_requests_complete(self):
        analyzer = GerberPackageAnalyzer(AnalysisSettings(max_workers=2))
        first = analyzer.analyze(FULL_PACKAGE, "board.zip")
        second = analyzer.analyze(FULL_PACKAGE, "board.zip")
        self.assertEqual(first.model_dump(), second.model_dump())


class TestReports(unittest.TestCase):

    def test_text_and_markdown_reports(self):
        result = analyze_gerber_package(FULL_PACKAGE, "board.zip")

        text = generate_text_report(result)
        self.assertIn("Board size:      50.00 x 30.00 mm", text)
        self.assertIn("Copper layers:   2 (2 copper file(s) found)", text)
        self.assertIn("Min hole size:   0.300 mm", text)
        self.assertIn("Gold fingers:    yes", text)

        md = generate_markdown_report(result, title="board.zip")
        self.assertTrue(md.startswith("# Gerber analysis - board.zip"))
        self.assertIn("| Drill hits | 4 |", md)

    def test_failed_report_lists_errors(self):
        result = analyze_gerber_package(GARBAGE, "junk.gtl")
        text = generate_text_report(result)
        self.assertIn("Board size:      not detected", text)
        self.assertIn("Errors (1):", text)


if __name__ == "__main__":
    unittest.main()
